"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (OPENALIAS_ prefix)
  2. .env file
  3. YAML config file or keyword arguments
  4. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


class BackendSettings(BaseModel):
    """Search backend connection."""

    hosts: list[str] = Field(default_factory=lambda: ["http://localhost:9200"], description="Backend host URLs")
    username: str | None = Field(default=None, description="Authentication username")
    password: str | None = Field(default=None, description="Authentication password")
    api_key: str | None = Field(default=None, description="Encoded API key")
    timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, v: Any) -> list[str]:
        """Parse hosts from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(h) for h in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        return list(v)


class IngestionSettings(BaseModel):
    """Bulk ingestion and document export."""

    chunk_size: int = Field(default=10, ge=1, description="Documents per bulk request")
    max_in_flight: int = Field(default=1, ge=1, description="Concurrent bulk requests per insertion")
    scroll_size: int = Field(default=1000, ge=1, description="Hits per scroll page")
    scroll_keep_alive: str = Field(default="1m", description="Scroll context lifetime between pages")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the OPENALIAS_ prefix.
    Nested settings use double underscores: OPENALIAS_BACKEND__TIMEOUT=10

    Example:
        OPENALIAS_BACKEND__HOSTS='["http://es-1:9200"]'
        OPENALIAS_INGESTION__CHUNK_SIZE=500
        OPENALIAS_OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = {
        "env_prefix": "OPENALIAS_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    backend: BackendSettings = Field(default_factory=BackendSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Keyword arguments carry the YAML values, so they rank below the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are used as defaults; environment variables
        still take precedence.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
