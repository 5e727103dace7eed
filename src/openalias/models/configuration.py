"""Index configuration — What is needed to create a concrete index.

The create index API has three parts that we carry here:
  - the index name (path parameter)
  - query parameters such as ``timeout`` and ``wait_for_active_shards``
  - the request body, made of ``mappings`` and ``settings``

Mappings and settings are kept as opaque JSON text; the backend validates
them, we only pass them through.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from openalias.adapters.base.exceptions import InvalidConfiguration, ResponseDeserializationError


class IndexParameters(BaseModel):
    """Query parameters of the create index call."""

    timeout: str = Field(default="30s", description="Backend-side request timeout, e.g. '10s'")
    wait_for_active_shards: str = Field(default="1", description="Shard copies to wait for, or 'all'")


class IndexConfiguration(BaseModel):
    """A complete index creation request."""

    name: str = Field(description="Concrete index name")
    parameters: IndexParameters = Field(default_factory=IndexParameters)
    settings: str = Field(default="{}", description="Index settings as JSON text")
    mappings: str = Field(default="{}", description="Index mappings as JSON text")

    @field_validator("settings", "mappings", mode="before")
    @classmethod
    def _fragment_text(cls, v: Any) -> Any:
        """Accept a fragment as JSON text, as {"value": text} or as a JSON object."""
        if isinstance(v, dict) and set(v) == {"value"} and isinstance(v["value"], str):
            return v["value"]
        if isinstance(v, dict | list):
            return json.dumps(v)
        return v

    @classmethod
    def from_json(cls, value: str) -> IndexConfiguration:
        """Deserialize a stored configuration document.

        Raises:
            InvalidConfiguration: If ``value`` is not a valid configuration.
        """
        try:
            return cls.model_validate_json(value)
        except ValidationError as e:
            raise InvalidConfiguration(f"could not deserialize index configuration: {e} / {value}") from e

    def body(self) -> dict[str, Any]:
        """Return the create index request body.

        Raises:
            ResponseDeserializationError: If mappings or settings is not valid JSON.
        """
        try:
            return {"mappings": json.loads(self.mappings), "settings": json.loads(self.settings)}
        except json.JSONDecodeError as e:
            raise ResponseDeserializationError(f"could not deserialize index configuration {self.name}: {e}") from e
