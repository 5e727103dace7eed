"""Elasticsearch storage — Versioned indices behind dataset aliases.

This storage talks to the Elasticsearch (v7+) or OpenSearch REST API
through a single shared ``httpx.AsyncClient``. It owns no state of its
own: indices, aliases and documents all live in the backend.

Publishing a new version of a dataset::

    async with ElasticsearchStorage(base_url="http://localhost:9200") as storage:
        config = IndexConfiguration(name=root_doctype_dataset_ts("book", "fr"), mappings=...)
        index, count = await storage.generate_index(config, documents)

The sequence create → insert → refresh → alias swap → delete old versions
is not atomic. Every step raises its own typed error and nothing is
rolled back; the caller decides whether to retry or clean up.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel

from openalias.adapters.base.adapter import IndexStorage, StorageHealth
from openalias.adapters.base.exceptions import BackendCallFailed, UnknownIndex
from openalias.adapters.elasticsearch.aliases import AliasRegistry
from openalias.adapters.elasticsearch.bulk import CHUNK_SIZE, BulkIngestionPipeline
from openalias.adapters.elasticsearch.indices import IndexLifecycleManager
from openalias.adapters.elasticsearch.response import ensure_success, json_object, send
from openalias.adapters.elasticsearch.scroll import SCROLL_KEEP_ALIVE, SCROLL_SIZE, DocumentRetriever
from openalias.models.configuration import IndexConfiguration
from openalias.models.index import Index
from openalias.models.naming import root_doctype_dataset

if TYPE_CHECKING:
    from openalias.config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ElasticsearchStorage(IndexStorage):
    """Index storage for Elasticsearch and OpenSearch.

    Args:
        base_url: Backend URL, e.g. ``"http://localhost:9200"``.
        username: Optional HTTP basic-auth username.
        password: Optional HTTP basic-auth password.
        api_key: Optional encoded API key.
        timeout: HTTP request timeout in seconds.
        verify_certs: Whether to verify TLS certificates.
        chunk_size: Documents per bulk request.
        max_in_flight: Concurrent bulk requests per insertion.
        scroll_size: Hits per page when streaming documents out.
        scroll_keep_alive: Scroll context lifetime between pages.
        client: Pre-built client; the storage does not close it.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:9200",
        username: str | None = None,
        password: str | None = None,
        api_key: str | None = None,
        timeout: float = 30.0,
        verify_certs: bool = True,
        chunk_size: int = CHUNK_SIZE,
        max_in_flight: int = 1,
        scroll_size: int = SCROLL_SIZE,
        scroll_keep_alive: str = SCROLL_KEEP_ALIVE,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._api_key = api_key
        self._timeout = timeout
        self._verify_certs = verify_certs
        self._chunk_size = chunk_size
        self._max_in_flight = max_in_flight
        self._scroll_size = scroll_size
        self._scroll_keep_alive = scroll_keep_alive
        self._client: httpx.AsyncClient | None = client
        self._owns_client = client is None

        self._indices: IndexLifecycleManager | None = None
        self._aliases: AliasRegistry | None = None
        self._bulk: BulkIngestionPipeline | None = None
        self._retriever: DocumentRetriever | None = None
        if client is not None:
            self._bind(client)

    @classmethod
    def from_settings(cls, settings: Settings) -> ElasticsearchStorage:
        """Build a storage from application settings."""
        backend = settings.backend
        ingestion = settings.ingestion
        return cls(
            base_url=backend.hosts[0] if backend.hosts else "http://localhost:9200",
            username=backend.username,
            password=backend.password,
            api_key=backend.api_key,
            timeout=backend.timeout,
            verify_certs=backend.verify_certs,
            chunk_size=ingestion.chunk_size,
            max_in_flight=ingestion.max_in_flight,
            scroll_size=ingestion.scroll_size,
            scroll_keep_alive=ingestion.scroll_keep_alive,
        )

    @property
    def name(self) -> str:
        return "elasticsearch"

    def _bind(self, client: httpx.AsyncClient) -> None:
        self._client = client
        self._indices = IndexLifecycleManager(client)
        self._aliases = AliasRegistry(client)
        self._bulk = BulkIngestionPipeline(client, self._chunk_size, self._max_in_flight)
        self._retriever = DocumentRetriever(client, self._scroll_size, self._scroll_keep_alive)

    async def initialize(self) -> None:
        """Create the HTTP client (unless one was given) and verify the connection."""
        if self._client is None:
            headers: dict[str, str] = {"Content-Type": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"ApiKey {self._api_key}"
            auth = (self._username, self._password) if self._username and self._password else None
            self._bind(
                httpx.AsyncClient(
                    base_url=self._base_url,
                    timeout=httpx.Timeout(self._timeout),
                    headers=headers,
                    auth=auth,
                    verify=self._verify_certs,
                )
            )

        response = await send(self._require_client(), "GET", "/", details=f"cannot connect to {self._base_url}")
        ensure_success(response)
        info = json_object(response)
        version = info.get("version")
        logger.info(
            "Connected to Elasticsearch cluster: %s (v%s)",
            info.get("cluster_name", "unknown"),
            version.get("number", "unknown") if isinstance(version, dict) else "unknown",
        )

    async def shutdown(self) -> None:
        """Close the HTTP client if this storage created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._indices = self._aliases = self._bulk = self._retriever = None

    async def __aenter__(self) -> ElasticsearchStorage:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise BackendCallFailed("Elasticsearch client not initialized.")
        return self._client

    def _component(self, component: T | None) -> T:
        if self._client is None or component is None:
            raise BackendCallFailed("Elasticsearch client not initialized.")
        return component

    @property
    def indices(self) -> IndexLifecycleManager:
        return self._component(self._indices)

    @property
    def aliases(self) -> AliasRegistry:
        return self._component(self._aliases)

    @property
    def bulk(self) -> BulkIngestionPipeline:
        return self._component(self._bulk)

    @property
    def retriever(self) -> DocumentRetriever:
        return self._component(self._retriever)

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> StorageHealth:
        """Check Elasticsearch cluster health."""
        if not self._client:
            return StorageHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            response = await send(self._client, "GET", "/_cluster/health", details="cannot read cluster health")
            ensure_success(response)
            health = json_object(response)
            latency_ms = int((time.monotonic() - start) * 1000)

            status_map = {"green": "healthy", "yellow": "degraded", "red": "unhealthy"}

            return StorageHealth(
                status=status_map.get(health.get("status", "red"), "unhealthy"),
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Cluster: {health.get('cluster_name')}, Nodes: {health.get('number_of_nodes')}",
            )
        except Exception as e:
            return StorageHealth(status="unhealthy", message=str(e))

    # ── Indices ──────────────────────────────────────────────────────────

    async def create_index(self, config: IndexConfiguration) -> None:
        await self.indices.create(config)

    async def delete_index(self, index: str) -> None:
        await self.indices.delete(index)

    async def find_index(self, index: str) -> Index | None:
        return await self.indices.find(index)

    async def refresh_index(self, index: str) -> None:
        await self.indices.refresh(index)

    async def add_pipeline(self, pipeline: str, name: str) -> None:
        await self.indices.add_pipeline(pipeline, name)

    # ── Documents ────────────────────────────────────────────────────────

    async def insert_documents(
        self,
        index: str,
        documents: Iterable[Any] | AsyncIterable[Any],
    ) -> int:
        return await self.bulk.insert(index, documents)

    def retrieve_all_documents(
        self,
        index: str,
        model: type[BaseModel] | None = None,
        query: dict[str, Any] | None = None,
        after: str | None = None,
    ) -> AsyncIterator[Any]:
        return self.retriever.retrieve_all_documents(index, model=model, query=query, after=after)

    # ── Aliases ──────────────────────────────────────────────────────────

    async def add_alias(self, indices: list[str], alias: str) -> None:
        await self.aliases.add_alias(indices, alias)

    async def remove_alias(self, indices: list[str], alias: str) -> None:
        await self.aliases.remove_alias(indices, alias)

    async def find_aliases(self, dataset_prefix: str) -> dict[str, list[str]]:
        return await self.aliases.find_aliases(dataset_prefix)

    async def get_previous_indices(self, index: Index) -> list[str]:
        return await self.aliases.get_previous_indices(index)

    # ── Publication ──────────────────────────────────────────────────────

    async def publish_index(self, index: Index) -> list[str]:
        """Point the dataset alias at ``index`` and retire older versions.

        The alias is added to the new index before it is removed from the
        old ones, so readers always resolve it to at least one index.

        Returns:
            The names of the deleted indices.
        """
        alias = root_doctype_dataset(index.doc_type, index.dataset)
        aliases = await self.find_aliases(alias)
        previous = [name for name in aliases if name != index.name]

        await self.add_alias([index.name], alias)
        await self.remove_alias([name for name in previous if alias in aliases[name]], alias)
        for name in previous:
            await self.delete_index(name)

        logger.info("Published %s as %s, retired %d previous indices", index.name, alias, len(previous))
        return previous

    async def generate_index(
        self,
        config: IndexConfiguration,
        documents: Iterable[Any] | AsyncIterable[Any],
    ) -> tuple[Index, int]:
        """Create an index, fill it, and publish it under its dataset alias.

        Returns:
            The published index and the number of documents created.

        Raises:
            UnknownIndex: If the new index is missing from the listing.
        """
        await self.create_index(config)
        count = await self.insert_documents(config.name, documents)
        await self.refresh_index(config.name)

        index = await self.find_index(config.name)
        if index is None:
            raise UnknownIndex(config.name)

        await self.publish_index(index)
        return index, count
