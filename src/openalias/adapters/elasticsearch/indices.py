"""Index lifecycle — Create, find, refresh and delete concrete indices."""

from __future__ import annotations

import json
import logging

import httpx

from openalias.adapters.base.exceptions import (
    InvalidResponseShape,
    NotAcknowledged,
    NotCreated,
    NotDeleted,
    ResponseDeserializationError,
)
from openalias.adapters.elasticsearch.response import (
    ensure_success,
    expect_acknowledged,
    json_body,
    send,
)
from openalias.models.configuration import IndexConfiguration
from openalias.models.index import Index

logger = logging.getLogger(__name__)


class IndexLifecycleManager:
    """Manages concrete indices and ingest pipelines.

    Args:
        client: Shared HTTP client whose ``base_url`` is the backend.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def create(self, config: IndexConfiguration) -> None:
        """Create the index described by ``config``.

        Raises:
            ResponseDeserializationError: If mappings or settings is not JSON.
            DuplicateIndex: If the index already exists.
            NotCreated: If the creation was not acknowledged.
        """
        response = await send(
            self._client,
            "PUT",
            f"/{config.name}",
            params={
                "timeout": config.parameters.timeout,
                "wait_for_active_shards": config.parameters.wait_for_active_shards,
            },
            json=config.body(),
            details=f"cannot create index '{config.name}'",
        )
        # {"acknowledged": true, "index": "book_fr_20210101", "shards_acknowledged": true}
        expect_acknowledged(response, NotCreated, f"index creation {config.name}")
        logger.info("Created index %s", config.name)

    async def delete(self, index: str) -> None:
        """Delete a concrete index.

        Raises:
            UnknownIndex: If the index does not exist.
            NotDeleted: If the deletion was not acknowledged.
        """
        response = await send(self._client, "DELETE", f"/{index}", details=f"cannot delete index '{index}'")
        expect_acknowledged(response, NotDeleted, "Elasticsearch response to index deletion not acknowledged")
        logger.info("Deleted index %s", index)

    async def find(self, index: str) -> Index | None:
        """Look an index up in the cat indices listing.

        Returns:
            The index, or ``None`` if the listing has no row.

        Raises:
            UnknownIndex: If the backend reports that the index does not exist.
            IndexNameConversionError: If the index name is not a versioned name.
        """
        response = await send(
            self._client,
            "GET",
            f"/_cat/indices/{index}",
            params={"format": "json"},
            details=f"cannot find index '{index}'",
        )
        ensure_success(response)

        rows = json_body(response)
        if not isinstance(rows, list):
            raise InvalidResponseShape("array", "expected cat indices rows")
        if not rows:
            return None
        return Index.from_cat_row(rows[-1])

    async def refresh(self, index: str) -> None:
        """Make just-written documents visible. The response body is not read."""
        response = await send(self._client, "POST", f"/{index}/_refresh", details=f"cannot refresh index {index}")
        ensure_success(response)
        logger.debug("Refreshed index %s", index)

    async def add_pipeline(self, pipeline: str, name: str) -> None:
        """Register an ingest pipeline.

        Args:
            pipeline: Pipeline definition as JSON text.
            name: Pipeline id.

        Raises:
            ResponseDeserializationError: If ``pipeline`` is not JSON.
            NotAcknowledged: If the registration was not acknowledged.
        """
        try:
            body = json.loads(pipeline)
        except json.JSONDecodeError as e:
            raise ResponseDeserializationError(f"Could not deserialize pipeline {name}: {e}") from e

        response = await send(
            self._client,
            "PUT",
            f"/_ingest/pipeline/{name}",
            json=body,
            details=f"cannot add pipeline '{name}'",
        )
        expect_acknowledged(response, NotAcknowledged, f"pipeline {name} creation")
        logger.info("Added ingest pipeline %s", name)
