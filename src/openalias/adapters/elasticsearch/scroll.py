"""Document retrieval — Stream every document of an index with the scroll API.

A scroll pins a point-in-time snapshot of the index, so the stream is
finite and is not affected by writes made while it is consumed. Paging
goes well past the backend's ``index.max_result_window``.

The stream can be resumed from a scroll id (``after``) as long as the
backend still keeps the scroll context alive; it cannot be restarted
without one. The context is released when iteration finishes, fails or
the generator is closed early.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from openalias.adapters.base.exceptions import (
    ElasticsearchError,
    InvalidResponseShape,
    ResponseDeserializationError,
)
from openalias.adapters.elasticsearch.response import ensure_success, json_object, send

logger = logging.getLogger(__name__)

SCROLL_SIZE = 1000
SCROLL_KEEP_ALIVE = "1m"


def _page(body: dict[str, Any]) -> tuple[str, list[dict[str, Any]]]:
    scroll_id = body.get("_scroll_id")
    if not isinstance(scroll_id, str):
        raise InvalidResponseShape("string", "expected '_scroll_id'")
    hits = body.get("hits")
    if not isinstance(hits, dict) or not isinstance(hits.get("hits"), list):
        raise InvalidResponseShape("array", "expected 'hits.hits'")
    return scroll_id, hits["hits"]


class DocumentRetriever:
    """Streams documents out of an index.

    Args:
        client: Shared HTTP client whose ``base_url`` is the backend.
        size: Number of hits fetched per page.
        keep_alive: How long the backend keeps the scroll context between pages.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        size: int = SCROLL_SIZE,
        keep_alive: str = SCROLL_KEEP_ALIVE,
    ) -> None:
        self._client = client
        self._size = size
        self._keep_alive = keep_alive

    async def retrieve_all_documents(
        self,
        index: str,
        model: type[BaseModel] | None = None,
        query: dict[str, Any] | None = None,
        after: str | None = None,
    ) -> AsyncIterator[Any]:
        """Yield the ``_source`` of every document in ``index``.

        Args:
            index: Index or alias name.
            model: Optional pydantic model each source is validated into.
            query: Query restricting the documents; defaults to ``match_all``.
            after: Scroll id of an interrupted stream to resume from.

        Raises:
            ResponseDeserializationError: If a source does not fit ``model``.
        """
        scroll_id = after
        try:
            if scroll_id is None:
                response = await send(
                    self._client,
                    "POST",
                    f"/{index}/_search",
                    params={"scroll": self._keep_alive},
                    json={"size": self._size, "query": query or {"match_all": {}}, "sort": ["_doc"]},
                    details=f"cannot search index {index}",
                )
            else:
                response = await self._next_page(scroll_id)

            while True:
                ensure_success(response)
                scroll_id, hits = _page(json_object(response))
                if not hits:
                    break
                for hit in hits:
                    source = hit.get("_source", {}) if isinstance(hit, dict) else {}
                    if model is None:
                        yield source
                        continue
                    try:
                        yield model.model_validate(source)
                    except ValidationError as e:
                        raise ResponseDeserializationError(f"document {hit.get('_id')} in {index}: {e}") from e
                response = await self._next_page(scroll_id)
        finally:
            if scroll_id is not None:
                await self._clear(scroll_id)

    async def _next_page(self, scroll_id: str) -> httpx.Response:
        return await send(
            self._client,
            "POST",
            "/_search/scroll",
            json={"scroll": self._keep_alive, "scroll_id": scroll_id},
            details="cannot continue scroll",
        )

    async def _clear(self, scroll_id: str) -> None:
        """Release the scroll context; failures only cost backend memory until it expires."""
        try:
            response = await send(
                self._client,
                "DELETE",
                "/_search/scroll",
                json={"scroll_id": scroll_id},
                details="cannot clear scroll",
            )
            ensure_success(response)
        except ElasticsearchError:
            logger.warning("Could not clear scroll context, it will expire on its own", exc_info=True)
