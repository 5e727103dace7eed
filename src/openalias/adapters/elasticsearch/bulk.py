"""Bulk ingestion — Chunked ``_bulk`` writes with a created-document count.

Documents are pulled lazily from a sync or async iterable, grouped into
fixed-size batches and written with one ``_bulk`` request per batch.
A failed batch is logged and skipped; ingestion carries on with the next
one. The returned count is the number of items whose result was
``"created"``.

With ``max_in_flight=1`` (the default) batches are sent one after the
other, which bounds the load put on the backend. A larger value lets up
to that many requests run concurrently; each batch then returns its own
count and the pipeline sums them once every batch is done.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Any

import httpx
from pydantic import TypeAdapter

from openalias.adapters.base.exceptions import ElasticsearchError, InvalidResponseShape
from openalias.adapters.elasticsearch.classifier import classify_exception
from openalias.adapters.elasticsearch.response import ensure_success, json_object, send

logger = logging.getLogger(__name__)

CHUNK_SIZE = 10

_INDEX_ACTION = b'{"index":{}}'
_documents = TypeAdapter(Any)


async def chunked(
    documents: Iterable[Any] | AsyncIterable[Any],
    size: int,
) -> AsyncIterator[list[Any]]:
    """Yield consecutive lists of at most ``size`` documents."""
    batch: list[Any] = []
    if isinstance(documents, AsyncIterable):
        async for doc in documents:
            batch.append(doc)
            if len(batch) == size:
                yield batch
                batch = []
    else:
        for doc in documents:
            batch.append(doc)
            if len(batch) == size:
                yield batch
                batch = []
    if batch:
        yield batch


def bulk_body(batch: list[Any]) -> bytes:
    """Serialize a batch as NDJSON ``index`` operations.

    Pydantic models, mappings and dataclasses are all accepted.
    """
    lines: list[bytes] = []
    for doc in batch:
        lines.append(_INDEX_ACTION)
        lines.append(_documents.dump_json(doc))
    return b"\n".join(lines) + b"\n"


def count_created(body: dict[str, Any]) -> tuple[int, list[ElasticsearchError]]:
    """Count created items in a ``_bulk`` response and collect item errors.

    Items with any other result are not counted.
    """
    items = body.get("items")
    if not isinstance(items, list):
        raise InvalidResponseShape("array", "expected 'items' array in bulk response")

    created = 0
    errors: list[ElasticsearchError] = []
    for item in items:
        operation = item.get("index") if isinstance(item, dict) else None
        if not isinstance(operation, dict):
            continue
        if operation.get("result") == "created":
            created += 1
        elif isinstance(operation.get("error"), dict):
            errors.append(classify_exception({"root_cause": [operation["error"]]}))
    return created, errors


class BulkIngestionPipeline:
    """Streams documents into an index through ``_bulk`` requests.

    Args:
        client: Shared HTTP client whose ``base_url`` is the backend.
        chunk_size: Number of documents per bulk request.
        max_in_flight: Maximum number of concurrent bulk requests.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        chunk_size: int = CHUNK_SIZE,
        max_in_flight: int = 1,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        self._client = client
        self._chunk_size = chunk_size
        self._max_in_flight = max_in_flight

    async def insert(
        self,
        index: str,
        documents: Iterable[Any] | AsyncIterable[Any],
    ) -> int:
        """Insert ``documents`` into ``index``.

        Returns:
            The number of documents the backend reported as created.
        """
        if self._max_in_flight == 1:
            total = 0
            number = 0
            async for batch in chunked(documents, self._chunk_size):
                total += await self._send_batch(index, number, bulk_body(batch), len(batch))
                number += 1
        else:
            total, number = await self._insert_concurrently(index, documents)

        logger.info("Inserted %d documents into %s in %d batches", total, index, number)
        return total

    async def _insert_concurrently(
        self,
        index: str,
        documents: Iterable[Any] | AsyncIterable[Any],
    ) -> tuple[int, int]:
        slots = asyncio.Semaphore(self._max_in_flight)
        tasks: list[asyncio.Task[int]] = []

        async def run(number: int, body: bytes, size: int) -> int:
            try:
                return await self._send_batch(index, number, body, size)
            finally:
                slots.release()

        try:
            async with asyncio.TaskGroup() as group:
                number = 0
                async for batch in chunked(documents, self._chunk_size):
                    body = bulk_body(batch)
                    await slots.acquire()
                    tasks.append(group.create_task(run(number, body, len(batch))))
                    number += 1
        except BaseExceptionGroup as e:
            # Same exception as the sequential path: the first failure, unwrapped.
            raise e.exceptions[0] from None

        return sum(task.result() for task in tasks), len(tasks)

    async def _send_batch(self, index: str, number: int, body: bytes, size: int) -> int:
        """Send one batch; backend failures are logged and count as zero."""
        try:
            response = await send(
                self._client,
                "POST",
                f"/{index}/_bulk",
                content=body,
                headers={"Content-Type": "application/x-ndjson"},
                details=f"cannot send bulk batch {number} to '{index}'",
            )
            ensure_success(response)
            created, errors = count_created(json_object(response))
        except ElasticsearchError as e:
            logger.error("Bulk batch %d (%d documents) into %s failed: %s", number, size, index, e)
            return 0

        if errors:
            logger.warning(
                "Bulk batch %d into %s: %d of %d documents rejected (first: %s)",
                number,
                index,
                len(errors),
                size,
                errors[0],
            )
        return created
