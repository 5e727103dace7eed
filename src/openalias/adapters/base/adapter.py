"""Base storage adapter — Abstract interface for index lifecycle backends.

Every backend that hosts versioned indices implements ``IndexStorage``.
The storage is responsible for:
  1. Creating, finding, refreshing and deleting concrete indices
  2. Bulk-ingesting documents into a concrete index
  3. Pointing dataset aliases at concrete indices
  4. Registering ingest pipelines

Document export is a separate capability (``DocumentExport``): callers
that only need to stream documents out of a dataset depend on that
protocol, not on the storage class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from openalias.models.configuration import IndexConfiguration
    from openalias.models.index import Index

D = TypeVar("D", covariant=True)


class StorageHealth(BaseModel):
    """Health status of a storage backend."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


@runtime_checkable
class DocumentExport(Protocol[D]):
    """Capability: stream every document of an index as a lazy sequence."""

    def retrieve_all_documents(self, index: str) -> AsyncIterator[D]: ...


class IndexStorage(ABC):
    """Abstract base class for index storage backends.

    Implementations should be stateless apart from their connection,
    which must be safe to share between concurrent operations.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique storage name (e.g., 'elasticsearch')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections. Called once before any other operation."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Close connections and release resources."""

    @abstractmethod
    async def health_check(self) -> StorageHealth:
        """Report the health of the backend."""

    @abstractmethod
    async def create_index(self, config: IndexConfiguration) -> None:
        """Create a concrete index.

        Raises:
            DuplicateIndex: If an index with the same name exists.
        """

    @abstractmethod
    async def delete_index(self, index: str) -> None:
        """Delete a concrete index."""

    @abstractmethod
    async def find_index(self, index: str) -> Index | None:
        """Return the index named ``index``, or ``None`` if the listing is empty."""

    @abstractmethod
    async def refresh_index(self, index: str) -> None:
        """Make recently written documents visible to searches."""

    @abstractmethod
    async def insert_documents(
        self,
        index: str,
        documents: Iterable[Any] | AsyncIterable[Any],
    ) -> int:
        """Bulk-insert documents and return how many were created."""

    @abstractmethod
    async def add_alias(self, indices: list[str], alias: str) -> None:
        """Point ``alias`` at every index in ``indices``."""

    @abstractmethod
    async def remove_alias(self, indices: list[str], alias: str) -> None:
        """Remove ``alias`` from every index in ``indices``."""

    @abstractmethod
    async def find_aliases(self, dataset_prefix: str) -> dict[str, list[str]]:
        """Map each index of a dataset to its alias names."""

    @abstractmethod
    async def get_previous_indices(self, index: Index) -> list[str]:
        """Return the other versions of ``index``'s dataset."""

    @abstractmethod
    async def add_pipeline(self, pipeline: str, name: str) -> None:
        """Register an ingest pipeline from its JSON definition."""
