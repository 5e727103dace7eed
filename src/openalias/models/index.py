"""Index model — A concrete, versioned index as reported by the backend."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from openalias.adapters.base.exceptions import IndexNameConversionError
from openalias.models.naming import split_index_name


class IndexStatus(str, Enum):
    """Availability of an index.

    - AVAILABLE: ``green`` or ``yellow`` health, index open.
    - UNAVAILABLE: ``red`` health, or the index is closed.
    - UNKNOWN: the backend reported a health value we do not recognize.
    """

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"

    @classmethod
    def from_cat(cls, health: str, status: str = "open") -> IndexStatus:
        if status == "close" or health == "red":
            return cls.UNAVAILABLE
        if health in ("green", "yellow"):
            return cls.AVAILABLE
        return cls.UNKNOWN


class CatIndexRow(BaseModel):
    """One row of the ``_cat/indices?format=json`` listing."""

    model_config = ConfigDict(populate_by_name=True)

    health: str
    status: str
    name: str = Field(alias="index")
    docs_count: str | None = Field(default=None, alias="docs.count")
    docs_deleted: str | None = Field(default=None, alias="docs.deleted")
    pri: str
    pri_store_size: str | None = Field(default=None, alias="pri.store.size")
    rep: str
    store_size: str | None = Field(default=None, alias="store.size")
    uuid: str


class Index(BaseModel):
    """A concrete index, identified by its time-stamped name."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Concrete index name, e.g. 'book_fr_20210101'")
    doc_type: str = Field(description="Document type parsed from the name")
    dataset: str = Field(description="Dataset parsed from the name")
    docs_count: int = Field(default=0, description="Number of documents in the index")
    status: IndexStatus = Field(default=IndexStatus.AVAILABLE, description="Index availability")

    @classmethod
    def from_cat_row(cls, row: CatIndexRow | dict[str, Any]) -> Index:
        """Build an ``Index`` from a listing row.

        Raises:
            IndexNameConversionError: If the row cannot be read or the index
                name does not follow the naming convention.
        """
        if not isinstance(row, CatIndexRow):
            try:
                row = CatIndexRow.model_validate(row)
            except ValidationError as e:
                raise IndexNameConversionError(f"could not read index listing row: {e}") from e

        try:
            doc_type, dataset = split_index_name(row.name)
        except IndexNameConversionError as e:
            raise IndexNameConversionError(
                f"could not convert elasticsearch index into model index: {e.details}"
            ) from e

        try:
            docs_count = int(row.docs_count) if row.docs_count is not None else 0
        except ValueError as e:
            raise IndexNameConversionError(f"invalid docs count '{row.docs_count}' for {row.name}") from e

        return cls(
            name=row.name,
            doc_type=doc_type,
            dataset=dataset,
            docs_count=docs_count,
            status=IndexStatus.from_cat(row.health, row.status),
        )
