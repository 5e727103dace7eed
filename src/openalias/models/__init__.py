"""Domain models — Indices, index configurations and the index naming convention."""

from openalias.models.configuration import IndexConfiguration, IndexParameters
from openalias.models.index import CatIndexRow, Index, IndexStatus

__all__ = ["CatIndexRow", "Index", "IndexConfiguration", "IndexParameters", "IndexStatus"]
