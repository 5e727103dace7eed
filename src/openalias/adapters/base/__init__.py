"""Base adapter interface — Abstract storage port and shared exceptions."""

from openalias.adapters.base.adapter import DocumentExport, IndexStorage

__all__ = ["DocumentExport", "IndexStorage"]
