"""OpenAlias — Versioned index lifecycle and bulk ingestion for search backends."""

__version__ = "0.1.0"
