"""Index naming convention.

Concrete indices are named ``{doc_type}_{dataset}_{timestamp}``, e.g.
``book_fr_20210101``. The ``{doc_type}_{dataset}`` root doubles as the
dataset alias, and ``{doc_type}_{dataset}_*`` selects every version of a
dataset without matching a dataset that merely shares its prefix
(``fr`` vs ``fr-ne``).
"""

from __future__ import annotations

from datetime import UTC, datetime

from openalias.adapters.base.exceptions import IndexNameConversionError

SEPARATOR = "_"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def _check_part(kind: str, value: str) -> None:
    if not value:
        raise IndexNameConversionError(f"empty {kind}")
    if SEPARATOR in value or "*" in value:
        raise IndexNameConversionError(f"{kind} '{value}' contains a reserved character")


def root_doctype_dataset(doc_type: str, dataset: str) -> str:
    """Return the dataset root (and alias) name ``{doc_type}_{dataset}``."""
    _check_part("doc_type", doc_type)
    _check_part("dataset", dataset)
    return f"{doc_type}{SEPARATOR}{dataset}"


def root_doctype_dataset_ts(doc_type: str, dataset: str, timestamp: str | None = None) -> str:
    """Return a concrete, time-stamped index name.

    Args:
        doc_type: Document type, e.g. ``"book"``.
        dataset: Dataset name, e.g. ``"fr"``.
        timestamp: Version suffix. Defaults to the current UTC time.
    """
    if timestamp is None:
        timestamp = datetime.now(UTC).strftime(TIMESTAMP_FORMAT)
    if not timestamp:
        raise IndexNameConversionError("empty timestamp")
    return f"{root_doctype_dataset(doc_type, dataset)}{SEPARATOR}{timestamp}"


def versions_pattern(root: str) -> str:
    """Return the wildcard matching every version under a dataset root."""
    return f"{root}{SEPARATOR}*"


def alias_pattern(doc_type: str, dataset: str) -> str:
    """Return the wildcard matching every version of a dataset."""
    return versions_pattern(root_doctype_dataset(doc_type, dataset))


def split_index_name(name: str) -> tuple[str, str]:
    """Extract ``(doc_type, dataset)`` from a concrete index name.

    Raises:
        IndexNameConversionError: If ``name`` has fewer than three parts
            or an empty part.
    """
    parts = name.split(SEPARATOR)
    if len(parts) < 3 or not all(parts):
        raise IndexNameConversionError(
            f"index name '{name}' does not match '{{doc_type}}_{{dataset}}_{{timestamp}}'"
        )
    return parts[0], parts[1]
