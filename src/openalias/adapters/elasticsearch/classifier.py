"""Exception classifier — Maps backend failure payloads to typed errors.

Elasticsearch reports these failures only as prose in the ``reason`` of
the first root cause, so the policy is an ordered table of
``(pattern, constructor)`` pairs; the first match wins. Reasons we have
not seen the backend emit fall through to ``UnhandledException``.

A failure payload looks like::

    {
      "root_cause": [
        {"type": "resource_already_exists_exception",
         "reason": "index [book_fr_20210101/x8fA...] already exists"}
      ],
      "type": "resource_already_exists_exception",
      "reason": "..."
    }
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from openalias.adapters.base.exceptions import (
    DuplicateIndex,
    ElasticsearchError,
    FailedToParse,
    UnhandledException,
    UnknownIndex,
    UnknownSetting,
)

REASON_PATTERNS: list[tuple[re.Pattern[str], Callable[[re.Match[str]], ElasticsearchError]]] = [
    (re.compile(r"index \[([^\]/]+).*\] already exists"), lambda m: DuplicateIndex(m.group(1))),
    (re.compile(r"no such index \[([^\]/]+).*\]"), lambda m: UnknownIndex(m.group(1))),
    (re.compile(r"failed to parse"), lambda m: FailedToParse()),
    (re.compile(r"unknown setting \[([^\]/]+).*\]"), lambda m: UnknownSetting(m.group(1))),
]


def classify_reason(reason: str) -> ElasticsearchError:
    """Classify a single free-text ``reason``."""
    for pattern, build in REASON_PATTERNS:
        match = pattern.search(reason)
        if match:
            return build(match)
    return UnhandledException(f"Unidentified reason: {reason}")


def classify_exception(error: Mapping[str, Any] | Any) -> ElasticsearchError:
    """Return the typed error matching a backend ``error`` object.

    Never raises: malformed payloads become ``UnhandledException``.

    Args:
        error: The ``error`` member of a failure response body.

    Returns:
        The classified error. Callers decide whether to raise or log it.
    """
    root_cause = error.get("root_cause") if isinstance(error, Mapping) else None
    if not isinstance(root_cause, list) or not root_cause:
        return UnhandledException("Unspecified root cause")

    first = root_cause[0]
    reason = first.get("reason") if isinstance(first, Mapping) else None
    if not isinstance(reason, str):
        return UnhandledException("Unspecified reason")

    return classify_reason(reason)
