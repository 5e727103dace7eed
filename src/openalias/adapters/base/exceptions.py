"""Adapter-specific exceptions.

Every failure surfaced by a storage adapter is one of the classes below.
Backend client types (``httpx`` errors, raw JSON payloads) never cross
the adapter boundary; they are chained as ``__cause__`` at most.
"""

from __future__ import annotations


class AdapterError(Exception):
    """Base exception for adapter errors."""


class ElasticsearchError(AdapterError):
    """Base exception for errors raised by the Elasticsearch adapter."""

    def __init__(self, details: str = "") -> None:
        self.details = details
        super().__init__(details)


class InvalidConfiguration(ElasticsearchError):
    """Raised when a stored index configuration cannot be deserialized."""

    def __str__(self) -> str:
        return f"Invalid Index Configuration: {self.details}"


class BackendCallFailed(ElasticsearchError):
    """Raised when the request could not be sent or no response was received."""

    def __str__(self) -> str:
        cause = f" ({self.__cause__})" if self.__cause__ else ""
        return f"Elasticsearch Error: {self.details}{cause}"


class NotCreated(ElasticsearchError):
    """Raised when the backend did not acknowledge an index creation."""

    def __str__(self) -> str:
        return f"Elasticsearch Response: Not Created: {self.details}"


class NotDeleted(ElasticsearchError):
    """Raised when the backend did not acknowledge an index deletion."""

    def __str__(self) -> str:
        return f"Elasticsearch Response: Not Deleted: {self.details}"


class NotAcknowledged(ElasticsearchError):
    """Raised when the backend did not acknowledge an alias or pipeline change."""

    def __str__(self) -> str:
        return f"Elasticsearch Response: Not Acknowledged: {self.details}"


class FailureWithoutException(ElasticsearchError):
    """Raised for a failure status whose body carries no exception payload."""

    def __str__(self) -> str:
        return f"Elasticsearch Failure without Exception: {self.details}"


class UnhandledException(ElasticsearchError):
    """Raised for a backend exception that could not be classified."""

    def __str__(self) -> str:
        return f"Elasticsearch Unhandled Exception: {self.details}"


class DuplicateIndex(ElasticsearchError):
    """Raised when creating an index that already exists."""

    def __init__(self, index: str) -> None:
        self.index = index
        super().__init__(index)

    def __str__(self) -> str:
        return f"Elasticsearch Duplicate Index: {self.index}"


class FailedToParse(ElasticsearchError):
    """Raised when the backend could not parse a request body."""

    def __str__(self) -> str:
        return "Elasticsearch Failed to Parse"


class UnknownIndex(ElasticsearchError):
    """Raised when the targeted index does not exist."""

    def __init__(self, index: str) -> None:
        self.index = index
        super().__init__(index)

    def __str__(self) -> str:
        return f"Elasticsearch Unknown Index: {self.index}"


class UnknownSetting(ElasticsearchError):
    """Raised when an index configuration uses a setting the backend rejects."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(setting)

    def __str__(self) -> str:
        return f"Elasticsearch Unknown Setting: {self.setting}"


class IndexNameConversionError(ElasticsearchError):
    """Raised when an index name does not follow ``{doc_type}_{dataset}_{timestamp}``."""

    def __str__(self) -> str:
        return f"Index Conversion Error: {self.details}"


class ResponseDeserializationError(ElasticsearchError):
    """Raised when a body (request or response) is not valid JSON."""

    def __str__(self) -> str:
        return f"JSON Deserialization Error: {self.details}"


class InvalidResponseShape(ElasticsearchError):
    """Raised when a JSON response does not have the expected shape.

    ``expectation`` names the check that failed: ``"object"``, ``"field"``,
    ``"boolean"``, ``"array"`` or ``"string"``.
    """

    def __init__(self, expectation: str, details: str = "") -> None:
        self.expectation = expectation
        super().__init__(details or f"expected JSON {expectation}")

    def __str__(self) -> str:
        return f"JSON Deserialization Invalid: {self.details}"
