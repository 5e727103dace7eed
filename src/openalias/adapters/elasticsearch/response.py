"""Response helpers — Send requests and check backend responses.

Every call site goes through the same three steps:
  1. ``send()`` the request; transport failures become ``BackendCallFailed``
  2. ``ensure_success()`` on the status; failures become classified errors
  3. read the body with ``json_body()`` / ``expect_bool()`` /
     ``expect_acknowledged()``
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from openalias.adapters.base.exceptions import (
    BackendCallFailed,
    ElasticsearchError,
    FailureWithoutException,
    InvalidResponseShape,
    ResponseDeserializationError,
)
from openalias.adapters.elasticsearch.classifier import classify_exception


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    details: str,
    **kwargs: Any,
) -> httpx.Response:
    """Send one request; the backend is never retried.

    Raises:
        BackendCallFailed: If no response was received.
    """
    try:
        return await client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        raise BackendCallFailed(details) from e


def json_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON.

    Raises:
        ResponseDeserializationError: If the body is not JSON.
    """
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ResponseDeserializationError(f"{response.request.method} {response.request.url.path}: {e}") from e


def json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a response body that must be a JSON object."""
    body = json_body(response)
    if not isinstance(body, dict):
        raise InvalidResponseShape("object")
    return body


def exception_from_response(response: httpx.Response) -> ElasticsearchError:
    """Build the error describing a failed response."""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return classify_exception(error)
    return FailureWithoutException(f"Fail status {response.status_code} without exception")


def ensure_success(response: httpx.Response) -> None:
    """Raise the classified error if ``response`` has a non-2xx status."""
    if not response.is_success:
        raise exception_from_response(response)


def expect_bool(response: httpx.Response, field: str) -> bool:
    """Return the boolean ``field`` of a JSON object response.

    Raises:
        ResponseDeserializationError: If the body is not JSON.
        InvalidResponseShape: If the body is not an object, lacks ``field``,
            or ``field`` is not a boolean.
    """
    body = json_object(response)
    if field not in body:
        raise InvalidResponseShape("field", f"expected '{field}'")
    value = body[field]
    if not isinstance(value, bool):
        raise InvalidResponseShape("boolean", f"expected JSON boolean for '{field}'")
    return value


def expect_acknowledged(
    response: httpx.Response,
    error_cls: type[ElasticsearchError],
    details: str,
) -> None:
    """Check a ``{"acknowledged": bool}`` response.

    Raises:
        error_cls: If the backend answered ``acknowledged: false``.
    """
    ensure_success(response)
    if not expect_bool(response, "acknowledged"):
        raise error_cls(details)
