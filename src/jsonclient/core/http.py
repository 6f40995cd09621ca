"""
JSON-over-HTTP helpers.

This module wraps an `httpx.Client` so callers can GET or POST JSON and get back a typed value.

Design goals:
- Small surface area (fetch JSON, send JSON).
- The transport is supplied by the caller (timeouts, TLS, proxies live there) or is the one
  process-wide default `httpx.Client`; it is never closed here.
- Uniform failures: any status >= 400 or an undecodable body raises `ResponseError`
  carrying the status code, the raw body text and the underlying cause.

Decoding goes through `pydantic.TypeAdapter`, so `response_type` may be a pydantic model,
a dataclass, a TypedDict, a builtin container type, or `Any` for plain JSON data.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from jsonclient.config.settings import Settings, get_settings
from jsonclient.core.errors import (
    PayloadCreationError,
    PayloadSendError,
    RequestCreationError,
    ResponseError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTENT_TYPE = "application/json"


@lru_cache(maxsize=256)
def _type_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def encode_payload(value: Any, *, indent: str = "") -> bytes:
    """Serialize `value` to UTF-8 JSON bytes.

    An empty `indent` produces compact output (no whitespace between tokens).

    Raises:
        PayloadCreationError: If the value is not JSON-serializable (unknown types, NaN, cycles).
    """
    try:
        data = to_jsonable_python(value)
        if indent:
            text = json.dumps(data, indent=indent, ensure_ascii=False, allow_nan=False)
        else:
            text = json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        return text.encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise PayloadCreationError(exc) from exc


def decode_payload(body: bytes | str, response_type: type[T] = Any) -> T:  # type: ignore[assignment]
    """Decode JSON `body` into `response_type` (strict: no string-to-number or string-to-bool coercion).

    Raises:
        pydantic.ValidationError: If the body is not valid JSON or does not match the type.
    """
    return _type_adapter(response_type).validate_json(body, strict=True)


def _parse_response(response: httpx.Response, response_type: Any) -> Any:
    """Turn a streamed response into a decoded value, or raise `ResponseError`.

    The response is always closed before returning.
    """
    error: Exception | None = None
    body = b""
    text = ""
    try:
        try:
            body = response.read()
            text = response.text
        except (httpx.HTTPError, httpx.StreamError) as exc:
            error = exc
    finally:
        response.close()

    if response.status_code >= 400:
        error = httpx.HTTPStatusError(
            f"got HTTP {response.status_code} {response.reason_phrase}".rstrip(),
            request=response.request,
            response=response,
        )

    if error is None:
        try:
            return decode_payload(body, response_type)
        except ValidationError as exc:
            error = exc

    raise ResponseError(status_code=response.status_code, body=text, cause=error) from error


_default_transport: httpx.Client | None = None
_default_transport_lock = threading.Lock()


def get_default_transport() -> httpx.Client:
    """Return the process-wide `httpx.Client` shared by clients built without a transport."""
    global _default_transport
    if _default_transport is None:
        with _default_transport_lock:
            if _default_transport is None:
                _default_transport = httpx.Client(follow_redirects=True)
    return _default_transport


@dataclass
class JsonClient:
    """JSON wrapper around a shared `httpx.Client`.

    Attributes are plain fields and may be changed after construction:
    - `transport`: the HTTP client used for every call (not owned; never closed here).
    - `authorization_header`: sent as `Authorization` on POST when non-empty.
    - `indent`: indentation for outgoing JSON; empty means compact.
    """

    transport: httpx.Client = field(default_factory=get_default_transport)
    authorization_header: str = ""
    indent: str = ""

    def fetch_json(self, url: str, response_type: type[T] = Any) -> T:  # type: ignore[assignment]
        """GET `url` and decode the JSON response into `response_type`.

        Raises:
            httpx.HTTPError: Transport failures, unwrapped.
            ResponseError: On status >= 400 or an undecodable body.
        """
        request = self.transport.build_request("GET", url)
        response = self.transport.send(request, stream=True)
        logger.debug("GET %s -> %s", url, response.status_code)
        return _parse_response(response, response_type)

    def send_json(self, url: str, request: Any, response_type: type[T] = Any) -> T:  # type: ignore[assignment]
        """POST `request` as JSON to `url` and decode the JSON response into `response_type`.

        Raises:
            PayloadCreationError: If `request` cannot be serialized.
            RequestCreationError: If the request cannot be built (e.g. malformed URL).
            PayloadSendError: On transport failures.
            ResponseError: On status >= 400 or an undecodable body.
        """
        payload = encode_payload(request, indent=self.indent)

        headers = {"Content-Type": CONTENT_TYPE}
        if self.authorization_header:
            headers["Authorization"] = self.authorization_header

        try:
            http_request = self.transport.build_request("POST", url, content=payload, headers=headers)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise RequestCreationError(exc) from exc

        try:
            response = self.transport.send(http_request, stream=True)
        except httpx.HTTPError as exc:
            raise PayloadSendError(exc) from exc

        logger.debug("POST %s (%d bytes) -> %s", url, len(payload), response.status_code)
        return _parse_response(response, response_type)


def build_client(settings: Settings | None = None) -> JsonClient:
    """Build a dedicated client from `Settings.client` (timeout, redirects, User-Agent, auth, indent)."""
    settings = settings or get_settings()
    cfg = settings.client
    transport = httpx.Client(
        timeout=cfg.timeout_seconds,
        follow_redirects=cfg.follow_redirects,
        headers={"User-Agent": cfg.user_agent},
    )
    return JsonClient(
        transport=transport,
        authorization_header=cfg.authorization_header,
        indent=cfg.indent,
    )


_default_client: JsonClient | None = None
_default_client_lock = threading.Lock()


def get_default_client() -> JsonClient:
    """Return the process-wide default client, creating it on first use."""
    global _default_client
    if _default_client is None:
        with _default_client_lock:
            if _default_client is None:
                _default_client = JsonClient()
    return _default_client


def set_default_client(client: JsonClient) -> None:
    """Replace the process-wide default client (mainly for tests)."""
    global _default_client
    with _default_client_lock:
        _default_client = client


def reset_default_client() -> None:
    """Drop the process-wide default client; the next call creates a fresh one."""
    global _default_client
    with _default_client_lock:
        _default_client = None


def fetch_json(url: str, response_type: type[T] = Any) -> T:  # type: ignore[assignment]
    """`JsonClient.fetch_json` on the default client."""
    return get_default_client().fetch_json(url, response_type)


def send_json(url: str, request: Any, response_type: type[T] = Any) -> T:  # type: ignore[assignment]
    """`JsonClient.send_json` on the default client."""
    return get_default_client().send_json(url, request, response_type)
