"""
Error types raised by `jsonclient.core.http`.

Failure shapes callers can see:
- `PayloadCreationError`, `RequestCreationError`, `PayloadSendError`: something went wrong
  before a response existed. The message prefix names the step; the original exception is chained.
- `ResponseError`: a response arrived but was not usable (status >= 400, unreadable body,
  or a body that does not decode into the requested type).

Transport errors on GET are not wrapped; they surface as the raw `httpx` exception.
"""

from __future__ import annotations


class JsonClientError(Exception):
    """Base error for jsonclient."""


class _WrappedError(JsonClientError):
    """Error wrapping the exception that stopped a request before a response existed.

    `args` holds only the cause, so instances survive `pickle` and `copy`.
    """

    prefix = ""

    def __init__(self, cause: BaseException):
        super().__init__(cause)

    @property
    def cause(self) -> BaseException:
        return self.args[0]

    def __str__(self) -> str:
        return f"{self.prefix}: {self.cause}"


class PayloadCreationError(_WrappedError):
    """Raised when the request value cannot be serialized to JSON."""

    prefix = "error creating payload"


class RequestCreationError(_WrappedError):
    """Raised when the outgoing request cannot be built (e.g. malformed URL)."""

    prefix = "error creating request"


class PayloadSendError(_WrappedError):
    """Raised when sending a POST payload fails at the transport level."""

    prefix = "error sending payload"


class ResponseError(JsonClientError):
    """A failed round trip: status code, raw body text and the underlying cause."""

    def __init__(self, status_code: int, body: str, cause: BaseException):
        super().__init__(int(status_code), body, cause)

    @property
    def status_code(self) -> int:
        return self.args[0]

    @property
    def body(self) -> str:
        return self.args[1]

    @property
    def cause(self) -> BaseException:
        return self.args[2]

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.cause}"

    def __repr__(self) -> str:
        return f"ResponseError(status_code={self.status_code!r}, body={self.body!r}, cause={self.cause!r})"
