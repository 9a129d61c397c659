"""
Error taxonomy for outbound provider calls.
Errors are tagged with a kind where they are raised; message-based
classification is only a fallback for foreign exceptions.
"""
from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Closed set of failure kinds for provider calls."""
    NETWORK = "network"
    TIMEOUT = "timeout"
    SERVER = "server"
    VALIDATION = "validation"
    AUTH = "auth"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.SERVER)


class ProviderError(Exception):
    """Failure talking to an LLM provider or another upstream API."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN,
                 status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    @classmethod
    def from_status(cls, status_code: int, body: str = "") -> "ProviderError":
        """Build an error from a non-2xx HTTP response."""
        if status_code in (401, 403):
            kind = ErrorKind.AUTH
        elif status_code >= 500:
            kind = ErrorKind.SERVER
        elif status_code >= 400:
            kind = ErrorKind.VALIDATION
        else:
            kind = ErrorKind.UNKNOWN

        return cls(f"API response error: {status_code} {body}".strip(), kind, status_code, body)

    @classmethod
    def from_exception(cls, exc: Exception) -> "ProviderError":
        """Wrap a transport-level exception raised by httpx."""
        if isinstance(exc, httpx.TimeoutException):
            return cls(f"Request timeout: {exc}", ErrorKind.TIMEOUT)
        if isinstance(exc, httpx.TransportError):
            return cls(f"Network error: {exc}", ErrorKind.NETWORK)
        return cls(str(exc), classify_error(exc))


def classify_error(error: BaseException) -> ErrorKind:
    """
    Determine the failure kind of an exception.

    Tagged errors report their own kind. Anything else is classified by
    matching substrings of its message.
    """
    if isinstance(error, ProviderError):
        return error.kind

    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        return ErrorKind.TIMEOUT

    if isinstance(error, httpx.TransportError):
        return ErrorKind.NETWORK

    message = str(error).lower()

    if "timeout" in message or "timed out" in message or "abort" in message:
        return ErrorKind.TIMEOUT
    if "fetch" in message or "network" in message or "connect" in message:
        return ErrorKind.NETWORK
    if any(code in message for code in ("500", "502", "503", "504")):
        return ErrorKind.SERVER
    if "401" in message or "403" in message:
        return ErrorKind.AUTH
    if "400" in message or "422" in message or "validation" in message:
        return ErrorKind.VALIDATION

    return ErrorKind.UNKNOWN


def user_facing_error(error: BaseException, model_name: str) -> str:
    """Turn a provider failure into a reply that can be shown as an assistant message."""
    if classify_error(error) == ErrorKind.TIMEOUT:
        return (
            f"I'm sorry, but the request is taking too long. The \"{model_name}\" model might be "
            f"temporarily overloaded. Please try again later or select a different model."
        )

    return (
        "I'm sorry, but I can't process your request right now. Please try again later "
        "or contact support if the issue persists."
    )
