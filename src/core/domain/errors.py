"""Error taxonomy (domain).

The request executor surfaces exactly one exception type, `ClassifiedError`,
whatever happened on the wire. Screens render `message` directly; the rest of
the attributes are diagnostics.

- network_error / timeout_error / server_error: transient, retried by the executor
- client_error: any other 4xx
- auth_expired: 401/403, the stored credential is cleared
- parse_error: 2xx with a body that is not JSON
- validation_error: 4xx carrying an `errors` array of field errors
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NETWORK = "network_error"
    TIMEOUT = "timeout_error"
    SERVER = "server_error"
    CLIENT = "client_error"
    AUTH_EXPIRED = "auth_expired"
    PARSE = "parse_error"
    VALIDATION = "validation_error"

    @property
    def transient(self) -> bool:
        return self in _TRANSIENT_KINDS


_TRANSIENT_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.SERVER})

TIMEOUT_MESSAGE = "Request timed out. Please check your internet connection and try again."
NETWORK_MESSAGE = "Network error. Please check your internet connection and try again."
SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."
DEFAULT_MESSAGE = "An unexpected error occurred. Please try again."


class StorageError(Exception):
    """Device-local storage is unreadable or could not be written."""


class ClassifiedError(Exception):
    """Terminal failure of one logical call."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        endpoint: str,
        request_id: str,
        attempts: int,
        http_status: int | None = None,
        original: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.endpoint = endpoint
        self.request_id = request_id
        self.attempts = attempts
        self.http_status = http_status
        self.original = original

    @property
    def retryable(self) -> bool:
        return self.kind.transient

    def diagnostics(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "http_status": self.http_status,
            "endpoint": self.endpoint,
            "request_id": self.request_id,
            "attempts": self.attempts,
            "original": repr(self.original) if self.original is not None else None,
        }

    def __repr__(self) -> str:
        return (
            f"ClassifiedError(kind={self.kind.value!r}, message={self.message!r}, "
            f"endpoint={self.endpoint!r}, request_id={self.request_id!r}, attempts={self.attempts})"
        )


def user_message(error: BaseException | str | None) -> str:
    """Human-readable message for any error reaching a screen."""

    if error is None:
        return DEFAULT_MESSAGE
    if isinstance(error, str):
        return error or DEFAULT_MESSAGE
    if isinstance(error, ClassifiedError):
        return error.message
    text = str(error).strip()
    return text or DEFAULT_MESSAGE
