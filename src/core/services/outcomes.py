"""Per-attempt outcome classification.

Pure functions: `(status, body)` or a transport exception in, tagged outcome
out. No I/O and no side effects, so the retry policy is testable without a
network or a credential store. The executor decides what to do with the tag
(return, back off, fail, clear credentials).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from core.domain.errors import (
    NETWORK_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    TIMEOUT_MESSAGE,
    ErrorKind,
)

AUTH_STATUSES = frozenset({401, 403})


@dataclass(frozen=True)
class Success:
    value: Any


@dataclass(frozen=True)
class Retryable:
    kind: ErrorKind
    reason: str
    http_status: int | None = None
    cause: BaseException | None = None


@dataclass(frozen=True)
class Fatal:
    kind: ErrorKind
    message: str
    http_status: int | None = None
    cause: BaseException | None = None


Outcome = Union[Success, Retryable, Fatal]


class _Unparsed:
    """Marker for a response body that is not valid JSON."""

    def __repr__(self) -> str:
        return "UNPARSED"


UNPARSED = _Unparsed()


def parse_body(content: bytes) -> Any:
    """Decode a JSON body, returning `UNPARSED` when it is not JSON."""

    if not content:
        return UNPARSED
    try:
        return json.loads(content)
    except ValueError:
        return UNPARSED


def is_server_error(status: int) -> bool:
    return 500 <= status <= 599


def field_errors_message(body: Any) -> str | None:
    """Join server-provided field errors (`errors: [{msg|message}]`)."""

    if not isinstance(body, dict):
        return None
    errors = body.get("errors")
    if not isinstance(errors, list) or not errors:
        return None
    parts: list[str] = []
    for err in errors:
        if isinstance(err, dict):
            text = err.get("msg") or err.get("message")
            parts.append(str(text) if text else json.dumps(err, ensure_ascii=False))
        else:
            parts.append(str(err))
    return ", ".join(parts)


def _server_message(body: Any) -> str | None:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def failure_message(status: int, body: Any, reason_phrase: str = "") -> str:
    """Message for a fatal non-2xx response.

    Field errors win over the server `message`, which wins over a generated one.
    """

    joined = field_errors_message(body)
    if joined:
        return joined
    message = _server_message(body)
    if message:
        return message
    if body is UNPARSED:
        return f"Server error: {status} {reason_phrase}".rstrip()
    return f"API request failed: {status}"


def classify_response(
    status: int,
    body: Any,
    *,
    is_last_attempt: bool,
    reason_phrase: str = "",
) -> Outcome:
    if 200 <= status <= 299:
        if body is UNPARSED:
            return Fatal(ErrorKind.PARSE, "Invalid response format from server", http_status=status)
        return Success(body)

    if status in AUTH_STATUSES:
        return Fatal(ErrorKind.AUTH_EXPIRED, SESSION_EXPIRED_MESSAGE, http_status=status)

    if is_server_error(status):
        if not is_last_attempt:
            reason = _server_message(body) or f"Server error: {status}"
            return Retryable(ErrorKind.SERVER, reason, http_status=status)
        return Fatal(ErrorKind.SERVER, failure_message(status, body, reason_phrase), http_status=status)

    kind = ErrorKind.VALIDATION if field_errors_message(body) else ErrorKind.CLIENT
    return Fatal(kind, failure_message(status, body, reason_phrase), http_status=status)


def classify_timeout(exc: BaseException | None, *, is_last_attempt: bool) -> Outcome:
    if not is_last_attempt:
        return Retryable(ErrorKind.TIMEOUT, "request timed out", cause=exc)
    return Fatal(ErrorKind.TIMEOUT, TIMEOUT_MESSAGE, cause=exc)


def classify_network_error(exc: BaseException, *, is_last_attempt: bool) -> Outcome:
    if not is_last_attempt:
        return Retryable(ErrorKind.NETWORK, str(exc) or type(exc).__name__, cause=exc)
    return Fatal(ErrorKind.NETWORK, NETWORK_MESSAGE, cause=exc)


def classify_invalid_request(exc: BaseException) -> Outcome:
    # Malformed URL or request arguments: retrying cannot help.
    return Fatal(ErrorKind.CLIENT, f"Invalid request: {exc}", cause=exc)
