"""Resilient execution of one logical API call.

Every backend call from the admin client goes through `RequestExecutor.execute`,
which owns:
- per-attempt timeout (the pending request is cancelled when it fires);
- bounded retries with linear backoff for transient failures (network,
  timeout, 5xx);
- session expiry: a 401/403 clears the stored credential and is never retried;
- normalization of every terminal failure into one `ClassifiedError`.

Per call the executor walks IDLE -> ATTEMPTING -> (SUCCESS | BACKOFF_WAIT ->
ATTEMPTING | FAILED). Attempts of one call are strictly sequential; separate
calls are independent and may interleave on the event loop.
"""

from __future__ import annotations

import asyncio
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import ClassifiedError, ErrorKind
from core.domain.models import RequestAttempt
from core.log import get_logger
from core.services.credential_store import CredentialStore
from core.services.endpoint_resolver import EndpointResolver
from core.services.outcomes import (
    Fatal,
    Outcome,
    Retryable,
    Success,
    classify_invalid_request,
    classify_network_error,
    classify_response,
    classify_timeout,
    parse_body,
)

_log = get_logger("requests")

SleepFn = Callable[[float], Awaitable[Any]]


class CallState(str, Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    BACKOFF_WAIT = "backoff_wait"
    SUCCESS = "success"
    FAILED = "failed"


def new_request_id() -> str:
    return uuid.uuid4().hex[:7]


class RequestExecutor:
    def __init__(
        self,
        settings: AppSettings,
        resolver: EndpointResolver,
        credentials: CredentialStore,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        self._settings = settings
        self._resolver = resolver
        self._credentials = credentials
        self._transport = transport
        self._sleep = sleep or asyncio.sleep

    @property
    def resolver(self) -> EndpointResolver:
        return self._resolver

    @property
    def max_attempts(self) -> int:
        return self._settings.max_attempts

    def backoff(self, attempt_number: int) -> float:
        """Delay (seconds) after failed attempt `attempt_number` (1-indexed)."""

        return self._settings.backoff_seconds * attempt_number

    async def execute(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        """Run the call to completion: parsed JSON body or `ClassifiedError`."""

        method = method.upper()
        request_id = new_request_id()
        await self._credentials.init()

        state = CallState.IDLE
        attempt_number = 1
        async with build_async_client(self._settings, transport=self._transport) as client:
            while True:
                state = self._transition(state, CallState.ATTEMPTING, request_id)
                attempt = RequestAttempt(
                    endpoint=endpoint,
                    method=method,
                    request_id=request_id,
                    attempt_number=attempt_number,
                )
                outcome = await self._attempt(
                    client,
                    attempt,
                    json=json,
                    params=params,
                    headers=headers,
                    files=files,
                    data=data,
                )

                if isinstance(outcome, Success):
                    self._transition(state, CallState.SUCCESS, request_id)
                    return outcome.value

                if isinstance(outcome, Retryable) and attempt_number < self.max_attempts:
                    delay = self.backoff(attempt_number)
                    _log.warning(
                        "API request failed (attempt %d/%d), retrying in %.1fs: %s %s [%s] %s%s",
                        attempt_number,
                        self.max_attempts,
                        delay,
                        method,
                        endpoint,
                        request_id,
                        outcome.reason,
                        f" (HTTP {outcome.http_status})" if outcome.http_status else "",
                        extra={
                            "request_id": request_id,
                            "attempt": attempt_number,
                            "duration_ms": attempt.elapsed_ms(),
                        },
                    )
                    state = self._transition(state, CallState.BACKOFF_WAIT, request_id)
                    await self._sleep(delay)
                    attempt_number += 1
                    continue

                fatal = outcome if isinstance(outcome, Fatal) else _exhausted(outcome)
                await self._apply_side_effects(fatal)
                self._transition(state, CallState.FAILED, request_id)
                error = ClassifiedError(
                    fatal.kind,
                    fatal.message,
                    endpoint=endpoint,
                    request_id=request_id,
                    attempts=attempt_number,
                    http_status=fatal.http_status,
                    original=fatal.cause,
                )
                _log.error(
                    "API error (final attempt): %s %s [%s] attempts=%d kind=%s: %s",
                    method,
                    endpoint,
                    request_id,
                    attempt_number,
                    fatal.kind.value,
                    fatal.message,
                    extra={"request_id": request_id, "attempt": attempt_number},
                )
                raise error from fatal.cause

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        attempt: RequestAttempt,
        **request_kwargs: Any,
    ) -> Outcome:
        is_last = attempt.attempt_number >= self.max_attempts
        files = request_kwargs.get("files")
        headers = self._credentials.get_headers(json_body=files is None)
        if request_kwargs.get("headers"):
            headers.update(request_kwargs["headers"])
        url = f"{self._resolver.resolve_base_url()}{attempt.endpoint}"

        try:
            response = await asyncio.wait_for(
                client.request(
                    attempt.method,
                    url,
                    headers=headers,
                    json=request_kwargs.get("json"),
                    params=request_kwargs.get("params"),
                    files=files,
                    data=request_kwargs.get("data"),
                ),
                timeout=self._settings.request_timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            return classify_timeout(exc, is_last_attempt=is_last)
        except httpx.TransportError as exc:
            return classify_network_error(exc, is_last_attempt=is_last)
        except (httpx.InvalidURL, httpx.HTTPError) as exc:
            return classify_invalid_request(exc)

        _log.debug(
            "%s %s [%s] attempt %d -> HTTP %d in %dms",
            attempt.method,
            attempt.endpoint,
            attempt.request_id,
            attempt.attempt_number,
            response.status_code,
            attempt.elapsed_ms(),
            extra={"request_id": attempt.request_id, "attempt": attempt.attempt_number},
        )
        return classify_response(
            response.status_code,
            parse_body(response.content),
            is_last_attempt=is_last,
            reason_phrase=response.reason_phrase,
        )

    async def _apply_side_effects(self, outcome: Fatal) -> None:
        if outcome.kind is ErrorKind.AUTH_EXPIRED:
            await self._credentials.clear_token()

    @staticmethod
    def _transition(current: CallState, new: CallState, request_id: str) -> CallState:
        _log.debug("[%s] %s -> %s", request_id, current.value, new.value)
        return new


def _exhausted(outcome: Retryable) -> Fatal:
    # Only reached when max_attempts changed mid-call; classifiers already
    # return Fatal on the last attempt.
    return Fatal(outcome.kind, outcome.reason, http_status=outcome.http_status, cause=outcome.cause)
