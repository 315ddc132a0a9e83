"""Retry and timeout helpers for outbound HTTP calls.

``with_retry`` re-runs an async callable with exponential backoff.
Client errors that will never succeed on a second attempt (bad request,
auth, not found, validation) and DNS / connection-refused failures are
re-raised immediately.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import httpx
import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_NON_RETRYABLE_STATUS = frozenset({400, 401, 403, 404, 422})

_logger: structlog.BoundLogger = get_logger(__name__)


def is_retryable(exc: BaseException) -> bool:
    """Return False for failures that a retry cannot fix."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code not in _NON_RETRYABLE_STATUS
    # httpx surfaces both ENOTFOUND and ECONNREFUSED as ConnectError.
    if isinstance(exc, httpx.ConnectError):
        return False
    return True


def is_safe_to_resend(exc: BaseException) -> bool:
    """Return True only when the server cannot have applied the request.

    Used for non-idempotent calls such as page creation: a read timeout
    or 5xx may arrive after the write already happened.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429
    return isinstance(exc, httpx.ConnectTimeout)


async def with_retry(
    fn: Callable[[], Awaitable[_T]],
    *,
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    operation: str = "operation",
    retry_if: Callable[[BaseException], bool] = is_retryable,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> _T:
    """Await ``fn()`` up to ``max_retries`` times with exponential backoff.

    Parameters
    ----------
    fn:
        Zero-argument coroutine factory; called fresh for every attempt.
    max_retries:
        Total attempts, including the first.
    delay:
        Seconds to wait after the first failure.
    backoff:
        Multiplier applied to the wait after each further failure.
    operation:
        Name used in log events.
    retry_if:
        Predicate deciding whether a failure is worth another attempt.
    sleep:
        Injected for tests.
    """
    wait = delay
    for attempt in range(1, max_retries + 1):
        try:
            return await fn()
        except Exception as exc:
            if attempt >= max_retries or not retry_if(exc):
                raise
            _logger.warning(
                "retrying_operation",
                operation=operation,
                attempt=attempt,
                max_retries=max_retries,
                wait_s=wait,
                error=str(exc),
            )
            await sleep(wait)
            wait *= backoff
    raise RuntimeError("with_retry exhausted without result")  # pragma: no cover


async def with_timeout(
    awaitable: Awaitable[_T],
    seconds: float,
    on_timeout: Callable[[], Exception],
) -> _T:
    """Await with a deadline, raising ``on_timeout()`` when it passes."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise on_timeout() from exc
