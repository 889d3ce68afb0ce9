# ============================================
# FILE: chimeprov/polling.py
# ============================================

"""
Bounded, paginated polling.

Every wait in the provisioner has the same shape: call a paginated list
operation until an item matches. A next-page token is followed immediately;
a token-less page is followed by a fixed pause before starting over. The
token lives only inside one poll_pages() call.

Each loop runs under an attempt cap and an optional Deadline and raises
PollingTimeoutError when either is exhausted.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from chimeprov.core.exceptions import PollingTimeoutError, ProviderCallError
from chimeprov.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]
FetchPage = Callable[[str | None], Awaitable[tuple[T | None, str | None]]]


class Deadline:
    """
    Absolute point in time (monotonic clock) after which polling stops.

    A Deadline built with seconds=None never expires.
    """

    def __init__(self, seconds: float | None, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + max(seconds, 0.0)

    @classmethod
    def from_lambda_context(cls, context: Any, margin: float = 0.0) -> Deadline:
        """Derive a deadline from the Lambda context's remaining execution time."""
        get_remaining = getattr(context, "get_remaining_time_in_millis", None)
        if get_remaining is None:
            return cls(None)
        return cls(get_remaining() / 1000.0 - margin)

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(self._expires_at - self._clock(), 0.0)

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def __repr__(self) -> str:
        return f"Deadline(remaining={self.remaining()})"


async def poll_pages(
    fetch_page: FetchPage[T],
    *,
    operation: str,
    interval: float,
    max_attempts: int,
    deadline: Deadline | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """
    Call fetch_page until it returns a match.

    Args:
        fetch_page: Coroutine taking the current page token and returning
            (match or None, next token or None)
        operation: Name used in logs and in PollingTimeoutError
        interval: Pause after a token-less page without a match
        max_attempts: Maximum number of fetch_page calls
        deadline: Optional overall deadline
        sleep: Awaitable sleep function (injected by tests)

    Returns:
        The first non-None match

    Raises:
        PollingTimeoutError: If the attempt cap or the deadline is exhausted

    ProviderCallError from fetch_page is logged and the same page is retried
    after the pause.
    """
    started = time.monotonic()
    token: str | None = None
    attempts = 0

    while True:
        if attempts >= max_attempts or (deadline is not None and deadline.expired):
            raise PollingTimeoutError(operation, attempts, time.monotonic() - started)
        attempts += 1

        try:
            found, next_token = await fetch_page(token)
        except ProviderCallError as e:
            logger.warning(f"{operation}: provider error on attempt {attempts}, retrying: {e}")
        else:
            if found is not None:
                logger.debug(f"{operation}: matched after {attempts} attempts")
                return found

            token = next_token or None
            if token:
                logger.debug(f"{operation}: following next page token")
                continue

        await _pause(interval, deadline, sleep)


async def _pause(interval: float, deadline: Deadline | None, sleep: SleepFn) -> None:
    if interval <= 0:
        return
    remaining = deadline.remaining() if deadline is not None else None
    if remaining is not None:
        interval = min(interval, remaining)
    await sleep(interval)
