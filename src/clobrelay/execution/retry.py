"""Bounded retry with a fixed delay between attempts."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _always(_: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """max_attempts tries, delay_sec apart. Never sleeps after the last attempt."""

    max_attempts: int = 3
    delay_sec: float = 0.4
    retryable: Callable[[BaseException], bool] = _always
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_sec < 0:
            raise ValueError("delay_sec must be >= 0")

    async def run(
        self,
        attempt_fn: Callable[[int], Awaitable[T]],
        accept: Callable[[T], bool],
        on_reject: Callable[[int, T | None, BaseException | None], None] | None = None,
    ) -> AttemptOutcome[T]:
        """Call attempt_fn(n) for n = 1..max_attempts until accept(result) holds.

        Exceptions matching retryable count as rejected attempts; others propagate.
        """
        last_result: T | None = None
        last_error: BaseException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await attempt_fn(attempt)
            except Exception as e:
                if not self.retryable(e):
                    raise
                last_result, last_error = None, e
            else:
                if accept(result):
                    return AttemptOutcome(True, attempt, result, None)
                last_result, last_error = result, None
            if on_reject is not None:
                on_reject(attempt, last_result, last_error)
            if attempt < self.max_attempts:
                log.debug("retry_scheduled", attempt=attempt, delay_sec=self.delay_sec)
                await self.sleep(self.delay_sec)
        return AttemptOutcome(False, self.max_attempts, last_result, last_error)


@dataclass(frozen=True)
class AttemptOutcome(Generic[T]):
    succeeded: bool
    attempt: int
    result: T | None
    error: BaseException | None
