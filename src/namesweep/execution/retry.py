"""Backoff policies for lookups that fail transiently.

Every lookup gets its own :class:`RetryContext`: an attempt counter plus a
strategy that decides whether and how long to wait. Retrying is a loop,
never recursion, and the number of attempts is always bounded by
``1 + max_retries``.

Only errors flagged ``retryable`` (see :mod:`namesweep.core.errors`) are
retried. A rate-limit error that carries ``retry_after`` waits at least that
long, capped by the strategy's ``max_delay``. A context built with
``should_continue`` gives up as soon as that predicate turns false, so a
pool that is shutting down never issues another request.

Example:
    >>> from namesweep.execution.retry import ExponentialBackoff
    >>>
    >>> strategy = ExponentialBackoff(max_retries=5, base_delay=1.0, max_delay=60.0, jitter=False)
    >>> [strategy.next_delay(n) for n in range(4)]
    [1.0, 2.0, 4.0, 8.0]
"""

from __future__ import annotations

import asyncio
import random
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from namesweep.core.errors import get_retry_after, is_retryable

T = TypeVar("T")


class RetryStrategy(ABC):
    """How many times to retry, and how long to wait in between."""

    max_delay: float = 60.0

    @abstractmethod
    def next_delay(self, retry: int) -> float:
        """Seconds to wait before retry number *retry* (0 = first retry)."""
        ...

    @abstractmethod
    def should_retry(self, retry: int, error: Exception | None = None) -> bool:
        """Whether another attempt follows *retry* retries that ended in *error*."""
        ...


@dataclass
class ExponentialBackoff(RetryStrategy):
    """Exponential backoff with optional jitter.

    Delay = min(base_delay * (multiplier ** retry), max_delay) +/- jitter

    Attributes:
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay
        multiplier: Growth factor per retry
        jitter: Spread delays so T workers hitting the same 429 don't retry in lockstep
        jitter_range: Jitter as a fraction of the delay (0.0-1.0)
    """

    max_retries: int = 3
    base_delay: float = 0.5
    max_delay: float = 30.0
    multiplier: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.25

    def next_delay(self, retry: int) -> float:
        delay = min(self.base_delay * (self.multiplier ** retry), self.max_delay)

        if self.jitter:
            spread = delay * self.jitter_range
            delay = max(0.0, delay + random.uniform(-spread, spread))

        return delay

    def should_retry(self, retry: int, error: Exception | None = None) -> bool:
        if retry >= self.max_retries:
            return False
        return error is None or is_retryable(error)


@dataclass
class NoRetry(RetryStrategy):
    """Single attempt; every failure is final."""

    def next_delay(self, retry: int) -> float:
        return 0.0

    def should_retry(self, retry: int, error: Exception | None = None) -> bool:
        return False


@dataclass
class RetryContext:
    """Retry state for one lookup.

    Example:
        >>> ctx = RetryContext(ExponentialBackoff(max_retries=3))
        >>> identifier = await ctx.run_async(client.lookup, "Foo")
        >>> ctx.attempts
        1
    """

    strategy: RetryStrategy
    on_retry: Callable[[int, Exception, float], None] | None = None
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    should_continue: Callable[[], bool] | None = None
    attempt: int = field(default=0, init=False)
    last_error: Exception | None = field(default=None, init=False)

    @property
    def attempts(self) -> int:
        """Number of attempts made so far."""
        return self.attempt

    def delay_for(self, error: Exception) -> float:
        """Backoff delay for the current retry, honouring ``retry_after`` hints."""
        delay = self.strategy.next_delay(self.attempt - 1)
        hint = get_retry_after(error)
        if hint is not None:
            delay = max(delay, min(float(hint), self.strategy.max_delay))
        return delay

    def _stopped(self) -> bool:
        return self.should_continue is not None and not self.should_continue()

    async def run_async(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Call *func* until it succeeds or retrying is no longer allowed.

        Raises:
            The last exception once the strategy refuses another attempt,
            or once ``should_continue`` reports false
        """
        while True:
            self.attempt += 1
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                self.last_error = e

                if self._stopped() or not self.strategy.should_retry(self.attempt - 1, e):
                    raise

                delay = self.delay_for(e)
                if self.on_retry:
                    self.on_retry(self.attempt, e, delay)
                await self.sleep(delay)

                # shutdown may have begun during the backoff wait
                if self._stopped():
                    raise
