"""Lookup Worker Pool: bounded asyncio fan-out over a candidate stream.

WHY
───
A wordlist can hold millions of names. Creating one coroutine per name (as
``asyncio.gather`` would) keeps them all in memory at once, and the remote
endpoint throttles anyone who opens too many connections. The pool keeps
exactly T workers busy and applies back-pressure through bounded queues.

ARCHITECTURE
────────────
::

    candidates (lazy iterator)
         │
         ▼
    producer task ──► work queue (bounded) ──► worker 0..T-1
                                                  │  RetryContext
                                                  │  client.lookup(name)
                                                  ▼
                                  outcome queue (bounded) ──► ResultSink

    - at most T lookups in flight (one per worker)
    - each candidate is taken from the queue by exactly one worker
    - each looked-up candidate yields exactly one ResolutionOutcome
    - None on the work queue tells a worker to exit; None on the outcome
      queue tells the sink the pool is finished

SHUTDOWN
────────
``request_shutdown()`` (a FatalEndpointError, SIGINT, SIGTERM) stops the
producer and makes workers discard whatever is still queued (counted as
``skipped``). Lookups already in flight get ``shutdown_timeout`` seconds to
finish, then they are cancelled. The outcome queue is closed either way, so
the sink always drains and no partial record is written.

Example::

    outcomes: asyncio.Queue = asyncio.Queue(maxsize=1000)
    pool = LookupPool(client, threads=80)
    stats = await pool.run(generator.generate(lines), outcomes)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from namesweep.core.errors import FatalEndpointError, SweepError
from namesweep.core.logging import get_logger
from namesweep.execution.models import ResolutionOutcome, SweepStats
from namesweep.execution.retry import ExponentialBackoff, RetryContext, RetryStrategy
from namesweep.sources.mowojang import LookupClient

logger = get_logger(__name__)

# Sentinel on both queues: "no more items"
CLOSED = None


class LookupPool:
    """Fixed-size set of lookup workers draining a shared candidate queue.

    Parameters
    ----------
    client : LookupClient
        Resolves one name per call.
    threads : int
        Number of concurrent workers (T). Must be at least 1.
    retry_strategy : RetryStrategy
        Backoff policy applied to every lookup (default ExponentialBackoff).
    queue_size : int
        Capacity of the candidate queue.
    shutdown_timeout : float
        Seconds in-flight lookups may take to finish after shutdown is requested.
    stats : SweepStats
        Counter object to update; shared with the sink by the runner.
    """

    def __init__(
        self,
        client: LookupClient,
        threads: int,
        *,
        retry_strategy: RetryStrategy | None = None,
        queue_size: int = 1000,
        shutdown_timeout: float = 15.0,
        stats: SweepStats | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if threads < 1:
            raise ValueError("threads must be at least 1")
        self._client = client
        self._threads = threads
        self._strategy = retry_strategy or ExponentialBackoff()
        self._queue_size = queue_size
        self._shutdown_timeout = shutdown_timeout
        self._sleep = sleep
        self._stopping = asyncio.Event()
        self._in_flight = 0
        self._peak_in_flight = 0
        self.stats = stats if stats is not None else SweepStats()

    # ── Inspection ───────────────────────────────────────────────────

    @property
    def threads(self) -> int:
        return self._threads

    @property
    def in_flight(self) -> int:
        """Lookups currently awaiting the client (including backoff waits)."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        return self._peak_in_flight

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    # ── Control ──────────────────────────────────────────────────────

    def request_shutdown(self, reason: str = "requested") -> None:
        """Stop intake; in-flight lookups are allowed to finish."""
        if self._stopping.is_set():
            return
        logger.warning("pool.shutdown_requested", reason=reason, in_flight=self._in_flight)
        self.stats.stopped_early = True
        self._stopping.set()

    # ── Execution ────────────────────────────────────────────────────

    async def run(self, candidates: Iterable[str], outcomes: asyncio.Queue) -> SweepStats:
        """Look up every candidate and push one outcome per candidate to *outcomes*.

        Puts ``CLOSED`` on *outcomes* when finished (also when the candidate
        source failed, before that error is re-raised).
        """
        work: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)

        logger.info("pool.start", threads=self._threads, queue_size=self._queue_size)

        producer = asyncio.create_task(self._produce(candidates, work), name="namesweep-producer")
        workers = [
            asyncio.create_task(self._work(work, outcomes), name=f"namesweep-worker-{i}")
            for i in range(self._threads)
        ]

        try:
            await self._supervise(producer, workers)
        except asyncio.CancelledError:
            raise
        except Exception:
            await outcomes.put(CLOSED)
            raise
        else:
            await outcomes.put(CLOSED)
        finally:
            for task in (producer, *workers):
                if not task.done():
                    task.cancel()
            await asyncio.gather(producer, *workers, return_exceptions=True)

        logger.info("pool.complete", peak_in_flight=self._peak_in_flight, **self.stats.to_dict())
        return self.stats

    async def _supervise(self, producer: asyncio.Task, workers: list[asyncio.Task]) -> None:
        """Wait for workers; enforce the shutdown timeout once stopping."""
        stop_wait = asyncio.create_task(self._stopping.wait())
        all_done = asyncio.create_task(asyncio.wait(workers))
        try:
            await asyncio.wait({all_done, stop_wait}, return_when=asyncio.FIRST_COMPLETED)
            if not all_done.done():
                _, pending = await asyncio.wait(workers, timeout=self._shutdown_timeout)
                if pending:
                    logger.warning("pool.shutdown_timeout", cancelling=len(pending), timeout=self._shutdown_timeout)
                    for task in pending:
                        task.cancel()
                    await asyncio.gather(*pending, return_exceptions=True)
        finally:
            stop_wait.cancel()
            all_done.cancel()

        if not producer.done():
            # only reachable when workers were cancelled mid-queue
            producer.cancel()
        await asyncio.wait([producer])

        for task in workers:
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()
        if not producer.cancelled() and producer.exception() is not None:
            raise producer.exception()

    async def _produce(self, candidates: Iterable[str], work: asyncio.Queue) -> None:
        try:
            for candidate in candidates:
                if self._stopping.is_set():
                    break
                self.stats.candidates += 1
                await work.put(candidate)
        except Exception as e:
            self.request_shutdown(reason=f"candidate source failed: {e}")
            await self._close(work)
            raise
        await self._close(work)

    async def _close(self, work: asyncio.Queue) -> None:
        # one sentinel per worker; not reached when the producer is cancelled
        for _ in range(self._threads):
            await work.put(CLOSED)

    async def _work(self, work: asyncio.Queue, outcomes: asyncio.Queue) -> None:
        while True:
            candidate = await work.get()
            if candidate is CLOSED:
                return
            if self._stopping.is_set():
                self.stats.skipped += 1
                continue
            outcome = await self._resolve(candidate)
            self.stats.record(outcome)
            await outcomes.put(outcome)

    async def _resolve(self, candidate: str) -> ResolutionOutcome:
        ctx = RetryContext(
            strategy=self._strategy,
            on_retry=lambda attempt, error, delay: logger.debug(
                "lookup.retry", candidate=candidate, attempt=attempt, delay=round(delay, 3), error=str(error)
            ),
            sleep=self._sleep,
            should_continue=lambda: not self._stopping.is_set(),
        )

        self._in_flight += 1
        self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
        try:
            identifier = await ctx.run_async(self._lookup_once, candidate)
        except FatalEndpointError as e:
            self.request_shutdown(reason=e.message)
            return ResolutionOutcome.fatal_error(candidate, e.message, attempts=ctx.attempts)
        except SweepError as e:
            logger.debug("lookup.gave_up", attempts=ctx.attempts, stopping=self.stopping, **e.to_dict())
            return ResolutionOutcome.transient_error(candidate, e.message, attempts=ctx.attempts)
        except asyncio.CancelledError:
            self.stats.cancelled += 1
            raise
        except Exception as e:
            logger.exception("lookup.unexpected_error", candidate=candidate)
            return ResolutionOutcome.transient_error(candidate, repr(e), attempts=ctx.attempts)
        finally:
            self._in_flight -= 1

        if identifier is None:
            return ResolutionOutcome.not_found(candidate, attempts=ctx.attempts)
        return ResolutionOutcome.found(candidate, identifier, attempts=ctx.attempts)

    async def _lookup_once(self, candidate: str) -> str | None:
        self.stats.requests += 1
        return await self._client.lookup(candidate)
