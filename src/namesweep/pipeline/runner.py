"""Sweep runner: wires generator, pool and sink for one run.

::

    SweepConfig
      ├── suffix list   ──► CandidateGenerator ──┐
      ├── wordlist      ─────────────────────────┴─► LookupPool ──► ResultSink ──► output
      └── ignore list   ──► IgnoreSet ────────────────────────────────┘

``run_sweep`` is the only entry point the CLI needs. Source and output I/O
errors abort the run with :class:`~namesweep.core.errors.SourceIOError`;
everything per-candidate is absorbed into :class:`SweepStats`.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
import uuid
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TextIO

from namesweep.core.config import SweepConfig
from namesweep.core.lines import LineSource, open_output, read_lines
from namesweep.core.logging import LogContext, get_logger
from namesweep.execution.models import SweepStats
from namesweep.execution.pool import LookupPool
from namesweep.execution.retry import ExponentialBackoff
from namesweep.pipeline.candidates import CandidateGenerator, NameRules
from namesweep.pipeline.ignore import IgnoreSet
from namesweep.pipeline.sink import RecordWriter, ResultSink
from namesweep.sources.mowojang import LookupClient, MowojangClient

logger = get_logger(__name__)


def build_generator(config: SweepConfig) -> CandidateGenerator:
    suffixes = read_lines(config.suffix_path) if config.suffix_path else None
    if suffixes is not None:
        logger.info("suffixes.loaded", count=len(suffixes), path=str(config.suffix_path))
    return CandidateGenerator(
        suffixes=suffixes,
        rules=NameRules(min_length=config.min_name_length, max_length=config.max_name_length),
    )


def build_ignore_set(config: SweepConfig) -> IgnoreSet:
    if not config.ignore_path:
        return IgnoreSet(truncation=config.ignore_truncation)
    return IgnoreSet.from_lines(LineSource(config.ignore_path), truncation=config.ignore_truncation)


def iter_candidates(config: SweepConfig, generator: CandidateGenerator | None = None) -> Iterator[str]:
    """Lazy candidate stream for *config* (no network access)."""
    generator = generator or build_generator(config)
    return generator.generate(LineSource(config.wordlist_path))


def retry_strategy_for(config: SweepConfig) -> ExponentialBackoff:
    return ExponentialBackoff(
        max_retries=config.max_retries,
        base_delay=config.base_delay,
        max_delay=config.max_delay,
    )


@contextlib.contextmanager
def _shutdown_signals(pool: LookupPool) -> Iterator[None]:
    """Route SIGINT/SIGTERM to a graceful pool shutdown while the sweep runs."""
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, pool.request_shutdown, f"signal {sig.name}")
        except (NotImplementedError, RuntimeError, ValueError):
            # Windows, or not on the main thread
            continue
        installed.append(sig)
    try:
        yield
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def run_sweep(
    config: SweepConfig,
    *,
    client: LookupClient | None = None,
    output: TextIO | None = None,
    color: bool | None = None,
    install_signal_handlers: bool = True,
    on_progress: Callable[[SweepStats], None] | None = None,
    progress_interval: float = 1.0,
) -> SweepStats:
    """Run one complete sweep.

    Args:
        config: Validated run configuration
        client: Lookup client; a :class:`MowojangClient` is created (and closed) if omitted
        output: Stream to write records to; opened from ``config.output_path`` if omitted
        color: Force colour for ignored records (``None`` = detect terminal)
        install_signal_handlers: Bind SIGINT/SIGTERM to graceful shutdown
        on_progress: Called with the live stats every *progress_interval* seconds
            and once more when the sweep completes
        progress_interval: Seconds between progress callbacks
    """
    run_id = uuid.uuid4().hex[:12]
    with LogContext(run_id=run_id):
        generator = build_generator(config)
        ignore_set = build_ignore_set(config)
        candidates = iter_candidates(config, generator)

        async with contextlib.AsyncExitStack() as stack:
            if client is None:
                client = await stack.enter_async_context(
                    MowojangClient(
                        config.api_url,
                        timeout=config.request_timeout,
                        user_agent=config.user_agent,
                        max_connections=config.threads,
                    )
                )
            if output is None:
                if not config.writes_to_stdout and Path(config.output_path).exists():
                    logger.warning("output.exists", path=config.output_path, note="found uuids will be appended")
                output = open_output(config.output_path)
                if not config.writes_to_stdout:
                    stack.callback(output.close)

            stats = SweepStats()
            pool = LookupPool(
                client,
                config.threads,
                retry_strategy=retry_strategy_for(config),
                queue_size=config.queue_size,
                shutdown_timeout=config.shutdown_timeout,
                stats=stats,
            )
            sink = ResultSink(
                RecordWriter(output, uuids_only=config.uuids_only, color=color),
                ignore_set,
                show_ignored=config.show_ignored,
                stats=stats,
            )

            logger.info(
                "sweep.start",
                wordlist=str(config.wordlist_path),
                threads=config.threads,
                suffixes=len(generator.suffixes) if generator.suffixes is not None else None,
                ignored=len(ignore_set),
                truncation=config.ignore_truncation,
            )

            signals = _shutdown_signals(pool) if install_signal_handlers else contextlib.nullcontext()
            with signals:
                reporter = None
                if on_progress is not None:
                    reporter = asyncio.create_task(_report(stats, on_progress, progress_interval))
                try:
                    await _drive(pool, sink, candidates, config.queue_size)
                finally:
                    if reporter is not None:
                        reporter.cancel()
                        await asyncio.gather(reporter, return_exceptions=True)

        if on_progress is not None:
            on_progress(stats)
        logger.info("sweep.complete", **stats.to_dict())
        return stats


async def _report(stats: SweepStats, on_progress: Callable[[SweepStats], None], interval: float) -> None:
    while True:
        on_progress(stats)
        await asyncio.sleep(interval)


async def _drive(pool: LookupPool, sink: ResultSink, candidates: Iterator[str], queue_size: int) -> None:
    """Run pool and sink side by side; abort both if either fails."""
    outcomes: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
    pool_task = asyncio.create_task(pool.run(candidates, outcomes), name="namesweep-pool")
    sink_task = asyncio.create_task(sink.consume(outcomes), name="namesweep-sink")

    try:
        await asyncio.wait({pool_task, sink_task}, return_when=asyncio.FIRST_EXCEPTION)

        if sink_task.done() and sink_task.exception() is not None:
            # output is gone; nothing more can be written
            pool.request_shutdown(reason="output failed")
            pool_task.cancel()
            await asyncio.gather(pool_task, return_exceptions=True)
            raise sink_task.exception()

        # pool finished (or failed after closing the queue): let the sink drain
        await sink_task
        await pool_task
    finally:
        for task in (pool_task, sink_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(pool_task, sink_task, return_exceptions=True)
