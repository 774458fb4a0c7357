"""Result Sink: ignore filtering and the single output writer.

Outcomes arrive in completion order. The sink is the only consumer of the
outcome queue and the only owner of the :class:`RecordWriter`, so lines are
written one at a time and never interleave.

    found, not ignored              → written normally
    found, ignored, show_ignored    → written in the ignored form
    found, ignored, not shown       → dropped
    not_found                       → dropped
    transient_error / fatal_error   → diagnostic log (stderr), never written
"""

from __future__ import annotations

import asyncio
from typing import TextIO

from rich.console import Console
from rich.text import Text

from namesweep.core.errors import SourceIOError
from namesweep.core.logging import get_logger
from namesweep.execution.models import OutcomeStatus, OutputRecord, ResolutionOutcome, SweepStats
from namesweep.execution.pool import CLOSED
from namesweep.pipeline.ignore import IgnoreSet

logger = get_logger(__name__)

IGNORED_STYLE = "grey50"
IGNORED_PREFIX = "# "


class RecordWriter:
    """Formats records and writes them, one complete line per call.

    On a terminal, ignored records are dimmed; in a plain file they are
    prefixed with ``# `` so they read as comments. Only the stream decides
    which: colour environment variables never put escape codes in a file.

    Args:
        stream: Destination text stream (opened for append by the caller)
        uuids_only: Write ``<uuid>`` instead of ``<uuid>:<name>``
        color: Force colours on/off; ``None`` asks the stream's ``isatty()``
    """

    def __init__(self, stream: TextIO, *, uuids_only: bool = False, color: bool | None = None):
        self._stream = stream
        self._uuids_only = uuids_only
        self._is_terminal = color if color is not None else _isatty(stream)
        self._console = Console(
            file=stream,
            force_terminal=True,
            color_system="standard",
            highlight=False,
            markup=False,
            emoji=False,
            soft_wrap=True,
        )

    @property
    def is_terminal(self) -> bool:
        return self._is_terminal

    def format(self, record: OutputRecord) -> str:
        if self._uuids_only:
            return record.identifier
        return f"{record.identifier}:{record.candidate}"

    def write(self, record: OutputRecord) -> None:
        line = self.format(record)
        try:
            if record.ignored and self._is_terminal:
                self._console.print(Text(line, style=IGNORED_STYLE))
            else:
                if record.ignored:
                    line = IGNORED_PREFIX + line
                # whole line in one call
                self._stream.write(line + "\n")
            self._stream.flush()
        except OSError as e:
            raise SourceIOError(f"Cannot write output: {e}", cause=e)


def _isatty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


class ResultSink:
    """Consumes outcomes and writes the surviving records."""

    def __init__(
        self,
        writer: RecordWriter,
        ignore_set: IgnoreSet | None = None,
        *,
        show_ignored: bool = False,
        truncation: int | None = None,
        stats: SweepStats | None = None,
    ) -> None:
        self._writer = writer
        self._ignore = ignore_set if ignore_set is not None else IgnoreSet(truncation=truncation)
        self._show_ignored = show_ignored
        self._truncation = truncation if truncation is not None else self._ignore.truncation
        self.stats = stats if stats is not None else SweepStats()

    async def consume(self, outcomes: asyncio.Queue) -> SweepStats:
        """Drain *outcomes* until the pool closes it."""
        while True:
            outcome = await outcomes.get()
            if outcome is CLOSED:
                break
            self.handle(outcome)
        logger.debug("sink.closed", written=self.stats.written)
        return self.stats

    def handle(self, outcome: ResolutionOutcome) -> OutputRecord | None:
        """Process one outcome; returns the record if one was written."""
        if outcome.status is OutcomeStatus.NOT_FOUND:
            logger.debug("lookup.not_found", candidate=outcome.candidate)
            return None
        if outcome.status is OutcomeStatus.TRANSIENT_ERROR:
            logger.warning(
                "lookup.failed", candidate=outcome.candidate, error=outcome.error, attempts=outcome.attempts
            )
            return None
        if outcome.status is OutcomeStatus.FATAL_ERROR:
            logger.error("lookup.fatal", candidate=outcome.candidate, error=outcome.error)
            return None

        ignored = self._ignore.contains(outcome.identifier, self._truncation)
        record = OutputRecord(candidate=outcome.candidate, identifier=outcome.identifier, ignored=ignored)

        if ignored and not self._show_ignored:
            self.stats.ignored_suppressed += 1
            logger.debug("record.ignored", candidate=record.candidate, identifier=record.identifier)
            return None

        self._writer.write(record)
        if ignored:
            self.stats.ignored_shown += 1
        else:
            self.stats.written += 1
            logger.info("record.found", candidate=record.candidate, identifier=record.identifier)
        return record
