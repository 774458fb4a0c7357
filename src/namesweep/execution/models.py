"""Values passed between the pool and the sink."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class OutcomeStatus(str, Enum):
    """How a single lookup ended."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSIENT_ERROR = "transient_error"
    FATAL_ERROR = "fatal_error"


@dataclass(frozen=True)
class ResolutionOutcome:
    """Result of looking up one candidate. Exactly one per looked-up candidate."""

    candidate: str
    status: OutcomeStatus
    identifier: str | None = None
    error: str | None = None
    attempts: int = 1

    @classmethod
    def found(cls, candidate: str, identifier: str, attempts: int = 1) -> ResolutionOutcome:
        return cls(candidate, OutcomeStatus.FOUND, identifier=identifier, attempts=attempts)

    @classmethod
    def not_found(cls, candidate: str, attempts: int = 1) -> ResolutionOutcome:
        return cls(candidate, OutcomeStatus.NOT_FOUND, attempts=attempts)

    @classmethod
    def transient_error(cls, candidate: str, error: str, attempts: int = 1) -> ResolutionOutcome:
        return cls(candidate, OutcomeStatus.TRANSIENT_ERROR, error=error, attempts=attempts)

    @classmethod
    def fatal_error(cls, candidate: str, error: str, attempts: int = 1) -> ResolutionOutcome:
        return cls(candidate, OutcomeStatus.FATAL_ERROR, error=error, attempts=attempts)


@dataclass(frozen=True)
class OutputRecord:
    """A found identifier on its way to the output stream."""

    candidate: str
    identifier: str
    ignored: bool = False


@dataclass
class SweepStats:
    """Counters for a whole sweep.

    ``candidates`` counts names handed to the pool; every one of them ends up
    in exactly one of ``found``, ``not_found``, ``transient_errors``,
    ``fatal_errors`` or ``skipped`` (dequeued after shutdown began), unless
    the lookup was still in flight when the shutdown timeout expired
    (``cancelled``).
    """

    candidates: int = 0
    requests: int = 0
    found: int = 0
    not_found: int = 0
    transient_errors: int = 0
    fatal_errors: int = 0
    skipped: int = 0
    cancelled: int = 0
    written: int = 0
    ignored_shown: int = 0
    ignored_suppressed: int = 0
    stopped_early: bool = False

    @property
    def outcomes(self) -> int:
        return self.found + self.not_found + self.transient_errors + self.fatal_errors

    def record(self, outcome: ResolutionOutcome) -> None:
        if outcome.status is OutcomeStatus.FOUND:
            self.found += 1
        elif outcome.status is OutcomeStatus.NOT_FOUND:
            self.not_found += 1
        elif outcome.status is OutcomeStatus.TRANSIENT_ERROR:
            self.transient_errors += 1
        else:
            self.fatal_errors += 1

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging / summary output."""
        return asdict(self)
