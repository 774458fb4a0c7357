"""
Execution layer: the lookup worker pool and its retry policy.
"""

from namesweep.execution.models import OutcomeStatus, OutputRecord, ResolutionOutcome, SweepStats
from namesweep.execution.pool import LookupPool
from namesweep.execution.retry import (
    ExponentialBackoff,
    NoRetry,
    RetryContext,
    RetryStrategy,
)

__all__ = [
    "OutcomeStatus",
    "OutputRecord",
    "ResolutionOutcome",
    "SweepStats",
    "LookupPool",
    "RetryStrategy",
    "ExponentialBackoff",
    "NoRetry",
    "RetryContext",
]
