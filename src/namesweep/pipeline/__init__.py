"""
Pipeline stages: candidate generation, ignore set, result sink, and the runner
that wires them to the worker pool.
"""

from namesweep.pipeline.candidates import CandidateGenerator, NameRules, sanitize
from namesweep.pipeline.ignore import IgnoreSet, normalize_identifier, truncate_identifier
from namesweep.pipeline.sink import RecordWriter, ResultSink

__all__ = [
    "CandidateGenerator",
    "NameRules",
    "sanitize",
    "IgnoreSet",
    "normalize_identifier",
    "truncate_identifier",
    "RecordWriter",
    "ResultSink",
]
