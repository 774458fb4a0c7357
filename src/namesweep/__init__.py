"""
namesweep: resolve wordlists of player names into UUIDs.

Pipeline::

    wordlist ─► CandidateGenerator ─► LookupPool (T workers) ─► ResultSink ─► output
                                                                    ▲
                                                               IgnoreSet

Entry points:
    - ``namesweep`` CLI (see :mod:`namesweep.cli`)
    - :func:`namesweep.pipeline.runner.run_sweep` for programmatic use
"""

__version__ = "0.1.0"
