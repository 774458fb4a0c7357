"""
CLI layer for namesweep.

A Typer application that only parses options and renders summaries; the
sweep itself lives in :mod:`namesweep.pipeline.runner`.

Entry point::

    namesweep --help
"""

from namesweep.cli.app import app

__all__ = ["app"]
