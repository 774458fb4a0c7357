"""Line-delimited text sources and the output stream.

Wordlists can be large, so :class:`LineSource` streams lines lazily and can
be iterated more than once (each iteration reopens the file). Any
``OSError`` while reading or writing is converted to
:class:`~namesweep.core.errors.SourceIOError`, which aborts the run.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from namesweep.core.errors import SourceIOError


class LineSource:
    """Re-iterable, lazy view over a text file's lines (newline stripped)."""

    def __init__(self, path: str | Path, encoding: str = "utf-8"):
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    def __iter__(self) -> Iterator[str]:
        try:
            with open(self._path, "r", encoding=self._encoding, errors="replace") as f:
                for line in f:
                    yield line.rstrip("\r\n")
        except OSError as e:
            raise SourceIOError(f"Cannot read {self._path}: {e}", cause=e).with_context(
                path=str(self._path)
            )

    def __repr__(self) -> str:
        return f"LineSource({str(self._path)!r})"


def read_lines(path: str | Path) -> list[str]:
    """Read a small list file (suffixes, ignore list) fully into memory."""
    return list(LineSource(path))


def open_output(path: str | Path) -> TextIO:
    """Open the output for appending; ``-`` means stdout.

    The caller owns the returned stream (stdout is never closed by the runner).
    """
    if str(path) == "-":
        return sys.stdout
    try:
        return open(path, "a", encoding="utf-8")
    except OSError as e:
        raise SourceIOError(f"Cannot open output {path}: {e}", cause=e).with_context(path=str(path))
