"""Candidate generation: sanitize wordlist lines and expand suffixes.

Rules:
    - Every character outside ``[A-Za-z0-9_]`` is removed. Sanitizing never
      fails and is idempotent; a line that sanitizes to ``""`` is dropped.
    - Without a suffix list each line yields itself.
    - With a suffix list each line yields ``word + suffix`` for every suffix,
      in suffix order, and never the bare word. An empty suffix list therefore
      yields nothing at all.
    - A combination that breaks :class:`NameRules` (too short / too long) is
      dropped on its own; the word's other combinations are still produced.

No case folding and no deduplication are performed.

Example:
    >>> gen = CandidateGenerator(suffixes=["_EU", "_NA"])
    >>> list(gen.generate(["steve"]))
    ['steve_EU', 'steve_NA']
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

_ILLEGAL = re.compile(r"[^A-Za-z0-9_]")


def sanitize(line: str) -> str:
    """Remove every character that can't appear in a player name."""
    return _ILLEGAL.sub("", line)


@dataclass(frozen=True)
class NameRules:
    """Length bounds of a valid player name."""

    min_length: int = 3
    max_length: int = 16

    def is_valid(self, name: str) -> bool:
        return self.min_length <= len(name) <= self.max_length and not _ILLEGAL.search(name)


class CandidateGenerator:
    """Turns raw lines into a lazy stream of candidate names.

    ``generate`` may be called any number of times; each call walks the given
    lines afresh, so passing a re-iterable source (a list, a
    :class:`~namesweep.core.lines.LineSource`) makes the stream restartable.
    """

    def __init__(self, suffixes: Iterable[str] | None = None, rules: NameRules | None = None):
        if suffixes is None:
            self._suffixes: tuple[str, ...] | None = None
        else:
            self._suffixes = tuple(s for s in (sanitize(raw) for raw in suffixes) if s)
        self._rules = rules or NameRules()

    @property
    def suffixes(self) -> tuple[str, ...] | None:
        return self._suffixes

    @property
    def rules(self) -> NameRules:
        return self._rules

    def expand(self, word: str) -> Iterator[str]:
        """Candidates for one already-sanitized word."""
        if not word:
            return
        if self._suffixes is None:
            if self._rules.is_valid(word):
                yield word
            return
        for suffix in self._suffixes:
            name = word + suffix
            if self._rules.is_valid(name):
                yield name

    def generate(self, lines: Iterable[str]) -> Iterator[str]:
        for line in lines:
            yield from self.expand(sanitize(line))
