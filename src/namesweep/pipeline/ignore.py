"""Identifiers to exclude from the output.

Some downstream systems only keep a short prefix of a UUID (LabyMod dumps
keep 8 hex digits). With a truncation length N every ignore entry *and*
every queried identifier is cut to its first N hex digits before comparing,
so a truncated dump still suppresses the full UUIDs it stands for.

Malformed ignore lines never crash the run: lines that are not hex, or are
shorter than N, are skipped with a warning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from namesweep.core.errors import ConfigError
from namesweep.core.logging import get_logger

logger = get_logger(__name__)

_HEX = re.compile(r"^[0-9a-f]+$")


def normalize_identifier(value: str) -> str:
    """Lowercase hex digits with dashes and surrounding whitespace removed."""
    return value.strip().replace("-", "").lower()


def truncate_identifier(identifier: str, truncation: int | None) -> str:
    """First *truncation* hex digits of the normalized identifier (all if ``None``)."""
    normalized = normalize_identifier(identifier)
    if truncation is None:
        return normalized
    return normalized[:truncation]


class IgnoreSet:
    """Immutable set of (possibly truncated) identifiers.

    Built once at startup, then only read, so the sink and any number of
    workers may consult it without locking.
    """

    def __init__(self, entries: Iterable[str] = (), truncation: int | None = None, skipped: int = 0):
        self._truncation = truncation
        self._entries = frozenset(truncate_identifier(e, truncation) for e in entries)
        self._skipped = skipped

    @classmethod
    def from_lines(cls, lines: Iterable[str], truncation: int | None = None) -> IgnoreSet:
        """Load entries from raw lines, skipping malformed ones."""
        kept: list[str] = []
        skipped = 0
        for lineno, line in enumerate(lines, 1):
            normalized = normalize_identifier(line)
            if not normalized:
                continue
            if not _HEX.match(normalized):
                logger.warning("ignore.invalid_entry", line=lineno, value=line.strip())
                skipped += 1
                continue
            if truncation is not None and len(normalized) < truncation:
                logger.warning(
                    "ignore.entry_too_short",
                    line=lineno,
                    value=line.strip(),
                    length=len(normalized),
                    truncation=truncation,
                )
                skipped += 1
                continue
            kept.append(normalized)

        ignore_set = cls(kept, truncation=truncation, skipped=skipped)
        logger.info("ignore.loaded", entries=len(ignore_set), skipped=skipped, truncation=truncation)
        return ignore_set

    @property
    def truncation(self) -> int | None:
        return self._truncation

    @property
    def skipped(self) -> int:
        """Number of source lines rejected while loading."""
        return self._skipped

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def contains(self, identifier: str, truncation: int | None = None) -> bool:
        """Whether *identifier* matches an entry under the same truncation.

        ``truncation`` defaults to the set's own; passing a different value
        is a configuration error because no entry could ever match.
        """
        if truncation is None:
            truncation = self._truncation
        elif truncation != self._truncation:
            raise ConfigError(
                f"Ignore set was loaded with truncation {self._truncation}, queried with {truncation}"
            )
        if not self._entries:
            return False
        return truncate_identifier(identifier, truncation) in self._entries

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.contains(identifier)
