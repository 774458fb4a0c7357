"""Immutable run configuration.

``SweepConfig`` is built once at startup from command-line options plus
:class:`~namesweep.core.settings.SweepSettings` and handed to the runner.
Nothing downstream re-reads the environment mid-run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from namesweep.core.errors import InvalidConfigError
from namesweep.core.settings import SweepSettings

# A UUID has 32 hex digits
MAX_TRUNCATION = 32

STDOUT = "-"


@dataclass(frozen=True)
class SweepConfig:
    """Everything a sweep needs, validated.

    Attributes:
        wordlist_path: Line-delimited candidate seeds
        output_path: Where records are appended (``-`` for stdout)
        threads: Number of concurrent lookup workers (T)
        ignore_path: Optional list of identifiers to suppress
        ignore_truncation: Hex digits kept from identifiers before matching (N)
        suffix_path: Optional list of suffixes appended to every word
        show_ignored: Write ignored records in a distinguished form instead of dropping them
        uuids_only: Write only the identifier, not ``identifier:name``
    """

    wordlist_path: Path
    output_path: str
    threads: int
    ignore_path: Path | None = None
    ignore_truncation: int | None = None
    suffix_path: Path | None = None
    show_ignored: bool = False
    uuids_only: bool = False

    api_url: str = "https://mowojang.matdoes.dev"
    request_timeout: float = 10.0
    user_agent: str = "namesweep/0.1"
    max_retries: int = 3
    base_delay: float = 0.5
    max_delay: float = 30.0
    queue_size: int = 1000
    shutdown_timeout: float = 15.0
    min_name_length: int = 3
    max_name_length: int = 16

    def __post_init__(self) -> None:
        if self.threads < 1:
            raise InvalidConfigError("threads", self.threads, "threads must be at least 1")
        if self.ignore_truncation is not None and not 1 <= self.ignore_truncation <= MAX_TRUNCATION:
            raise InvalidConfigError(
                "ignore_truncation",
                self.ignore_truncation,
                f"ignore truncation must be between 1 and {MAX_TRUNCATION} hex digits",
            )
        if self.queue_size < 1:
            raise InvalidConfigError("queue_size", self.queue_size)
        if self.max_retries < 0:
            raise InvalidConfigError("max_retries", self.max_retries)

    @property
    def writes_to_stdout(self) -> bool:
        return self.output_path == STDOUT

    @classmethod
    def build(
        cls,
        settings: SweepSettings,
        *,
        wordlist_path: str | Path,
        output_path: str | Path,
        threads: int | None = None,
        ignore_path: str | Path | None = None,
        ignore_truncation: int | None = None,
        suffix_path: str | Path | None = None,
        show_ignored: bool = False,
        uuids_only: bool = False,
    ) -> SweepConfig:
        """Merge command-line options with environment settings."""
        return cls(
            wordlist_path=Path(wordlist_path),
            output_path=str(output_path),
            threads=settings.default_threads if threads is None else threads,
            ignore_path=Path(ignore_path) if ignore_path else None,
            ignore_truncation=ignore_truncation,
            suffix_path=Path(suffix_path) if suffix_path else None,
            show_ignored=show_ignored,
            uuids_only=uuids_only,
            api_url=settings.api_url,
            request_timeout=settings.request_timeout,
            user_agent=settings.user_agent,
            max_retries=settings.max_retries,
            base_delay=settings.base_delay,
            max_delay=settings.max_delay,
            queue_size=settings.queue_size,
            shutdown_timeout=settings.shutdown_timeout,
            min_name_length=settings.min_name_length,
            max_name_length=settings.max_name_length,
        )
