"""Environment-driven settings for namesweep.

Tuning knobs that rarely change between runs (endpoint URL, retry policy,
queue sizes) live here instead of on the command line. Every field can be
set through a ``NAMESWEEP_*`` environment variable or a ``.env`` file.

Examples:
    >>> from namesweep.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.api_url
    'https://mowojang.matdoes.dev'

    $ NAMESWEEP_MAX_RETRIES=5 namesweep run -w words.txt -o found.txt
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SweepSettings(BaseSettings):
    """namesweep centralized configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NAMESWEEP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Endpoint ─────────────────────────────────────────────────
    api_url: str = Field(default="https://mowojang.matdoes.dev")
    request_timeout: float = Field(default=10.0, gt=0)
    user_agent: str = Field(default="namesweep/0.1")

    # ── Worker pool ──────────────────────────────────────────────
    default_threads: int = Field(default=80, ge=1)
    queue_size: int = Field(default=1000, ge=1, description="Capacity of each hand-off queue")
    shutdown_timeout: float = Field(default=15.0, ge=0)

    # ── Retry ────────────────────────────────────────────────────
    max_retries: int = Field(default=3, ge=0)
    base_delay: float = Field(default=0.5, ge=0)
    max_delay: float = Field(default=30.0, ge=0)

    # ── Name rules ───────────────────────────────────────────────
    min_name_length: int = Field(default=3, ge=1)
    max_name_length: int = Field(default=16, ge=1)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @model_validator(mode="after")
    def _check_ranges(self) -> SweepSettings:
        if self.min_name_length > self.max_name_length:
            raise ValueError("min_name_length must not exceed max_name_length")
        if self.base_delay > self.max_delay:
            raise ValueError("base_delay must not exceed max_delay")
        return self


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, SweepSettings] = {}


def get_settings(*, _force_reload: bool = False) -> SweepSettings:
    """Load, validate, and cache a :class:`SweepSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = SweepSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
