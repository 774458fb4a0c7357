"""
Structured error types for namesweep.

Every failure a sweep can hit carries the metadata the worker pool needs to
decide what to do with it: retry the lookup, record the candidate as failed
and move on, stop intake, or abort the whole run.

Each error knows its category and whether retrying could help, may carry a
``retry_after`` hint from the remote, collects the candidate / URL / HTTP
status it happened on, and keeps the exception it wraps as ``__cause__``.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       SweepError                                 │
        │  (category, retryable, retry_after, context, cause)             │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  TransientError        SourceError             AuthError         │
        │  (retryable=True)      (SOURCE)                (AUTH)            │
        │       │                     │                       │            │
        │  NetworkError          SourceUnavailableError  FatalEndpointError│
        │  TimeoutError          MalformedResponseError                    │
        │  RateLimitError        SourceIOError                             │
        │                                                                  │
        │  ConfigError                                                     │
        │  (CONFIG)                                                        │
        │       │                                                          │
        │  InvalidConfigError                                              │
        └─────────────────────────────────────────────────────────────────┘

    How the pool treats each branch:

        retryable=True   → retried with backoff, then TRANSIENT_ERROR outcome
        FatalEndpointError → FATAL_ERROR outcome, graceful shutdown
        SourceIOError    → aborts the run (wordlist / output unreadable)
        ConfigError      → raised before any lookup is issued

Examples:
    >>> error = RateLimitError(retry_after=5)
    >>> error.retryable, error.retry_after
    (True, 5)

    >>> error = MalformedResponseError("missing id").with_context(candidate="Foo")
    >>> error.context.candidate
    'Foo'

Usage:
    from namesweep.core.errors import NetworkError, FatalEndpointError

    try:
        response = await client.get(url)
    except httpx.TransportError as e:
        raise NetworkError("lookup request failed", cause=e)
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    What part of a sweep an error came from; logged with every failure.

    Attributes:
        NETWORK: Connection, timeout, rate limit
        SOURCE: Remote endpoint answered with something unusable
        PARSE: Response body could not be interpreted
        STORAGE: Wordlist, ignore list or output file problems
        CONFIG: Invalid options or settings
        AUTH: Endpoint refuses us permanently
        INTERNAL: Bugs, unexpected state
    """

    NETWORK = "NETWORK"
    SOURCE = "SOURCE"
    PARSE = "PARSE"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    AUTH = "AUTH"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Where an error happened.

    Attributes:
        candidate: Name being looked up
        path: File being read or written
        url: Lookup URL
        http_status: Status code of the response, if there was one
        metadata: Anything else passed to ``with_context``
    """

    candidate: str | None = None
    path: str | None = None
    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Set fields only, with metadata flattened in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "metadata" and getattr(self, f.name) is not None
        }
        result.update(self.metadata)
        return result


class SweepError(Exception):
    """
    Base exception for all namesweep errors.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites rarely need to pass them explicitly.

    Examples:
        >>> error = SweepError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        >>> d = SweepError("bad", category=ErrorCategory.CONFIG).to_dict()
        >>> d["category"], d["retryable"]
        ('CONFIG', False)
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: float | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = self.default_retryable if retryable is None else retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SweepError:
        """
        Attach context and return ``self``, so it chains onto ``raise``.

        Usage:
            raise NetworkError("Failed").with_context(candidate="Foo", url=url)
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Flat representation for structured log fields."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        context = self.context.to_dict()
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Retryable)
# =============================================================================


class TransientError(SweepError):
    """
    The same request, issued again after a delay, may well succeed:
    connection resets, timeouts, rate limiting.
    """

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Connection could not be made or was dropped."""


class TimeoutError(TransientError):
    """Lookup request timed out."""


class RateLimitError(TransientError):
    """Remote endpoint signalled a rate limit (HTTP 429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, retry_after=retry_after, **kwargs)


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(SweepError):
    """Error from the lookup endpoint or a local line source."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class SourceUnavailableError(SourceError):
    """Endpoint temporarily unavailable (5xx)."""

    default_retryable = True


class MalformedResponseError(SourceError):
    """Response had an unexpected status or body shape.

    Treated like a transient failure: retried, then surfaced as a
    failed candidate. Never stops the pool.
    """

    default_category = ErrorCategory.PARSE
    default_retryable = True


class SourceIOError(SourceError):
    """A wordlist, suffix list, ignore list or the output could not be read/written.

    Fatal to the whole run.
    """

    default_category = ErrorCategory.STORAGE


# =============================================================================
# FATAL ENDPOINT ERRORS
# =============================================================================


class AuthError(SweepError):
    """The endpoint refuses this client."""

    default_category = ErrorCategory.AUTH
    default_retryable = False


class FatalEndpointError(AuthError):
    """Endpoint is permanently unusable for this run (401/403/410).

    The pool stops issuing lookups when a worker sees this.
    """


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SweepError):
    """Options or settings that can't work together; fix them and rerun."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """A single option has an unusable value."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# HELPERS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Retryable SweepErrors, plus plain connection-level OSErrors."""
    if isinstance(error, SweepError):
        return error.retryable
    return isinstance(error, (ConnectionError, OSError))


def get_retry_after(error: Exception) -> float | None:
    """The remote's requested wait, if the error carries one."""
    if isinstance(error, SweepError):
        return error.retry_after
    return None


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SweepError",
    "TransientError",
    "NetworkError",
    "TimeoutError",
    "RateLimitError",
    "SourceError",
    "SourceUnavailableError",
    "MalformedResponseError",
    "SourceIOError",
    "AuthError",
    "FatalEndpointError",
    "ConfigError",
    "InvalidConfigError",
    "is_retryable",
    "get_retry_after",
]
