"""
Mojang-compatible profile lookup client.

Resolves a player name to its UUID through a single HTTP endpoint. The
default is the mowojang mirror, which serves the Mojang profile API shape
without Mojang's aggressive rate limits.

Request / response contract:

    GET {base_url}/users/profiles/minecraft/{name}

    200  {"id": "<32 hex>", "name": "<canonical name>"}  → "xxxxxxxx-xxxx-…"
    204 / 404                                             → None (unregistered)
    429                                                   → RateLimitError
    5xx                                                   → SourceUnavailableError
    401 / 403 / 410                                       → FatalEndpointError
    anything else, or a body without a valid id           → MalformedResponseError

Transport failures map to :class:`~namesweep.core.errors.TimeoutError` and
:class:`~namesweep.core.errors.NetworkError`. Everything except
``FatalEndpointError`` is retryable.

Usage:
    async with MowojangClient() as client:
        identifier = await client.lookup("Notch")
"""

from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

import httpx

from namesweep.core.errors import (
    FatalEndpointError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    SourceUnavailableError,
    TimeoutError,
)
from namesweep.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://mowojang.matdoes.dev"
PROFILE_PATH = "/users/profiles/minecraft/{name}"

NOT_FOUND_STATUSES = frozenset({204, 404})
FATAL_STATUSES = frozenset({401, 403, 410})


@runtime_checkable
class LookupClient(Protocol):
    """Anything that can resolve a name to an identifier.

    Returns the identifier, ``None`` when the name is unregistered, or raises
    a :class:`~namesweep.core.errors.SweepError` subclass.
    """

    async def lookup(self, name: str) -> str | None: ...


def format_identifier(raw: str) -> str:
    """Canonical hyphenated lowercase form of a UUID string (dashed or not)."""
    return str(uuid.UUID(hex=raw))


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        # HTTP-date form; let the backoff strategy decide
        return None


class MowojangClient:
    """Async lookup client over a shared :class:`httpx.AsyncClient`.

    The underlying connection pool is sized to the worker count so T workers
    never queue behind each other inside httpx.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 10.0,
        user_agent: str = "namesweep/0.1",
        max_connections: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_connections,
            ),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> MowojangClient:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def lookup(self, name: str) -> str | None:
        """Resolve *name* to a hyphenated UUID, or ``None`` if unregistered."""
        path = PROFILE_PATH.format(name=name)
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as e:
            raise TimeoutError(f"Lookup timed out for {name}", cause=e).with_context(
                candidate=name, url=url
            )
        except httpx.TransportError as e:
            raise NetworkError(f"Lookup request failed for {name}: {e}", cause=e).with_context(
                candidate=name, url=url
            )

        return self._interpret(name, url, response)

    def _interpret(self, name: str, url: str, response: httpx.Response) -> str | None:
        status = response.status_code

        if status in NOT_FOUND_STATUSES:
            return None
        if status == 429:
            raise RateLimitError(
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            ).with_context(candidate=name, url=url, http_status=status)
        if status in FATAL_STATUSES:
            raise FatalEndpointError(
                f"Lookup endpoint refused access (HTTP {status})",
            ).with_context(candidate=name, url=url, http_status=status)
        if status >= 500:
            raise SourceUnavailableError(
                f"Lookup endpoint unavailable (HTTP {status})",
            ).with_context(candidate=name, url=url, http_status=status)
        if status != 200:
            raise MalformedResponseError(
                f"Unexpected HTTP {status} from lookup endpoint",
            ).with_context(candidate=name, url=url, http_status=status)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError("Lookup response is not JSON", cause=e).with_context(
                candidate=name, url=url, http_status=status
            )

        raw_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(raw_id, str):
            raise MalformedResponseError("Lookup response has no id").with_context(
                candidate=name, url=url, http_status=status
            )
        try:
            identifier = format_identifier(raw_id)
        except ValueError as e:
            raise MalformedResponseError(f"Lookup response id is not a UUID: {raw_id!r}", cause=e).with_context(
                candidate=name, url=url, http_status=status
            )

        logger.debug("lookup.found", candidate=name, identifier=identifier, canonical=payload.get("name"))
        return identifier
