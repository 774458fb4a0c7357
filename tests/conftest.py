"""
Shared pytest fixtures and configuration for namesweep tests.

This module provides:
- An instrumented in-memory lookup client (counts calls and concurrency)
- Helpers to write wordlists / suffix / ignore files into ``tmp_path``
- Settings cache isolation

Usage:
    async def test_something(make_client):
        client = make_client({"Foo": FOO_ID})
        ...
"""

import asyncio
import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

# Ensure namesweep package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from namesweep.core.settings import clear_settings_cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "test_runner" in str(test_path) or "test_cli" in str(test_path):
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Fake endpoint
# =============================================================================


class FakeLookupClient:
    """In-memory stand-in for the lookup endpoint.

    Args:
        registry: name -> identifier; names not present are "not found"
        delay: seconds each lookup takes (lets concurrency build up)
        failures: name -> exceptions raised, in order, before answering normally
    """

    def __init__(
        self,
        registry: dict[str, str] | None = None,
        *,
        delay: float = 0.0,
        failures: dict[str, list[Exception]] | None = None,
    ) -> None:
        self.registry = dict(registry or {})
        self.delay = delay
        self.failures = {k: list(v) for k, v in (failures or {}).items()}
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def lookup(self, name: str) -> str | None:
        self.calls.append(name)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            pending = self.failures.get(name)
            if pending:
                raise pending.pop(0)
            return self.registry.get(name)
        finally:
            self.in_flight -= 1


@pytest.fixture
def make_client() -> Callable[..., FakeLookupClient]:
    """Factory for :class:`FakeLookupClient` instances."""

    def _make(registry: dict[str, str] | None = None, **kwargs: Any) -> FakeLookupClient:
        return FakeLookupClient(registry, **kwargs)

    return _make


async def no_sleep(delay: float) -> None:
    """Backoff replacement that only yields to the loop."""
    await asyncio.sleep(0)


@pytest.fixture
def instant_sleep() -> Callable[[float], Any]:
    return no_sleep


# =============================================================================
# Files
# =============================================================================


@pytest.fixture
def write_lines(tmp_path: Path) -> Callable[[str, Iterable[str]], Path]:
    """Write lines to ``tmp_path / name`` and return the path."""

    def _write(name: str, lines: Iterable[str]) -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache():
    """Clear cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
