"""Tests for namesweep.cli: command smoke tests via CliRunner.

``run`` is exercised with ``run_sweep`` patched out so no network is used;
``candidates`` runs for real against files in ``tmp_path``.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from namesweep import __version__
from namesweep.cli.app import app
from namesweep.cli.utils import format_progress
from namesweep.execution.models import SweepStats

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch):
    monkeypatch.setenv("NAMESWEEP_LOG_LEVEL", "WARNING")


def _fake_sweep(stats: SweepStats, seen: list):
    async def fake(config, on_progress=None, **kwargs):
        seen.append(config)
        if on_progress is not None:
            on_progress(stats)
        return stats

    return fake


# ─── Root ────────────────────────────────────────────────────────────────


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.startswith("namesweep ")

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "run" in result.stdout
        assert "candidates" in result.stdout

    def test_package_version(self):
        assert __version__ == "0.1.0"


# ─── candidates ──────────────────────────────────────────────────────────


class TestCandidatesCommand:
    def test_prints_sanitized_names(self, write_lines):
        words = write_lines("words.txt", ["Foo!", "bar", "!!!"])
        result = runner.invoke(app, ["candidates", "-w", str(words)])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["Foo", "bar"]

    def test_with_suffixes(self, write_lines):
        words = write_lines("words.txt", ["steve"])
        suffixes = write_lines("suffixes.txt", ["_EU", "_NA"])
        result = runner.invoke(app, ["candidates", "-w", str(words), "-s", str(suffixes)])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["steve_EU", "steve_NA"]

    def test_count(self, write_lines):
        words = write_lines("words.txt", ["abc", "bcd", "cde"])
        result = runner.invoke(app, ["candidates", "-w", str(words), "--count"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "3"

    def test_missing_wordlist(self, tmp_path):
        result = runner.invoke(app, ["candidates", "-w", str(tmp_path / "nope.txt")])
        assert result.exit_code == 1


# ─── run ─────────────────────────────────────────────────────────────────


class TestRunCommand:
    def test_builds_config_and_exits_zero(self, write_lines, tmp_path):
        words = write_lines("words.txt", ["Foo"])
        ignore = write_lines("ignore.txt", ["abcd1234"])
        seen: list = []
        stats = SweepStats(candidates=1, requests=1, found=1, written=1)

        with patch("namesweep.pipeline.runner.run_sweep", _fake_sweep(stats, seen)):
            result = runner.invoke(
                app,
                [
                    "run",
                    "-w", str(words),
                    "-o", str(tmp_path / "out.txt"),
                    "-t", "5",
                    "-i", str(ignore),
                    "-r", "8",
                    "-a",
                ],
            )

        assert result.exit_code == 0, result.output
        [config] = seen
        assert config.threads == 5
        assert config.ignore_truncation == 8
        assert config.show_ignored is True
        assert config.uuids_only is False

    def test_threads_default_from_env(self, write_lines, tmp_path, monkeypatch):
        monkeypatch.setenv("NAMESWEEP_DEFAULT_THREADS", "11")
        words = write_lines("words.txt", ["Foo"])
        seen: list = []

        with patch("namesweep.pipeline.runner.run_sweep", _fake_sweep(SweepStats(), seen)):
            result = runner.invoke(app, ["run", "-w", str(words), "-o", str(tmp_path / "out.txt")])

        assert result.exit_code == 0, result.output
        assert seen[0].threads == 11

    def test_fatal_errors_exit_nonzero(self, write_lines, tmp_path):
        words = write_lines("words.txt", ["Foo"])
        stats = SweepStats(candidates=1, fatal_errors=1, stopped_early=True)

        with patch("namesweep.pipeline.runner.run_sweep", _fake_sweep(stats, [])):
            result = runner.invoke(app, ["run", "-w", str(words), "-o", str(tmp_path / "out.txt")])

        assert result.exit_code == 1

    def test_zero_threads_rejected(self, write_lines, tmp_path):
        words = write_lines("words.txt", ["Foo"])
        result = runner.invoke(app, ["run", "-w", str(words), "-o", str(tmp_path / "out.txt"), "-t", "0"])
        assert result.exit_code == 1

    def test_bad_truncation_rejected(self, write_lines, tmp_path):
        words = write_lines("words.txt", ["Foo"])
        result = runner.invoke(app, ["run", "-w", str(words), "-o", str(tmp_path / "out.txt"), "-r", "40"])
        assert result.exit_code == 1

    def test_missing_required_options(self):
        result = runner.invoke(app, ["run"])
        assert result.exit_code != 0


class TestProgress:
    def test_format(self):
        stats = SweepStats(requests=120, found=7, written=5)
        assert format_progress(stats) == "reqs: 120 | found: 5 (7 total)"
