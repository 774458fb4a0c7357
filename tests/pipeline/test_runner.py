"""End-to-end sweeps against an in-memory endpoint."""

from __future__ import annotations

import asyncio
import io
import os
import signal
import sys

import pytest

from namesweep.core.config import SweepConfig
from namesweep.core.errors import FatalEndpointError, SourceIOError
from namesweep.pipeline.ignore import IgnoreSet
from namesweep.pipeline.runner import build_ignore_set, iter_candidates, run_sweep

FOO_ID = "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"
BAR_ID = "abcd1234-ef00-1122-3344-556677889900"


@pytest.fixture
def config_for(write_lines, tmp_path):
    """Build a SweepConfig over files written into tmp_path."""

    def _make(words, *, threads=1, ignore=None, truncation=None, suffixes=None, **kwargs):
        return SweepConfig(
            wordlist_path=write_lines("words.txt", words),
            output_path=str(tmp_path / "out.txt"),
            threads=threads,
            ignore_path=write_lines("ignore.txt", ignore) if ignore is not None else None,
            ignore_truncation=truncation,
            suffix_path=write_lines("suffixes.txt", suffixes) if suffixes is not None else None,
            base_delay=0.0,
            max_delay=0.0,
            shutdown_timeout=1.0,
            **kwargs,
        )

    return _make


async def _sweep(config, client):
    out = io.StringIO()
    stats = await run_sweep(config, client=client, output=out, color=False, install_signal_handlers=False)
    return stats, out.getvalue().splitlines()


class TestSweep:
    @pytest.mark.asyncio
    async def test_sanitized_words_are_looked_up(self, config_for, make_client):
        client = make_client({"Foo": FOO_ID})
        stats, lines = await _sweep(config_for(["Foo!", "bar"]), client)

        assert lines == [f"{FOO_ID}:Foo"]
        assert sorted(client.calls) == ["Foo", "bar"]
        assert stats.found == 1
        assert stats.not_found == 1

    @pytest.mark.asyncio
    async def test_suffix_expansion(self, config_for, make_client):
        client = make_client({"steve_EU": FOO_ID})
        stats, lines = await _sweep(config_for(["steve"], suffixes=["_EU", "_NA"]), client)

        assert sorted(client.calls) == ["steve_EU", "steve_NA"]
        assert lines == [f"{FOO_ID}:steve_EU"]

    @pytest.mark.asyncio
    async def test_ignored_identifier_suppressed(self, config_for, make_client):
        client = make_client({"Foo": FOO_ID, "Bar": BAR_ID})
        config = config_for(["Foo", "Bar"], ignore=["abcd1234"], truncation=8)
        stats, lines = await _sweep(config, client)

        assert lines == [f"{FOO_ID}:Foo"]
        assert stats.ignored_suppressed == 1

    @pytest.mark.asyncio
    async def test_ignored_identifier_shown(self, config_for, make_client):
        client = make_client({"Bar": BAR_ID})
        config = config_for(["Bar"], ignore=["abcd1234"], truncation=8, show_ignored=True)
        stats, lines = await _sweep(config, client)

        assert lines == [f"# {BAR_ID}:Bar"]
        assert stats.ignored_shown == 1

    @pytest.mark.asyncio
    async def test_uuids_only(self, config_for, make_client):
        client = make_client({"Foo": FOO_ID})
        _, lines = await _sweep(config_for(["Foo"], uuids_only=True), client)
        assert lines == [FOO_ID]

    @pytest.mark.asyncio
    async def test_many_threads_every_candidate_once(self, config_for, make_client):
        words = [f"user{i}" for i in range(200)]
        registry = {w: FOO_ID for w in words[::10]}
        client = make_client(registry, delay=0.001)
        stats, lines = await _sweep(config_for(words, threads=16), client)

        assert sorted(client.calls) == sorted(words)
        assert len(lines) == 20
        assert client.peak_in_flight <= 16
        assert stats.candidates == 200

    @pytest.mark.asyncio
    async def test_fatal_endpoint_stops_early(self, config_for, make_client):
        words = [f"user{i}" for i in range(100)]
        client = make_client(failures={"user0": [FatalEndpointError("HTTP 403")]})
        stats, lines = await _sweep(config_for(words, queue_size=4), client)

        assert stats.stopped_early
        assert stats.fatal_errors == 1
        assert len(client.calls) < len(words)
        assert lines == []

    @pytest.mark.asyncio
    async def test_writes_to_output_file(self, config_for, make_client, tmp_path):
        config = config_for(["Foo"])
        (tmp_path / "out.txt").write_text("previous\n", encoding="utf-8")

        await run_sweep(config, client=make_client({"Foo": FOO_ID}), color=False, install_signal_handlers=False)

        assert (tmp_path / "out.txt").read_text(encoding="utf-8") == f"previous\n{FOO_ID}:Foo\n"

    @pytest.mark.asyncio
    async def test_missing_wordlist_is_source_io_error(self, tmp_path, make_client):
        config = SweepConfig(wordlist_path=tmp_path / "missing.txt", output_path="-", threads=2)
        with pytest.raises(SourceIOError):
            await run_sweep(config, client=make_client(), output=io.StringIO(), install_signal_handlers=False)

    @pytest.mark.asyncio
    async def test_output_failure_aborts_without_partial_line(self, config_for, make_client):
        class FailsSecondWrite(io.StringIO):
            writes = 0

            def write(self, s):
                self.writes += 1
                if self.writes > 1:
                    raise OSError("disk full")
                return super().write(s)

        words = [f"user{i}" for i in range(20)]
        client = make_client({w: FOO_ID for w in words})
        out = FailsSecondWrite()

        with pytest.raises(SourceIOError):
            await run_sweep(config_for(words), client=client, output=out, color=False, install_signal_handlers=False)

        assert out.getvalue() == f"{FOO_ID}:user0\n"

    @pytest.mark.asyncio
    async def test_progress_reported_while_running(self, config_for, make_client):
        words = [f"user{i}" for i in range(10)]
        client = make_client({"user3": FOO_ID}, delay=0.01)
        seen = []

        stats = await run_sweep(
            config_for(words),
            client=client,
            output=io.StringIO(),
            color=False,
            install_signal_handlers=False,
            on_progress=lambda s: seen.append((s.requests, s.written, s.found)),
            progress_interval=0.005,
        )

        assert len(seen) >= 2
        assert seen[0] == (0, 0, 0)
        assert seen[-1] == (stats.requests, stats.written, stats.found) == (10, 1, 1)


@pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers are POSIX only")
class TestSignals:
    @pytest.mark.asyncio
    async def test_sigint_stops_gracefully(self, config_for, make_client):
        words = [f"user{i}" for i in range(50)]
        client = make_client(delay=0.2)
        config = config_for(words, threads=2, queue_size=4)
        asyncio.get_running_loop().call_later(0.05, os.kill, os.getpid(), signal.SIGINT)

        stats = await run_sweep(config, client=client, output=io.StringIO(), color=False)

        assert stats.stopped_early
        assert len(client.calls) < len(words)
        assert stats.candidates == stats.outcomes + stats.skipped
        assert signal.getsignal(signal.SIGINT) is signal.default_int_handler


class TestRunnerHelpers:
    def test_iter_candidates_without_network(self, config_for):
        config = config_for(["ab!", "cd"], suffixes=["1"])
        assert list(iter_candidates(config)) == ["ab1", "cd1"]

    def test_build_ignore_set_without_file(self, config_for):
        ignore = build_ignore_set(config_for(["a"], truncation=8))
        assert isinstance(ignore, IgnoreSet)
        assert not ignore
        assert ignore.truncation == 8
