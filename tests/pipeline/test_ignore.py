"""Tests for the ignore set and identifier truncation."""

from __future__ import annotations

import pytest

from namesweep.core.errors import ConfigError
from namesweep.pipeline.ignore import IgnoreSet, normalize_identifier, truncate_identifier

FULL = "abcd1234ef0011223344556677889900"
DASHED = "abcd1234-ef00-1122-3344-556677889900"


class TestNormalizeAndTruncate:
    def test_normalize_strips_dashes_and_case(self):
        assert normalize_identifier(" ABCD1234-EF00-1122-3344-556677889900\n") == FULL

    @pytest.mark.parametrize("n", [1, 4, 8, 16, 31, 32, 40])
    def test_truncate_length_and_prefix(self, n):
        out = truncate_identifier(FULL, n)
        assert len(out) == min(len(FULL), n)
        assert FULL.startswith(out)

    def test_truncate_none_keeps_full(self):
        assert truncate_identifier(DASHED, None) == FULL

    def test_dashes_do_not_count_as_digits(self):
        assert truncate_identifier(DASHED, 12) == "abcd1234ef00"


class TestIgnoreSetLoading:
    def test_from_lines_full_length(self):
        ignore = IgnoreSet.from_lines([DASHED, "", "  "])
        assert len(ignore) == 1
        assert ignore.contains(FULL)

    def test_from_lines_truncates_entries(self):
        ignore = IgnoreSet.from_lines([FULL], truncation=8)
        assert len(ignore) == 1
        assert ignore.contains("abcd1234-0000-0000-0000-000000000000")

    def test_short_entries_skipped(self):
        ignore = IgnoreSet.from_lines(["abcd", "abcd1234"], truncation=8)
        assert len(ignore) == 1
        assert ignore.skipped == 1

    def test_non_hex_entries_skipped(self):
        ignore = IgnoreSet.from_lines(["not-a-uuid", "abcd1234"], truncation=8)
        assert len(ignore) == 1
        assert ignore.skipped == 1

    def test_empty(self):
        ignore = IgnoreSet(truncation=8)
        assert not ignore
        assert not ignore.contains(FULL)


class TestIgnoreSetMatching:
    def test_truncated_entry_matches_full_identifier(self):
        ignore = IgnoreSet.from_lines(["abcd1234"], truncation=8)
        assert ignore.contains("abcd1234-ef00-1122-3344-556677889900", 8)

    def test_non_matching_prefix(self):
        ignore = IgnoreSet.from_lines(["abcd1234"], truncation=8)
        assert not ignore.contains("abcd1235-ef00-1122-3344-556677889900", 8)

    def test_symmetric_under_truncation(self):
        entries = [FULL, "0123456789abcdef0123456789abcdef"]
        queries = [DASHED, "0123456700000000000000000000000", "ffffffffffffffffffffffffffffffff"]
        for n in (4, 8, 12):
            ignore = IgnoreSet.from_lines(entries, truncation=n)
            for query in queries:
                expected = any(truncate_identifier(query, n) == truncate_identifier(e, n) for e in entries)
                assert ignore.contains(query, n) is expected

    def test_full_length_requires_exact_match(self):
        ignore = IgnoreSet.from_lines([FULL])
        assert ignore.contains(DASHED.upper())
        assert not ignore.contains("abcd1234" + "0" * 24)

    def test_mismatched_truncation_is_config_error(self):
        ignore = IgnoreSet.from_lines(["abcd1234"], truncation=8)
        with pytest.raises(ConfigError):
            ignore.contains(FULL, 4)

    def test_in_operator(self):
        ignore = IgnoreSet.from_lines(["abcd1234"], truncation=8)
        assert DASHED in ignore
        assert 42 not in ignore
