"""Tests for the rule registry scanner."""
from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from gitgate_access.errors import RegistryFormatError, RegistryUnavailableError
from gitgate_access.provenance.registry import (
    RuleLocation,
    RuleRegistryScanner,
    parse_record,
    scan_lines,
)


class CountingLines:
    """Iterable over registry lines that records how many were consumed."""

    def __init__(self, lines: list[str]) -> None:
        self._lines = lines
        self.consumed = 0

    def __iter__(self) -> Iterator[str]:
        for line in self._lines:
            self.consumed += 1
            yield line


def _registry(count: int) -> list[str]:
    return [f"{i} gitolite.conf {i + 10}\n" for i in range(1, count + 1)]


# ---------------------------------------------------------------------------
# parse_record
# ---------------------------------------------------------------------------


class TestParseRecord:
    def test_parses_three_fields(self) -> None:
        assert parse_record("12 gitolite.conf 40\n", 1) == RuleLocation(12, "gitolite.conf", 40)

    def test_extra_whitespace_tolerated(self) -> None:
        assert parse_record("  12\tgitolite.conf   40 ", 1) == RuleLocation(12, "gitolite.conf", 40)

    def test_blank_line_returns_none(self) -> None:
        assert parse_record("   \n", 1) is None

    def test_wrong_field_count_raises(self) -> None:
        with pytest.raises(RegistryFormatError, match="line 7"):
            parse_record("12 gitolite.conf", 7)

    def test_non_numeric_id_raises(self) -> None:
        with pytest.raises(RegistryFormatError):
            parse_record("twelve gitolite.conf 40", 1)

    def test_label(self) -> None:
        assert RuleLocation(1, "x.conf", 3).label == "x.conf:3"


# ---------------------------------------------------------------------------
# scan_lines
# ---------------------------------------------------------------------------


class TestScanLines:
    def test_finds_requested_ids(self) -> None:
        found = scan_lines({2, 4}, _registry(5))
        assert set(found) == {2, 4}
        assert found[4] == RuleLocation(4, "gitolite.conf", 14)

    def test_stops_after_last_requested_id(self) -> None:
        lines = CountingLines(_registry(1000))
        scan_lines({3, 7}, lines)
        assert lines.consumed == 7

    def test_reads_to_end_when_ids_missing(self) -> None:
        lines = CountingLines(_registry(50))
        found = scan_lines({3, 9999}, lines)
        assert lines.consumed == 50
        assert set(found) == {3}

    def test_all_missing_returns_empty(self) -> None:
        assert scan_lines({42}, _registry(5)) == {}

    def test_empty_request_reads_nothing(self) -> None:
        lines = CountingLines(_registry(10))
        assert scan_lines(set(), lines) == {}
        assert lines.consumed == 0

    def test_first_record_wins(self) -> None:
        lines = ["5 old.conf 1\n", "5 new.conf 2\n"]
        assert scan_lines({5}, lines)[5].file == "old.conf"

    def test_malformed_line_after_stop_point_not_read(self) -> None:
        lines = ["1 a.conf 1\n", "garbage\n"]
        assert set(scan_lines({1}, lines)) == {1}

    def test_malformed_line_before_stop_point_raises(self) -> None:
        lines = ["garbage\n", "1 a.conf 1\n"]
        with pytest.raises(RegistryFormatError):
            scan_lines({1}, lines)

    def test_blank_lines_skipped(self) -> None:
        lines = ["\n", "1 a.conf 1\n", "\n", "2 a.conf 2\n"]
        assert set(scan_lines({1, 2}, lines)) == {1, 2}


# ---------------------------------------------------------------------------
# RuleRegistryScanner
# ---------------------------------------------------------------------------


class TestRuleRegistryScanner:
    def test_scan_file(self, admin_base: Path) -> None:
        scanner = RuleRegistryScanner(admin_base / "conf" / "rule_info")
        found = scanner.scan([2, 3])
        assert found[2] == RuleLocation(2, "gitolite.conf", 4)
        assert found[3] == RuleLocation(3, "gitolite.conf", 5)

    def test_missing_registry_raises(self, tmp_path: Path) -> None:
        scanner = RuleRegistryScanner(tmp_path / "rule_info")
        with pytest.raises(RegistryUnavailableError, match="rule_info"):
            scanner.scan([1])

    def test_empty_request_does_not_open_registry(self, tmp_path: Path) -> None:
        scanner = RuleRegistryScanner(tmp_path / "absent")
        assert scanner.scan([]) == {}

    def test_duplicate_request_ids_collapse(self, admin_base: Path) -> None:
        scanner = RuleRegistryScanner(admin_base / "conf" / "rule_info")
        assert set(scanner.scan([4, 4, 4])) == {4}

    def test_registry_path_property(self, tmp_path: Path) -> None:
        assert RuleRegistryScanner(tmp_path / "r").registry_path == tmp_path / "r"
