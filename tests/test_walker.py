"""
Tests for attestor/cgroups/walker.py - Cgroup Entry Parsing and Resolution
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from attestor.cgroups.finder import new_container_id_finder
from attestor.cgroups.walker import (
    CgroupEntry,
    CgroupParseError,
    Resolution,
    resolve,
)


# ===========================================================================
# Entry Parsing
# ===========================================================================

class TestCgroupEntry:
    """Tests for /proc/<pid>/cgroup line parsing."""

    def test_parse_v1_line(self):
        entry = CgroupEntry.parse("10:perf_event:/docker/abc")
        assert entry.hierarchy_id == "10"
        assert entry.controllers == ("perf_event",)
        assert entry.group_path == "/docker/abc"

    def test_parse_multiple_controllers(self):
        entry = CgroupEntry.parse("4:cpu,cpuacct:/docker/abc\n")
        assert entry.controllers == ("cpu", "cpuacct")
        assert entry.group_path == "/docker/abc"

    def test_parse_v2_line(self):
        entry = CgroupEntry.parse("0::/system.slice/docker-abc.scope")
        assert entry.hierarchy_id == "0"
        assert entry.controllers == ()
        assert entry.group_path == "/system.slice/docker-abc.scope"

    def test_path_may_contain_colons(self):
        entry = CgroupEntry.parse("1:name=systemd:/a:b/c")
        assert entry.controllers == ("name=systemd",)
        assert entry.group_path == "/a:b/c"

    def test_malformed_line(self):
        with pytest.raises(CgroupParseError):
            CgroupEntry.parse("garbage")

    def test_parse_all_keeps_order_and_skips_blank_lines(self):
        entries = CgroupEntry.parse_all("2:cpu:/a\n\n1:memory:/b\n")
        assert [e.group_path for e in entries] == ["/a", "/b"]


# ===========================================================================
# Resolution
# ===========================================================================

class TestResolve:
    """Tests for walking entries with a finder."""

    @pytest.fixture
    def finder(self):
        return new_container_id_finder(["/docker/<id>"])

    def test_empty_entry_list(self, finder):
        result = resolve([], finder)
        assert result == Resolution()
        container_id, found = result
        assert container_id == ""
        assert found is False

    def test_no_entry_matches(self, finder):
        entries = CgroupEntry.parse_all("11:hugetlb:/\n1:name=systemd:/user.slice\n")
        container_id, found = resolve(entries, finder)
        assert found is False
        assert container_id == ""

    def test_first_matching_entry_wins(self, finder):
        entries = CgroupEntry.parse_all(
            "11:hugetlb:/\n10:perf_event:/docker/first\n9:freezer:/docker/second\n"
        )
        result = resolve(entries, finder)
        assert result.found is True
        assert result.container_id == "first"
        assert result.cgroup_path == "/docker/first"

    def test_matched_with_empty_id(self, finder):
        container_id, found = resolve(["/docker/"], finder)
        assert found is True
        assert container_id == ""

    def test_accepts_plain_path_strings(self, finder):
        assert resolve(["/", "/docker/abc"], finder).container_id == "abc"

    def test_short_circuits(self, finder):
        seen = []

        def entries():
            for path in ["/docker/abc", "/docker/def"]:
                seen.append(path)
                yield path

        assert resolve(entries(), finder).container_id == "abc"
        assert seen == ["/docker/abc"]
