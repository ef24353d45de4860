"""
Unit tests for logical path normalization and the archive-prefix rules.
"""
import pytest

from texremap.core.paths import (
    normalize_logical_path, ledger_key, split_archive_segment, strip_shared_prefix, repair_target)


class TestNormalizeLogicalPath:

    @pytest.mark.parametrize("raw, expected", [
        ("Tex\\A.dds", "Tex/A.dds"),
        ("./tex//a.dds", "tex/a.dds"),
        ("/tex/a.dds", "tex/a.dds"),
        ("a.dds", "a.dds"),
        ("", ""),
    ])
    def test_normalization(self, raw, expected):
        assert normalize_logical_path(raw) == expected

    def test_ledger_key_is_case_insensitive(self):
        assert ledger_key("Track-1_M\\Tex.DDS") == "track-1_m/tex.dds"


class TestArchiveSegment:

    def test_split(self):
        assert split_archive_segment("track-1_M/sub/a.dds") == ("track-1_M", "sub/a.dds")
        assert split_archive_segment("a.dds") == ("", "a.dds")

    def test_strip_shared_prefix(self):
        assert strip_shared_prefix("track-1_m/b.dds", "track-1_m/x/a.dds") == "x/a.dds"
        # case-insensitive textual match
        assert strip_shared_prefix("track-1_m/b.dds", "TRACK-1_M/a.dds") == "a.dds"

    def test_other_archive_keeps_full_target(self):
        assert strip_shared_prefix("track-1_n/b.dds", "track-1_m/a.dds") == "track-1_m/a.dds"

    def test_root_level_files_are_never_stripped(self):
        assert strip_shared_prefix("b.dds", "a.dds") == "a.dds"


class TestRepairTarget:

    def test_borrows_prefix_from_source(self):
        assert repair_target("track-1_m/b.dds", "x/a.dds", "track-1_") == "track-1_m/x/a.dds"

    def test_backslash_source(self):
        assert repair_target("track-1_m\\b.dds", "a.dds", "track-1_") == "track-1_m\\a.dds"

    def test_target_with_prefix_is_unchanged(self):
        assert repair_target("track-1_n/b.dds", "Track-1_M/a.dds", "track-1_") == "Track-1_M/a.dds"

    def test_source_without_separator_borrows_nothing(self):
        assert repair_target("b.dds", "a.dds", "track-1_") == "a.dds"

    def test_no_prefix_means_no_repair(self):
        assert repair_target("tex/b.dds", "a.dds", None) == "a.dds"

    def test_repair_inverts_strip(self):
        source, target = "track-9_e/tex/b.dds", "track-9_e/tex/a.dds"
        stored = strip_shared_prefix(source, target)
        assert repair_target(source, stored, "track-9_") == target
