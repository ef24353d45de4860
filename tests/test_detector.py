"""
Tests for DuplicateDetectorImpl — critical for data safety.
Verifies which copy survives, which are removed, and that every removal is remapped.
"""
import os
from unittest import mock

import pytest

from texremap.core.detector import DuplicateDetectorImpl
from texremap.core.scanner import TextureScannerImpl
from texremap.core.models import FileRecord, RemapEntry
from texremap.exceptions import FileDeletionError, FileReadError, LedgerError, LedgerKeyCollisionError
from texremap.services.file_service import FileService


def _detect(root, **kwargs):
    catalog = TextureScannerImpl(str(root)).scan()
    return DuplicateDetectorImpl(**kwargs).detect(catalog)


class TestDuplicateRemoval:

    def test_first_path_in_sorted_order_survives(self, texture_tree, temp_dir):
        """
        CRITICAL: tex/a.dds sorts before tex/b.dds, so a survives and b is removed.
        tex/c.dds differs only in its last byte and must stay untouched.
        """
        result = _detect(temp_dir)

        assert result.count == 1
        assert result.entries == [RemapEntry("tex/b.dds", "tex/a.dds")]
        assert texture_tree["a"].exists()
        assert not texture_tree["b"].exists()
        assert texture_tree["c"].read_bytes() == b"Z" * 99999 + b"Y"

    def test_small_files_are_never_removed(self, texture_tree, temp_dir):
        result = _detect(temp_dir)

        assert texture_tree["s1"].exists()
        assert texture_tree["s2"].exists()
        assert all("small/" not in e.source_path for e in result.entries)
        assert result.stats.skipped_small == 2

    def test_min_size_zero_includes_small_files(self, texture_tree, temp_dir):
        result = _detect(temp_dir, min_size=0)

        assert RemapEntry("small/s2.dds", "small/s1.dds") in result.entries
        assert result.count == 2

    def test_same_size_different_content(self, make_texture, temp_dir):
        make_texture("a.dds", b"A" * 5000)
        make_texture("b.dds", b"B" * 5000)

        result = _detect(temp_dir)

        assert result.count == 0
        assert result.entries == []
        assert (temp_dir / "a.dds").exists() and (temp_dir / "b.dds").exists()

    def test_all_copies_point_to_one_survivor(self, make_texture, temp_dir):
        """Three identical textures give two entries, both targeting the first one."""
        for name in ("x/3.dds", "x/1.dds", "x/2.dds"):
            make_texture(name, b"D" * 3000)

        result = _detect(temp_dir)

        assert result.entries == [
            RemapEntry("x/2.dds", "x/1.dds"),
            RemapEntry("x/3.dds", "x/1.dds"),
        ]
        assert sorted(p.name for p in (temp_dir / "x").iterdir()) == ["1.dds"]
        assert result.stats.bytes_saved == 6000

    def test_two_independent_duplicate_sets(self, make_texture, temp_dir):
        make_texture("a1.dds", b"A" * 2000)
        make_texture("a2.dds", b"A" * 2000)
        make_texture("b1.dds", b"B" * 2000)
        make_texture("b2.dds", b"B" * 2000)

        result = _detect(temp_dir)

        assert result.entries == [RemapEntry("a2.dds", "a1.dds"), RemapEntry("b2.dds", "b1.dds")]

    def test_groups_are_kept_for_reporting(self, texture_tree, temp_dir):
        detector = DuplicateDetectorImpl()
        detector.detect(TextureScannerImpl(str(temp_dir)).scan())

        assert len(detector.groups) == 1
        group = detector.groups[0]
        assert group.anchor.logical_path == "tex/a.dds"
        assert [f.logical_path for f in group.duplicates] == ["tex/b.dds"]

    def test_all_records_end_processed(self, texture_tree, temp_dir):
        catalog = TextureScannerImpl(str(temp_dir)).scan()
        DuplicateDetectorImpl().detect(catalog)

        assert all(record.processed for record in catalog.values())
        assert all(record.content == b"" for record in catalog.values())

    def test_empty_catalog(self):
        result = DuplicateDetectorImpl().detect({})

        assert result.count == 0
        assert result.entries == []


class TestArchiveMode:

    def test_same_archive_target_is_stored_without_folder(self, make_texture, temp_dir):
        make_texture("track-1_M_textures/a.dds", b"T" * 2048)
        make_texture("track-1_M_textures/b.dds", b"T" * 2048)
        make_texture("track-1_N_textures/a.dds", b"T" * 2048)

        result = _detect(temp_dir, strip_shared_prefix=True)

        assert result.entries == [
            RemapEntry("track-1_M_textures/b.dds", "a.dds"),
            RemapEntry("track-1_N_textures/a.dds", "track-1_M_textures/a.dds"),
        ]

    def test_plain_mode_keeps_full_targets(self, make_texture, temp_dir):
        make_texture("tex/a.dds", b"T" * 2048)
        make_texture("tex/b.dds", b"T" * 2048)

        result = _detect(temp_dir, strip_shared_prefix=False)

        assert result.entries == [RemapEntry("tex/b.dds", "tex/a.dds")]


class TestFatalErrors:

    def test_case_only_source_collision_keeps_file(self, make_texture):
        """
        CRITICAL: when a removal cannot be recorded (source already remapped under
        another case), the run stops before that texture is deleted.
        """
        content = b"K" * 2048
        catalog = {
            "A.dds": FileRecord(path=str(make_texture("a.dds", content)), logical_path="A.dds"),
            "T/x.dds": FileRecord(path=str(make_texture("one.dds", content)), logical_path="T/x.dds"),
            "t/x.dds": FileRecord(path=str(make_texture("two.dds", content)), logical_path="t/x.dds"),
        }

        with pytest.raises(LedgerKeyCollisionError):
            DuplicateDetectorImpl().detect(catalog)

        assert os.path.exists(catalog["t/x.dds"].path)

    def test_case_only_self_mapping_keeps_file(self, make_texture):
        """A survivor and duplicate differing only in case is a ledger error raised before deletion."""
        content = b"K" * 2048
        catalog = {
            "TEX/a.dds": FileRecord(path=str(make_texture("one.dds", content)), logical_path="TEX/a.dds"),
            "tex/a.dds": FileRecord(path=str(make_texture("two.dds", content)), logical_path="tex/a.dds"),
        }

        with pytest.raises(LedgerError):
            DuplicateDetectorImpl().detect(catalog)

        assert os.path.exists(catalog["TEX/a.dds"].path)
        assert os.path.exists(catalog["tex/a.dds"].path)

    def test_deletion_failure_aborts_without_entry(self, texture_tree, temp_dir):
        """CRITICAL: a texture that could not be removed must never be remapped."""
        detector = DuplicateDetectorImpl()
        catalog = TextureScannerImpl(str(temp_dir)).scan()

        with mock.patch.object(FileService, "delete_file", side_effect=FileDeletionError("locked")):
            with pytest.raises(FileDeletionError):
                detector.detect(catalog)

        assert detector.stats.duplicates == 0
        assert texture_tree["b"].exists()

    def test_unreadable_texture_aborts(self, make_texture, temp_dir):
        make_texture("a.dds", b"A" * 2000)
        make_texture("b.dds", b"A" * 2000)
        catalog = TextureScannerImpl(str(temp_dir)).scan()

        with mock.patch("texremap.core.models.FileRecord._read", side_effect=FileReadError("io error")):
            with pytest.raises(FileReadError):
                DuplicateDetectorImpl().detect(catalog)

        assert (temp_dir / "a.dds").exists()
        assert (temp_dir / "b.dds").exists()

    def test_trash_mode(self, texture_tree, temp_dir):
        with mock.patch("texremap.services.file_service.send2trash",
                        side_effect=lambda p: texture_tree["b"].unlink()) as mock_trash:
            result = _detect(temp_dir, use_trash=True)

        mock_trash.assert_called_once_with(str(texture_tree["b"]))
        assert result.count == 1


class TestProgress:

    def test_progress_reports_comparing_stage(self, texture_tree, temp_dir):
        calls = []
        _detect(temp_dir, progress_callback=lambda *args: calls.append(args))

        assert calls
        assert {stage for stage, _, _ in calls} == {"Comparing"}
        assert all(total == 5 for _, _, total in calls)
