"""
CLI tests — argument validation, exit codes, and end-to-end runs in both modes.
"""
import sys
from unittest import mock

import pytest

from texremap.cli import CLIApplication, main


def _run(argv):
    with mock.patch.object(sys, 'argv', ['texremap'] + argv):
        CLIApplication().run()


class TestArgumentValidation:
    """Invalid combinations must exit with code 1 before touching any file."""

    @pytest.mark.parametrize("argv", [
        [],
        ["--input", "x", "--rbr-folder", "y"],
        ["--input", "{root}", "--min-size", "huge"],
        ["--input", "{root}/missing"],
        ["--input", "{root}", "--restore"],
        ["--input", "{root}", "--restore", "--ledger", "{root}/missing.ini"],
        ["--input", "{root}", "--restore", "--delete-duplicates", "--ledger", "x.ini"],
        ["--input", "{root}", "--ledger", "a.ini", "b.ini"],
        ["--rbr-folder", "{root}", "--backup-folder", "{root}/backup"],
        ["--rbr-folder", "{root}", "--track", "1"],
        ["--rbr-folder", "{root}/missing", "--track", "1", "--backup-folder", "{root}"],
    ])
    def test_invalid_arguments_exit_1(self, temp_dir, argv):
        argv = [arg.format(root=temp_dir) for arg in argv]

        with pytest.raises(SystemExit) as exc_info:
            _run(argv)

        assert exc_info.value.code == 1

    def test_input_file_is_not_a_directory(self, make_texture):
        path = make_texture("a.dds", b"x")

        with pytest.raises(SystemExit) as exc_info:
            _run(["--input", str(path)])

        assert exc_info.value.code == 1


class TestPlainMode:

    def test_deduplicate_writes_default_ledger(self, texture_tree, temp_dir):
        _run(["--input", str(temp_dir), "--quiet"])

        ledger = temp_dir / "TextureFilenameMap.ini"
        assert ledger.is_file()
        assert "tex/b.dds\ttex/a.dds" in ledger.read_text(encoding="utf-8").splitlines()
        assert not texture_tree["b"].exists()
        assert texture_tree["a"].exists()

    def test_existing_ledger_needs_force_update(self, texture_tree, temp_dir):
        _run(["--input", str(temp_dir), "--quiet"])

        with pytest.raises(SystemExit) as exc_info:
            _run(["--input", str(temp_dir), "--quiet"])
        assert exc_info.value.code == 1

        _run(["--input", str(temp_dir), "--quiet", "--force-update"])
        # earlier entries survive the merge
        assert "tex/b.dds\ttex/a.dds" in (temp_dir / "TextureFilenameMap.ini").read_text(encoding="utf-8")

    def test_restore(self, texture_tree, temp_dir, tmp_path):
        ledger = tmp_path / "map.ini"
        _run(["--input", str(temp_dir), "--ledger", str(ledger), "--quiet"])
        assert not texture_tree["b"].exists()

        _run(["--input", str(temp_dir), "--ledger", str(ledger), "--restore", "--quiet"])

        assert texture_tree["b"].read_bytes() == texture_tree["a"].read_bytes()

    def test_min_size_option(self, texture_tree, temp_dir):
        _run(["--input", str(temp_dir), "--min-size", "0", "--quiet"])

        assert not texture_tree["s2"].exists()

    def test_extensions_option(self, make_texture, temp_dir):
        """Extensions without a leading dot are accepted."""
        make_texture("a.tga", b"T" * 2048)
        make_texture("b.tga", b"T" * 2048)
        make_texture("c.dds", b"T" * 2048)

        _run(["--input", str(temp_dir), "--extensions", "tga", "--quiet"])

        assert not (temp_dir / "b.tga").exists()
        assert (temp_dir / "c.dds").exists()

    def test_case_only_collision_is_reported_and_keeps_files(self, make_texture, temp_dir, capsys):
        make_texture("TEX/a.dds", b"1" * 2048)
        make_texture("tex/a.dds", b"1" * 2048)
        if len(list(temp_dir.rglob("*.dds"))) < 2:
            pytest.skip("Case-insensitive filesystem")

        with pytest.raises(SystemExit) as exc_info:
            _run(["--input", str(temp_dir), "--quiet"])

        assert exc_info.value.code == 1
        assert "Logical path collision" in capsys.readouterr().err
        assert (temp_dir / "TEX" / "a.dds").exists()
        assert (temp_dir / "tex" / "a.dds").exists()

    def test_verbose_prints_summary(self, texture_tree, temp_dir, capsys):
        _run(["--input", str(temp_dir), "--verbose"])

        out = capsys.readouterr().out
        assert "Deduplication Statistics" in out
        assert "tex/b.dds" in out


class TestTrackMode:

    def test_simulation(self, rbr_folder, temp_dir):
        backup = temp_dir / "backup"

        _run(["--rbr-folder", str(rbr_folder), "--track", "972", "--backup-folder", str(backup), "--quiet"])

        ledgers = list(backup.glob("*_972/TextureFilenameMap972.ini"))
        assert len(ledgers) == 1
        assert not (rbr_folder / "Maps" / "TextureFilenameMap972.ini").exists()

    def test_unknown_track_is_an_error(self, rbr_folder, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            _run(["--rbr-folder", str(rbr_folder), "--track", "5", "--backup-folder", str(temp_dir / "b")])

        assert exc_info.value.code == 1


class TestMain:

    def test_keyboard_interrupt_exits_130(self):
        with mock.patch.object(CLIApplication, "run", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 130

    def test_unexpected_error_exits_1(self, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        with mock.patch.object(CLIApplication, "run", side_effect=RuntimeError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
