"""
Shared fixtures for texremap tests.
Creates isolated temporary directories with controlled texture files.
"""
import pytest
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Dict


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_texture(temp_dir) -> Callable[[str, bytes], Path]:
    """Returns a helper writing bytes to a path relative to temp_dir (parents created)."""
    def _make(relative_path: str, content: bytes) -> Path:
        path = temp_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _make


@pytest.fixture
def texture_tree(make_texture) -> Dict[str, Path]:
    """
    Textures for deduplication scenarios:
    - tex/a.dds and tex/b.dds: identical (100000 bytes of 'Z')
    - tex/c.dds: same size, last byte differs
    - small/s1.dds and small/s2.dds: identical but below the 1KB threshold
    - notes.txt: same content as a.dds but not a texture
    """
    files = {}
    files["a"] = make_texture("tex/a.dds", b"Z" * 100000)
    files["b"] = make_texture("tex/b.dds", b"Z" * 100000)
    files["c"] = make_texture("tex/c.dds", b"Z" * 99999 + b"Y")
    files["s1"] = make_texture("small/s1.dds", b"S" * 512)
    files["s2"] = make_texture("small/s2.dds", b"S" * 512)
    files["txt"] = make_texture("notes.txt", b"Z" * 100000)
    return files


@pytest.fixture
def snapshot() -> Callable[[Path], Dict[str, bytes]]:
    """Returns a helper mapping every file under a root to its bytes (relative posix keys)."""
    def _snapshot(root: Path) -> Dict[str, bytes]:
        return {
            p.relative_to(root).as_posix(): p.read_bytes()
            for p in sorted(root.rglob("*")) if p.is_file()
        }
    return _snapshot


@pytest.fixture
def rbr_folder(temp_dir) -> Path:
    """
    Minimal game folder with one track (972) and two texture archives:
    - Maps/Track-972_M_textures.rbz: a.dds, b.dds (identical), c.dds (unique)
    - Maps/Track-972_N_textures.rbz: a.dds (identical to the M copy)
    """
    root = temp_dir / "rbr"
    maps = root / "Maps"
    maps.mkdir(parents=True)
    (maps / "Tracks.ini").write_text(
        "; track list\n"
        "[Map972]\n"
        'TrackName="Maps\\Track-972" ; main track\n'
        "[Map973]\n"
        "TrackName=Maps\\Track-973\n",
        encoding="utf-8",
    )

    shared = bytes(range(256)) * 8
    with zipfile.ZipFile(maps / "Track-972_M_textures.rbz", "w") as archive:
        archive.writestr("track-972_M_textures/a.dds", shared)
        archive.writestr("track-972_M_textures/b.dds", shared)
        archive.writestr("track-972_M_textures/c.dds", b"C" * 2048)
    with zipfile.ZipFile(maps / "Track-972_N_textures.rbz", "w") as archive:
        archive.writestr("track-972_N_textures/a.dds", shared)

    return root
