"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for texture scanning, deduplication and restore.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Callable, Iterator

from texremap.exceptions import FileReadError
from texremap.utils.convert_utils import ConvertUtils


# =============================
# Configuration
# =============================

class DeduplicationConfig:
    FINGERPRINT_SIZE = 4096          # Cached prefix used as a pre-filter before full comparison
    HEADER_SKIP = 128                # DDS headers often match in the first 128 bytes, compare them last
    MIN_DEDUP_SIZE = 1024            # Smaller files are never deduplicated
    DEFAULT_EXTENSIONS = (".dds",)
    LEDGER_COMMENT = ";"
    LEDGER_SEPARATOR = "\t"
    LEDGER_NAME_PATTERN = "TextureFilenameMap{track_id}.ini"
    DEFAULT_LEDGER_NAME = "TextureFilenameMap.ini"
    ARCHIVE_PREFIX_PATTERN = "track-{track_id}_"
    ARCHIVE_NAME_PATTERN = "{track_name}_{sky}_textures.rbz"
    SKY_TYPES = ("M", "N", "E", "O")


# ======================
#  Core Data Models
# ======================

@dataclass
class FileRecord:
    """
    One physical texture file under a scan root.

    Size, fingerprint and full content are read lazily and cached. Once the
    record is marked processed both buffers are released and the record is
    never compared again.
    """
    path: str
    logical_path: str
    processed: bool = False
    _size: Optional[int] = field(default=None, init=False, repr=False)
    _fingerprint: Optional[bytes] = field(default=None, init=False, repr=False)
    _content: Optional[bytes] = field(default=None, init=False, repr=False)

    @property
    def size(self) -> int:
        if self._size is None:
            try:
                self._size = os.stat(self.path).st_size
            except OSError as e:
                raise FileReadError(f"Cannot stat {self.path}: {e}") from e
        return self._size

    @property
    def fingerprint(self) -> bytes:
        return self._fingerprint if self._fingerprint is not None else b""

    @property
    def content(self) -> bytes:
        return self._content if self._content is not None else b""

    def get_fingerprint_size(self) -> int:
        """Read (once) the first FINGERPRINT_SIZE bytes and return how many were read."""
        if self.processed:
            raise ValueError(f"Record already processed: {self.logical_path}")
        if self._fingerprint is None:
            self._fingerprint = self._read(DeduplicationConfig.FINGERPRINT_SIZE)
        return len(self._fingerprint)

    def load_content(self) -> bytes:
        """Read (once) the whole file content."""
        if self.processed:
            raise ValueError(f"Record already processed: {self.logical_path}")
        if self._content is None:
            self._content = self._read()
        return self._content

    def release_content(self) -> None:
        self._content = None

    def release_buffers(self) -> None:
        self._fingerprint = None
        self._content = None

    def mark_processed(self) -> None:
        if self.processed:
            raise ValueError(f"Record already processed: {self.logical_path}")
        self.processed = True
        self.release_buffers()

    def _read(self, limit: Optional[int] = None) -> bytes:
        try:
            with open(self.path, "rb") as f:
                return f.read() if limit is None else f.read(limit)
        except OSError as e:
            raise FileReadError(f"Cannot read {self.path}: {e}") from e

    def __repr__(self):
        return f"<FileRecord path={self.logical_path}, processed={self.processed}>"


@dataclass
class DuplicateGroup:
    """
    Files of identical content discovered while resolving one anchor.
    The anchor is always the first file and is the one that survives.
    """
    size: int
    files: List[FileRecord]

    @property
    def anchor(self) -> FileRecord:
        return self.files[0]

    @property
    def duplicates(self) -> List[FileRecord]:
        return self.files[1:]

    def add_file(self, file: FileRecord) -> None:
        if file.size != self.size:
            raise ValueError("Cannot add file with different size to a group.")
        self.files.append(file)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return len(self.files) >= 2

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, count={len(self.files)}>"


@dataclass(frozen=True)
class RemapEntry:
    """
    One ledger line: source_path was deleted and target_path must be used instead.
    """
    source_path: str
    target_path: str

    def __post_init__(self):
        if not self.source_path or not self.target_path:
            raise ValueError("Remap entry paths cannot be empty")
        if self.source_path.lower() == self.target_path.lower():
            raise ValueError(f"Remap entry maps a path onto itself: {self.source_path}")

    def __str__(self):
        return f"{self.source_path} -> {self.target_path}"


@dataclass
class RemapLedger:
    """
    Ordered remap entries of one logical group (e.g. one track's texture set).

    archive_prefix is the archive-name prefix expected on every target path
    (e.g. "track-972_"); targets stored without it are repaired on restore.
    """
    name: str
    entries: List[RemapEntry] = field(default_factory=list)
    archive_prefix: Optional[str] = None

    def sorted_entries(self) -> List[RemapEntry]:
        """Entries in persisted order (by lower-cased source path)."""
        return sorted(self.entries, key=lambda e: e.source_path.lower())

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[RemapEntry]:
        return iter(self.entries)

    def __repr__(self):
        return f"<RemapLedger name={self.name}, entries={len(self.entries)}>"


@dataclass
class DetectionStats:
    """
    Statistics collected during one duplicate detection run.
    """
    files_scanned: int = 0
    anchors: int = 0
    skipped_small: int = 0
    fingerprint_compares: int = 0
    full_compares: int = 0
    duplicates: int = 0
    bytes_saved: int = 0
    total_time: float = 0.0

    def print_summary(self) -> str:
        lines = [
            "📊 Deduplication Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            f"📁 Textures scanned: {self.files_scanned}",
            f"🔍 Anchors examined: {self.anchors} ({self.skipped_small} below size threshold)",
            f"📄 Fingerprint comparisons: {self.fingerprint_compares}",
            f"🧠 Full content comparisons: {self.full_compares}",
            f"🗑️ Duplicates removed: {self.duplicates}",
            f"💾 Space saved: {ConvertUtils.bytes_to_human(self.bytes_saved)}",
        ]
        return "\n".join(lines)


@dataclass
class DetectionResult:
    count: int
    entries: List[RemapEntry]
    stats: DetectionStats = field(default_factory=DetectionStats)


@dataclass
class RestoreResult:
    restored: List[RemapEntry] = field(default_factory=list)
    skipped: int = 0
    unresolved: List[RemapEntry] = field(default_factory=list)
    passes: int = 0

    @property
    def is_complete(self) -> bool:
        return not self.unresolved


@dataclass
class DeduplicationParams:
    """
    Parameters for a deduplication run, validated on creation.
    Interface-agnostic: used by the CLI and the track workflows.
    """
    root_dir: str
    min_size_bytes: int = DeduplicationConfig.MIN_DEDUP_SIZE
    extensions: List[str] = field(default_factory=lambda: list(DeduplicationConfig.DEFAULT_EXTENSIONS))
    archive_prefix: Optional[str] = None
    use_trash: bool = False
    progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        # Normalize extensions: ensure they start with dot and are lowercase
        normalized = []
        for ext in self.extensions:
            ext = ext.strip().lower()
            if ext and not ext.startswith('.'):
                ext = f".{ext}"
            if ext:
                normalized.append(ext)
        if not normalized:
            raise ValueError("At least one texture extension is required")
        self.extensions = normalized

        if self.archive_prefix is not None and not self.archive_prefix.strip():
            self.archive_prefix = None

    @staticmethod
    def from_human_readable(
            root_dir: str,
            min_size_str: str = "1K",
            extensions_str: str = "",
            archive_prefix: Optional[str] = None,
            use_trash: bool = False,
    ) -> 'DeduplicationParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing.
        """
        min_size = ConvertUtils.human_to_bytes(min_size_str)

        ext_list = [
            ext.strip() for ext in extensions_str.split(",") if ext.strip()
        ] if extensions_str else list(DeduplicationConfig.DEFAULT_EXTENSIONS)

        return DeduplicationParams(
            root_dir=root_dir,
            min_size_bytes=min_size,
            extensions=ext_list,
            archive_prefix=archive_prefix,
            use_trash=use_trash,
        )
