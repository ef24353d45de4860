"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the remap system.
These protocols enforce structural typing using Python's `typing.Protocol` so
that tests can swap in fakes without inheritance.

Key Components:
---------------
- TextureScanner: Interface for cataloging texture files under a root.
- FileGrouper: Interface for bucketing records by size.
- ContentComparator: Interface for the fingerprint + full-content equality test.
- DuplicateDetector: Interface for the engine that deletes duplicates and emits remap entries.
- RestoreResolver: Interface for replaying ledgers to rebuild deleted files.
"""

from typing import Protocol, List, Dict, Iterable

from texremap.core.models import (
    FileRecord,
    DetectionResult,
    RemapLedger,
    RestoreResult,
)


class TextureScanner(Protocol):
    """Interface for scanning a directory tree into a texture catalog."""
    def scan(self) -> Dict[str, FileRecord]:
        """
        Returns:
            Mapping of logical path → FileRecord for every eligible texture.
        """
        ...


class FileGrouper(Protocol):
    """Interface for grouping records before content comparison."""
    def group_by_size(self, files: Iterable[FileRecord]) -> Dict[int, List[FileRecord]]:
        """Group records by their size in bytes (groups of 2+ only)."""
        ...


class ContentComparator(Protocol):
    """Interface for deciding whether two records hold identical bytes."""
    def is_identical(self, anchor: FileRecord, candidate: FileRecord) -> bool:
        ...


class DuplicateDetector(Protocol):
    """Interface for the duplicate detection engine."""
    def detect(self, catalog: Dict[str, FileRecord]) -> DetectionResult:
        ...


class RestoreResolver(Protocol):
    """Interface for rebuilding deleted textures from remap ledgers."""
    def restore(self, ledgers: List[RemapLedger]) -> RestoreResult:
        ...
