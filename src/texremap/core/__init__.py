"""
Core remap engine — catalog, comparison, duplicate detection, ledgers and restore.

This package contains the data-safety critical part of texremap:
- TextureScannerImpl: recursive texture catalog with lazily read sizes and fingerprints
- FileGrouperImpl: same-size bucketing
- ContentComparatorImpl: fingerprint + full-content byte comparison (no hashing)
- DuplicateDetectorImpl: deletes duplicates and emits remap entries
- RemapLedgerBuilder / read_ledger / write_ledger: ledger building and text format
- RestoreResolverImpl: multi-pass ledger replay that rebuilds removed textures

All components are synchronous pure Python — no archive or CLI dependencies.
"""

from .scanner import TextureScannerImpl
from .grouper import FileGrouperImpl
from .comparator import ContentComparatorImpl
from .detector import DuplicateDetectorImpl
from .restorer import RestoreResolverImpl, TreeIndex
from .ledger import RemapLedgerBuilder, read_ledger, write_ledger, parse_ledger_lines, format_ledger
from .models import (
    FileRecord, DuplicateGroup, RemapEntry, RemapLedger, DetectionStats,
    DetectionResult, RestoreResult, DeduplicationConfig, DeduplicationParams)

__all__ = [
    "TextureScannerImpl",
    "FileGrouperImpl",
    "ContentComparatorImpl",
    "DuplicateDetectorImpl",
    "RestoreResolverImpl",
    "TreeIndex",
    "RemapLedgerBuilder",
    "read_ledger",
    "write_ledger",
    "parse_ledger_lines",
    "format_ledger",
    "FileRecord",
    "DuplicateGroup",
    "RemapEntry",
    "RemapLedger",
    "DetectionStats",
    "DetectionResult",
    "RestoreResult",
    "DeduplicationConfig",
    "DeduplicationParams",
]
