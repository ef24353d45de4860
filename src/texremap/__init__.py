"""
texremap — remaps identical DDS textures of track archives onto one shared copy.

Core features:
- Byte-exact duplicate detection (size → 4KB fingerprint → full content, no hashing)
- Remap ledger (TextureFilenameMap<id>.ini) recording removed → surviving texture
- Restore of the original texture set from ledgers, including remap chains
- Track workflows that extract and repack .rbz archives listed in Tracks.ini
- CLI interface for headless/scripted usage
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("texremap")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from texremap.commands import (
    DeduplicationCommand, RestoreCommand, TrackDeduplicationCommand, TrackRestoreCommand,
    TrackParams, detect_duplicates, restore_from_ledgers)
from texremap.core import (
    DeduplicationParams, FileRecord, RemapEntry, RemapLedger, DetectionResult, RestoreResult,
    read_ledger, write_ledger)
from texremap.utils.convert_utils import ConvertUtils
from texremap.services import FileService

__all__ = [
    "DeduplicationCommand",
    "RestoreCommand",
    "TrackDeduplicationCommand",
    "TrackRestoreCommand",
    "TrackParams",
    "detect_duplicates",
    "restore_from_ledgers",
    "DeduplicationParams",
    "FileRecord",
    "RemapEntry",
    "RemapLedger",
    "DetectionResult",
    "RestoreResult",
    "read_ledger",
    "write_ledger",
    "ConvertUtils",
    "FileService",
    "__version__",
]
