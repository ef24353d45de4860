"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

exceptions.py
Exception hierarchy for texremap.

Every error that means "the tool can no longer guarantee data safety" derives
from TexRemapError, so callers (CLI, scripts) can stop on a single base class.
"""


class TexRemapError(Exception):
    """Base exception for all texremap errors."""
    pass


class CatalogError(TexRemapError):
    """Raised when the texture catalog cannot be built consistently."""
    pass


class FileReadError(TexRemapError):
    """Raised when a texture cannot be read during comparison."""
    pass


class FileDeletionError(TexRemapError):
    """Raised when a confirmed duplicate could not be removed from disk."""
    pass


class FileOperationError(TexRemapError):
    """Raised when a copy/move operation fails."""
    pass


class LedgerError(TexRemapError):
    """Raised when a remap ledger is inconsistent or cannot be written."""
    pass


class LedgerKeyCollisionError(LedgerError):
    """Raised when the same source path is remapped twice."""
    pass


class ArchiveError(TexRemapError):
    """Raised when a texture archive cannot be extracted or repacked."""
    pass


class TrackNotFoundError(TexRemapError):
    """Raised when a track id has no entry in Tracks.ini."""
    pass
