"""File, archive and track lookup services."""

from .file_service import FileService
from .archive_service import ArchiveService
from .track_service import TrackLocator, TrackInfo

__all__ = ["FileService", "ArchiveService", "TrackLocator", "TrackInfo"]
