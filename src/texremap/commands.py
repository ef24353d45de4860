"""
Unified command orchestrators for deduplication and restore.
This is the SINGLE source of truth for business logic — the CLI only parses
arguments and prints reports.

Directory commands work on a plain tree of textures:
    result = detect_duplicates("extracted/")              # removes duplicates
    write_ledger(RemapLedger("textures", result.entries), "remap.ini")
    restore_from_ledgers("extracted/", [read_ledger("remap.ini")])

Track commands wrap the same engine with archive extraction and repacking for
tracks listed in the game's Tracks.ini.
"""
import time
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Callable, Union

from texremap.core.detector import DuplicateDetectorImpl
from texremap.core.ledger import read_ledger, write_ledger
from texremap.core.models import (
    DeduplicationParams, DeduplicationConfig, DetectionResult, FileRecord,
    RemapEntry, RemapLedger, RestoreResult)
from texremap.core.paths import ledger_key
from texremap.core.restorer import RestoreResolverImpl
from texremap.core.scanner import TextureScannerImpl
from texremap.services.archive_service import ArchiveService
from texremap.services.file_service import FileService
from texremap.services.track_service import TrackLocator, TrackInfo
from texremap.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
ProgressCallback = Callable[[str, int, Optional[int]], None]


class DeduplicationCommand:
    """
    Orchestrates one deduplication run:
    1. Catalog textures under params.root_dir
    2. Detect, delete and remap duplicates
    """

    def __init__(self):
        self._catalog: Dict[str, FileRecord] = {}

    def execute(self, params: DeduplicationParams) -> DetectionResult:
        """
        Raises:
            CatalogError: root missing or inconsistent catalog
            FileReadError / FileDeletionError / LedgerKeyCollisionError: run aborted
        """
        scanner = TextureScannerImpl(root_dir=params.root_dir, extensions=params.extensions)
        self._catalog = scanner.scan(progress_callback=params.progress_callback)

        detector = DuplicateDetectorImpl(
            min_size=params.min_size_bytes,
            strip_shared_prefix=params.archive_prefix is not None,
            use_trash=params.use_trash,
            progress_callback=params.progress_callback,
        )
        result = detector.detect(self._catalog)
        logger.debug(f"{result.count} duplicates removed under {params.root_dir}")
        return result

    def get_records(self) -> List[FileRecord]:
        """Get cataloged records after execution."""
        return list(self._catalog.values())


class RestoreCommand:

    def execute(
            self,
            root_dir: PathLike,
            ledgers: List[RemapLedger],
            progress_callback: Optional[ProgressCallback] = None
    ) -> RestoreResult:
        resolver = RestoreResolverImpl(str(root_dir), progress_callback=progress_callback)
        return resolver.restore(ledgers)


def detect_duplicates(root: PathLike, params: Optional[DeduplicationParams] = None) -> DetectionResult:
    """Remove duplicate textures under root; returns the count and the remap entries."""
    if params is None:
        params = DeduplicationParams(root_dir=str(root))
    elif str(params.root_dir) != str(root):
        raise ValueError(f"params.root_dir ({params.root_dir}) does not match root ({root})")
    return DeduplicationCommand().execute(params)


def restore_from_ledgers(root: PathLike, ledgers: List[RemapLedger]) -> RestoreResult:
    """Recreate every texture removed by the given ledgers under root."""
    return RestoreCommand().execute(root, ledgers)


# =============================
# Track workflows
# =============================

@dataclass
class TrackParams:
    """Parameters shared by the track deduplication and restore workflows."""
    rbr_folder: str
    backup_folder: str
    track_ids: List[int]
    delete_duplicates: bool = False
    force_update: bool = False
    zip_fast: bool = False
    min_size_bytes: int = DeduplicationConfig.MIN_DEDUP_SIZE
    extensions: List[str] = field(default_factory=lambda: list(DeduplicationConfig.DEFAULT_EXTENSIONS))

    def __post_init__(self):
        if not self.rbr_folder:
            raise ValueError("Game folder cannot be empty")
        if not self.backup_folder:
            raise ValueError("Backup folder cannot be empty")
        if not self.track_ids:
            raise ValueError("At least one track id is required")


@dataclass
class TrackReport:
    track_id: int
    backup_dir: Optional[Path] = None
    ledger_path: Optional[Path] = None
    detection: Optional[DetectionResult] = None
    skipped_reason: Optional[str] = None
    updated: bool = False


@dataclass
class TrackRestoreReport:
    backup_dir: Path
    result: RestoreResult
    restored_tracks: List[int] = field(default_factory=list)
    skipped_tracks: Dict[int, str] = field(default_factory=dict)
    updated: bool = False


def merge_entries(existing: List[RemapEntry], new: List[RemapEntry]) -> List[RemapEntry]:
    """Existing ledger entries followed by new ones; a new entry replaces an old one with the same source."""
    merged = {ledger_key(e.source_path): e for e in existing}
    for entry in new:
        merged[ledger_key(entry.source_path)] = entry
    return list(merged.values())


def _unique_dir(path: Path) -> Path:
    """path, or path_1, path_2... if a previous run in the same second already used it."""
    candidate, counter = path, 0
    while candidate.exists():
        counter += 1
        candidate = path.with_name(f"{path.name}_{counter}")
    return candidate


def _archive_for_folder(info: TrackInfo, folder: Path) -> Path:
    """Original archive file an extracted folder came from."""
    for archive in info.archive_paths:
        if archive.stem.lower() == folder.name.lower():
            return archive
    return info.track_folder / f"{folder.name}.rbz"


def _repack_track(workspace: Path, backup_dir: Path, info: TrackInfo, fast: bool) -> Dict[Path, Path]:
    """Repack the track's extracted folders; returns new archive → original archive."""
    packed = {}
    folders = ArchiveService.archive_folders(workspace, info.archive_prefix)
    for idx, folder in enumerate(folders, 1):
        logger.info(f"Zipping {idx}/{len(folders)} {folder.name}.rbz")
        new_archive = ArchiveService.repack(folder, backup_dir / f"new_{folder.name}.rbz", fast=fast)
        packed[new_archive] = _archive_for_folder(info, folder)
    return packed


def _install_archives(packed: Dict[Path, Path], backup_dir: Path) -> None:
    """Back up each original archive, then move the new archive over it."""
    originals = backup_dir / "original"
    for new_archive, original in packed.items():
        if original.exists():
            FileService.copy_file(original, originals / original.name)
        FileService.replace_file(new_archive, original)


class TrackDeduplicationCommand:
    """
    Per track:
    1. Skip if the track already has a ledger (unless force_update)
    2. Extract its texture archives into <backup>/<timestamp>_<id>/rbz
    3. Remove duplicates and write the ledger into the backup folder
    4. With delete_duplicates: repack, back up and replace the archives, install the ledger
    """

    def __init__(self, params: TrackParams, locator: Optional[TrackLocator] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        self.params = params
        self.locator = locator or TrackLocator(params.rbr_folder)
        self.progress_callback = progress_callback

    def execute(self) -> List[TrackReport]:
        stamp = ConvertUtils.timestamp_to_folder_name(time.time())
        return [self._process_track(track_id, stamp) for track_id in self.params.track_ids]

    def _process_track(self, track_id: int, stamp: str) -> TrackReport:
        report = TrackReport(track_id=track_id)
        info = self.locator.locate(track_id)

        if info.ledger_exists and not self.params.force_update:
            report.skipped_reason = f"{info.ledger_path.name} already exists (use force update to redo it)"
            return report
        if not info.archive_paths:
            report.skipped_reason = "no texture archives found"
            return report

        backup_dir = _unique_dir(Path(self.params.backup_folder) / f"{stamp}_{track_id}")
        workspace = backup_dir / "rbz"
        report.backup_dir = backup_dir

        for archive in info.archive_paths:
            logger.info(f"Unzipping {archive} to {workspace}")
            ArchiveService.extract(archive, workspace)

        detection = DeduplicationCommand().execute(DeduplicationParams(
            root_dir=str(workspace),
            min_size_bytes=self.params.min_size_bytes,
            extensions=self.params.extensions,
            archive_prefix=info.archive_prefix,
            progress_callback=self.progress_callback,
        ))
        report.detection = detection

        existing = read_ledger(info.ledger_path).entries if info.ledger_exists else []
        ledger = RemapLedger(
            name=info.ledger_path.name,
            entries=merge_entries(existing, detection.entries),
            archive_prefix=info.archive_prefix,
        )
        report.ledger_path = write_ledger(ledger, backup_dir / info.ledger_path.name)

        if self.params.delete_duplicates and detection.count > 0:
            packed = _repack_track(workspace, backup_dir, info, self.params.zip_fast)
            if info.ledger_exists:
                FileService.copy_file(info.ledger_path, backup_dir / "original" / info.ledger_path.name)
            _install_archives(packed, backup_dir)
            FileService.copy_file(report.ledger_path, info.ledger_path)
            report.updated = True

        return report


class TrackRestoreCommand:
    """
    1. Extract the archives of every listed track into one shared workspace
    2. Replay all their ledgers in one restore (chains may cross tracks)
    3. Repack into <backup>/new_*.rbz
    4. With force_update: back up and replace the archives, remove the ledgers
    """

    def __init__(self, params: TrackParams, locator: Optional[TrackLocator] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        self.params = params
        self.locator = locator or TrackLocator(params.rbr_folder)
        self.progress_callback = progress_callback

    def execute(self) -> TrackRestoreReport:
        stamp = ConvertUtils.timestamp_to_folder_name(time.time())
        ids = "_".join(str(track_id) for track_id in self.params.track_ids)
        backup_dir = _unique_dir(Path(self.params.backup_folder) / f"{stamp}_{ids}")
        workspace = backup_dir / "rbz"

        tracks: List[TrackInfo] = []
        skipped: Dict[int, str] = {}
        for track_id in self.params.track_ids:
            info = self.locator.locate(track_id)
            if not info.ledger_exists:
                skipped[track_id] = f"{info.ledger_path.name} not found, nothing to restore"
                continue
            tracks.append(info)
            for archive in info.archive_paths:
                logger.info(f"Unzipping {archive} to {workspace}")
                ArchiveService.extract(archive, workspace)

        ledgers = [
            read_ledger(info.ledger_path, archive_prefix=info.archive_prefix)
            for info in tracks
        ]
        result = RestoreCommand().execute(workspace, ledgers, progress_callback=self.progress_callback)

        report = TrackRestoreReport(
            backup_dir=backup_dir,
            result=result,
            restored_tracks=[info.track_id for info in tracks],
            skipped_tracks=skipped,
        )

        for info in tracks:
            packed = _repack_track(workspace, backup_dir, info, self.params.zip_fast)
            if self.params.force_update:
                FileService.copy_file(info.ledger_path, backup_dir / "original" / info.ledger_path.name)
                _install_archives(packed, backup_dir)
                # Archives are back in their original non-deduplicated form
                FileService.delete_file(info.ledger_path)
                report.updated = True

        FileService.remove_tree(workspace)
        return report
