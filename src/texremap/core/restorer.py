"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

restorer.py
Rebuilds removed textures from remap ledgers by copying each surviving
texture back to the path it replaced.

A target may itself be a removed texture (C was remapped to B, B to A), so an
entry can only be restored after the entry that recreates its target. Entries
whose target is missing are deferred, and the deferred set is retried until
it is empty or a whole pass restores nothing. Anything left over references a
texture outside the restored scope; it is reported, not raised.
"""
import os
import logging
from pathlib import Path
from typing import Dict, List, Optional, Callable

from texremap.core.interfaces import RestoreResolver
from texremap.core.models import RemapEntry, RemapLedger, RestoreResult
from texremap.core.paths import normalize_logical_path, ledger_key, repair_target
from texremap.services.file_service import FileService
from texremap.exceptions import FileOperationError

logger = logging.getLogger(__name__)


class TreeIndex:
    """
    Case-insensitive view of the files and folders under a root.

    Ledgers store lower-cased paths while the extracted tree keeps the
    archive's original case, so lookups go through ledger_key().
    """

    def __init__(self, root_dir: str):
        self.root = Path(root_dir)
        self._files: Dict[str, str] = {}
        self._dirs: Dict[str, str] = {}

        for root, dirs, files in os.walk(str(self.root)):
            rel_root = Path(root).relative_to(self.root)
            for name in dirs:
                self._add(self._dirs, (rel_root / name).as_posix())
            for name in files:
                self._add(self._files, (rel_root / name).as_posix())

    @staticmethod
    def _add(mapping: Dict[str, str], logical_path: str) -> None:
        normalized = normalize_logical_path(logical_path)
        mapping.setdefault(normalized.lower(), normalized)

    def find(self, logical_path: str) -> Optional[Path]:
        actual = self._files.get(ledger_key(logical_path))
        return self.root / actual if actual is not None else None

    def exists(self, logical_path: str) -> bool:
        return ledger_key(logical_path) in self._files

    def resolve_new(self, logical_path: str) -> Path:
        """Path for a file to be created, reusing the case of existing folders."""
        segments = normalize_logical_path(logical_path).split("/")
        if ".." in segments:
            raise FileOperationError(f"Path escapes the restore root: {logical_path}")
        resolved = []
        for depth in range(len(segments) - 1):
            key = "/".join(segments[:depth + 1]).lower()
            actual = self._dirs.get(key)
            resolved.append(actual.split("/")[-1] if actual else segments[depth])
        resolved.append(segments[-1])
        return self.root.joinpath(*resolved)

    def add_file(self, path: Path) -> None:
        rel = path.relative_to(self.root).as_posix()
        self._add(self._files, rel)
        parent = Path(rel).parent
        while parent.as_posix() != ".":
            self._add(self._dirs, parent.as_posix())
            parent = parent.parent


class RestoreResolverImpl(RestoreResolver):

    def __init__(
            self,
            root_dir: str,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ):
        self.root_dir = root_dir
        self.progress_callback = progress_callback

    def restore(self, ledgers: List[RemapLedger]) -> RestoreResult:
        """
        Replays the given ledgers against the tree under root_dir.

        Returns:
            RestoreResult; result.unresolved lists entries whose target never appeared
        """
        index = TreeIndex(self.root_dir)
        result = RestoreResult()
        pending: List[RemapEntry] = []

        for ledger in ledgers:
            logger.debug(f"Restoring {len(ledger)} entries from {ledger.name}")
            for entry in reversed(ledger.entries):
                entry = self._repair(entry, ledger.archive_prefix)
                if entry is None:
                    result.skipped += 1
                elif not self._restore_entry(entry, index, result):
                    pending.append(entry)
        result.passes = 1

        while pending:
            still_pending = [e for e in pending if not self._restore_entry(e, index, result)]
            result.passes += 1
            if len(still_pending) == len(pending):
                break
            pending = still_pending

        result.unresolved = pending
        if pending:
            logger.warning(
                f"{len(pending)} unresolved texture restorations: "
                + ", ".join(str(e) for e in pending)
            )

        if self.progress_callback:
            self.progress_callback("Restoring", len(result.restored), None)

        return result

    @staticmethod
    def _repair(entry: RemapEntry, archive_prefix: Optional[str]) -> Optional[RemapEntry]:
        target = repair_target(entry.source_path, entry.target_path, archive_prefix)
        if target == entry.target_path:
            return entry
        try:
            return RemapEntry(source_path=entry.source_path, target_path=target)
        except ValueError:
            logger.warning(f"Ignoring remap entry pointing to itself after prefix repair: {entry}")
            return None

    @staticmethod
    def _restore_entry(entry: RemapEntry, index: TreeIndex, result: RestoreResult) -> bool:
        """True if the entry is done (restored or already present), False to retry later."""
        if index.exists(entry.source_path):
            result.skipped += 1
            return True

        target = index.find(entry.target_path)
        if target is None:
            return False

        destination = index.resolve_new(entry.source_path)
        FileService.copy_file(target, destination)
        index.add_file(destination)
        result.restored.append(entry)
        return True
