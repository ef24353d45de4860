"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

detector.py
Finds textures with identical content, deletes all but one copy and records
each deletion as a remap entry (removed path → surviving path).

Pipeline per anchor (records in sorted logical-path order):
    size threshold → same-size bucket → fingerprint → full content → delete + remap
"""
import time
import logging
from typing import Dict, List, Optional, Callable

from texremap.core.comparator import ContentComparatorImpl
from texremap.core.grouper import FileGrouperImpl
from texremap.core.interfaces import DuplicateDetector, FileGrouper, ContentComparator
from texremap.core.ledger import RemapLedgerBuilder
from texremap.core.models import (
    FileRecord, DuplicateGroup, DetectionResult, DetectionStats, DeduplicationConfig)
from texremap.services.file_service import FileService

logger = logging.getLogger(__name__)


class DuplicateDetectorImpl(DuplicateDetector):
    """
    Sequential duplicate detector.

    The first unprocessed record of a same-size bucket (in sorted order) is the
    anchor and survives; every identical candidate is deleted from disk before
    its remap entry is recorded.
    """

    def __init__(
            self,
            min_size: int = DeduplicationConfig.MIN_DEDUP_SIZE,
            strip_shared_prefix: bool = False,
            use_trash: bool = False,
            grouper: FileGrouper = None,
            comparator: ContentComparator = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ):
        self.min_size = min_size
        self.strip_shared_prefix = strip_shared_prefix
        self.use_trash = use_trash
        self.grouper = grouper or FileGrouperImpl()
        self.stats = DetectionStats()
        self.comparator = comparator or ContentComparatorImpl(self.stats)
        self.progress_callback = progress_callback
        self.groups: List[DuplicateGroup] = []

    def detect(self, catalog: Dict[str, FileRecord]) -> DetectionResult:
        """
        Args:
            catalog: logical path → FileRecord, as returned by the scanner
        Returns:
            DetectionResult with the number of removed files and their remap entries
        Raises:
            FileReadError: a texture could not be read while comparing
            FileDeletionError: a confirmed duplicate could not be removed
            LedgerError: a removal cannot be recorded (checked before the file is deleted)
        """
        start_time = time.time()
        builder = RemapLedgerBuilder(strip_shared_prefix=self.strip_shared_prefix)
        records = [catalog[key] for key in sorted(catalog)]
        self.stats.files_scanned = len(records)

        size_groups = self.grouper.group_by_size(r for r in records if not r.processed)

        for index, anchor in enumerate(records, 1):
            if anchor.processed:
                continue

            self.stats.anchors += 1
            if anchor.size < self.min_size:
                self.stats.skipped_small += 1
                anchor.mark_processed()
                continue

            candidates = [
                r for r in size_groups.get(anchor.size, [])
                if r is not anchor and not r.processed
            ]
            if candidates:
                group = self._resolve_anchor(anchor, candidates, builder)
                if group.is_duplicate():
                    self.groups.append(group)

            anchor.mark_processed()

            if self.progress_callback:
                self.progress_callback("Comparing", index, len(records))

        self.stats.total_time = time.time() - start_time
        logger.debug(f"Detection finished: {self.stats.duplicates} duplicates in {self.stats.total_time:.2f}s")
        return DetectionResult(count=self.stats.duplicates, entries=builder.entries, stats=self.stats)

    def _resolve_anchor(
            self,
            anchor: FileRecord,
            candidates: List[FileRecord],
            builder: RemapLedgerBuilder
    ) -> DuplicateGroup:
        group = DuplicateGroup(size=anchor.size, files=[anchor])

        for candidate in candidates:
            if not self.comparator.is_identical(anchor, candidate):
                # Keep the small fingerprint for later anchors, drop the full buffer
                candidate.release_content()
                continue

            # Entry is checked before the file is deleted and recorded after
            entry = builder.prepare(candidate.logical_path, anchor.logical_path)
            candidate.mark_processed()
            FileService.delete_file(candidate.path, use_trash=self.use_trash)
            builder.add(entry)
            logger.debug(f"Removed duplicate {entry}")

            group.add_file(candidate)
            self.stats.duplicates += 1
            self.stats.bytes_saved += candidate.size

        return group
