"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

comparator.py
Byte-exact equality test for two texture records.

Two stages, cheapest first:
    1. Fingerprint: the cached first 4096 bytes. Bytes from offset 128 are
       compared before the first 128 bytes, because DDS headers of unrelated
       textures are often identical and a mismatch shows up sooner past them.
    2. Full content: only when fingerprints match. Both files are loaded once
       and the bytes after the fingerprint are compared.

No hashing is involved, so a positive answer is never probabilistic.
"""

import logging

from texremap.core.interfaces import ContentComparator
from texremap.core.models import FileRecord, DeduplicationConfig, DetectionStats

logger = logging.getLogger(__name__)


class ContentComparatorImpl(ContentComparator):

    def __init__(self, stats: DetectionStats = None):
        self.stats = stats or DetectionStats()

    def is_identical(self, anchor: FileRecord, candidate: FileRecord) -> bool:
        if anchor.size != candidate.size:
            return False

        if not self.fingerprints_equal(anchor, candidate):
            return False

        return self.contents_equal(anchor, candidate)

    def fingerprints_equal(self, anchor: FileRecord, candidate: FileRecord) -> bool:
        self.stats.fingerprint_compares += 1
        size = anchor.get_fingerprint_size()
        if size != candidate.get_fingerprint_size():
            return False

        skip = DeduplicationConfig.HEADER_SKIP
        left, right = anchor.fingerprint, candidate.fingerprint
        if size > skip and left[skip:size] != right[skip:size]:
            return False

        return left[:skip] == right[:skip]

    def contents_equal(self, anchor: FileRecord, candidate: FileRecord) -> bool:
        self.stats.full_compares += 1
        left = anchor.load_content()
        right = candidate.load_content()
        if len(left) != len(right):
            logger.debug(f"Content length changed under {anchor.logical_path} or {candidate.logical_path}")
            return False

        start = anchor.get_fingerprint_size()
        return left[start:] == right[start:]
