"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Size bucketing of catalog records. Only records of exactly equal size can be
identical, so the detector compares an anchor against its own bucket only.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List

from texremap.core.interfaces import FileGrouper
from texremap.core.models import FileRecord


class FileGrouperImpl(FileGrouper):

    def group_by_size(self, files: Iterable[FileRecord]) -> Dict[int, List[FileRecord]]:
        """Groups records by their size, keeping input order inside each group."""
        return self._group_by(files, lambda f: f.size)

    @staticmethod
    def _group_by(files: Iterable[FileRecord], key_func: Callable[[FileRecord], Any]) -> Dict[Any, List[FileRecord]]:
        """
        Helper method to group records by any computed key.
        Args:
            files: Records to group
            key_func: Function that computes a hashable key from a record
        Returns:
            Dict[key, List[FileRecord]] with groups of 2+ records only
        """
        groups = defaultdict(list)
        for file in files:
            groups[key_func(file)].append(file)

        return {key: group for key, group in groups.items() if len(group) >= 2}
