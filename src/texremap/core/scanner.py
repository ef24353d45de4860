"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Builds the texture catalog: one FileRecord per eligible file under a root.
Features:
- Recursive depth-first traversal with os.walk (directories in sorted order)
- Extension filter (case-insensitive)
- Logical paths relative to the root with "/" separators
- Sizes and contents are NOT read here; FileRecord reads them lazily
"""

import os
import time
import logging
from pathlib import Path
from typing import Dict, List, Optional, Callable

from texremap.core.models import FileRecord, DeduplicationConfig
from texremap.core.paths import normalize_logical_path, ledger_key
from texremap.core.interfaces import TextureScanner
from texremap.exceptions import CatalogError

logger = logging.getLogger(__name__)


class TextureScannerImpl(TextureScanner):
    """
    Scans a directory tree recursively and catalogs texture files.

    Attributes:
        root_dir: Root directory to scan
        extensions: Allowed file extensions (e.g., [".dds"])
    """

    def __init__(self, root_dir: str, extensions: Optional[List[str]] = None):
        self.root_dir = root_dir
        self.extensions = [ext.lower() for ext in (extensions or DeduplicationConfig.DEFAULT_EXTENSIONS)]

    def scan(self,
             progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
             ) -> Dict[str, FileRecord]:
        """
        Returns a mapping of logical path → FileRecord.
        Raises CatalogError if the root is unusable or two files map to the same
        logical path, compared case-insensitively as ledgers compare them.
        """
        root_path = Path(self.root_dir)
        if not root_path.exists():
            raise CatalogError(f"Directory does not exist: {self.root_dir}")
        if not root_path.is_dir():
            raise CatalogError(f"Not a directory: {self.root_dir}")

        logger.debug(f"Scanning {self.root_dir} for {self.extensions}")
        start_time = time.time()
        catalog: Dict[str, FileRecord] = {}
        keys: Dict[str, str] = {}  # ledger key -> logical path

        for root, dirs, files in os.walk(str(root_path)):
            dirs.sort()
            for filename in sorted(files):
                path = Path(root) / filename
                if not self._is_eligible(path):
                    continue

                logical_path = normalize_logical_path(str(path.relative_to(root_path)))
                key = ledger_key(logical_path)
                if key in keys:
                    raise CatalogError(
                        f"Logical path collision: {logical_path} "
                        f"({catalog[keys[key]].path} and {path})"
                    )
                keys[key] = logical_path
                catalog[logical_path] = FileRecord(path=str(path), logical_path=logical_path)

            if progress_callback:
                progress_callback("Scanning", len(catalog), None)

        logger.debug(f"Scan completed in {time.time() - start_time:.2f}s, {len(catalog)} textures found")
        return catalog

    def _is_eligible(self, path: Path) -> bool:
        try:
            if path.is_symlink():
                logger.debug(f"Skipping symbolic link: {path}")
                return False
        except OSError as e:
            logger.debug(f"Could not check symlink status for {path}: {e}")
            return False

        return path.suffix.lower() in self.extensions
