"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/ledger.py
Remap ledger building and its text format.

Ledger file format (one file per logical group):
    ; comment / header lines start with ';'
    <removed texture path>\t<texture path used instead>

Paths are lower-cased and sorted by source when written. Readers ignore blank
lines, comment lines and lines with fewer than two tab-separated fields.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from texremap.core.models import RemapEntry, RemapLedger, DeduplicationConfig
from texremap.core.paths import normalize_logical_path, strip_shared_prefix, ledger_key
from texremap.exceptions import LedgerError, LedgerKeyCollisionError

logger = logging.getLogger(__name__)

DEFAULT_HEADER = [
    "Texture remap ledger. Each line: <removed texture><TAB><texture used instead>",
]


class RemapLedgerBuilder:
    """
    Accumulates remap entries in detection order, one per removed texture.

    With strip_shared_prefix enabled, a target living in the same archive
    folder (first path segment) as its source is stored without that folder.
    """

    def __init__(self, strip_shared_prefix: bool = False):
        self.strip_shared_prefix = strip_shared_prefix
        self._entries: Dict[str, RemapEntry] = {}

    def prepare(self, source_path: str, target_path: str) -> RemapEntry:
        """
        Normalize a (removed, survivor) pair into an entry that add() will accept.
        Nothing is recorded yet: callers delete the file first, then add() the entry.

        Raises:
            LedgerError: the pair maps a path onto itself
            LedgerKeyCollisionError: the source is already remapped
        """
        source = normalize_logical_path(source_path)
        target = normalize_logical_path(target_path)
        if self.strip_shared_prefix:
            target = strip_shared_prefix(source, target)
        try:
            entry = RemapEntry(source_path=source, target_path=target)
        except ValueError as e:
            raise LedgerError(f"Invalid remap {source_path} -> {target_path}: {e}") from e
        self._check_key(entry)
        return entry

    def add(self, entry: RemapEntry) -> None:
        self._check_key(entry)
        self._entries[ledger_key(entry.source_path)] = entry

    def _check_key(self, entry: RemapEntry) -> None:
        key = ledger_key(entry.source_path)
        if key in self._entries:
            raise LedgerKeyCollisionError(
                f"Source path remapped twice: {entry.source_path} "
                f"(already mapped to {self._entries[key].target_path})"
            )

    @property
    def entries(self) -> List[RemapEntry]:
        return list(self._entries.values())


def format_ledger(ledger: RemapLedger, header: Optional[List[str]] = None) -> str:
    comment = DeduplicationConfig.LEDGER_COMMENT
    separator = DeduplicationConfig.LEDGER_SEPARATOR

    lines = [f"{comment} {text}" for text in (DEFAULT_HEADER if header is None else header)]
    for entry in ledger.sorted_entries():
        lines.append(f"{entry.source_path.lower()}{separator}{entry.target_path.lower()}")
    return "\n".join(lines) + "\n"


def write_ledger(ledger: RemapLedger, path: Path, header: Optional[List[str]] = None) -> Path:
    """Persist a ledger to disk; returns the written path."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(format_ledger(ledger, header), encoding="utf-8")
    except OSError as e:
        raise LedgerError(f"Failed to write ledger {path}: {e}") from e

    logger.debug(f"Wrote {len(ledger)} remap entries to {path}")
    return path


def parse_ledger_lines(
        lines: Iterable[str],
        name: str,
        archive_prefix: Optional[str] = None
) -> RemapLedger:
    """Parse ledger text lines, keeping file order."""
    comment = DeduplicationConfig.LEDGER_COMMENT
    separator = DeduplicationConfig.LEDGER_SEPARATOR
    entries = []

    for line_no, line in enumerate(lines, 1):
        text = line.strip()
        if len(text) <= 1 or text.startswith(comment):
            continue

        fields = text.split(separator)
        if len(fields) < 2:
            logger.debug(f"{name}:{line_no}: no tab separator, line ignored")
            continue

        source, target = fields[0].strip(), fields[1].strip()
        if not source or not target:
            continue
        if source.lower() == target.lower():
            logger.debug(f"{name}:{line_no}: texture remapped onto itself, line ignored")
            continue

        entries.append(RemapEntry(source_path=source, target_path=target))

    return RemapLedger(name=name, entries=entries, archive_prefix=archive_prefix)


def read_ledger(path: Path, name: Optional[str] = None, archive_prefix: Optional[str] = None) -> RemapLedger:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise LedgerError(f"Failed to read ledger {path}: {e}") from e

    return parse_ledger_lines(text.splitlines(), name=name or path.name, archive_prefix=archive_prefix)
