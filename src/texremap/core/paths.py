"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/paths.py
Logical path normalization and the archive-prefix rules used by remap ledgers.

Logical paths are always relative to the scan root and use "/" separators.
When a tree holds extracted archives, the first path segment is the archive
name (e.g. "track-972_M_textures"). A ledger target that shares that segment
with its source is stored without it; restore puts it back.
"""

import re
from functools import lru_cache
from typing import Tuple, Optional

_PATTERN_SEPARATORS = re.compile(r'[\\/]+')


@lru_cache(maxsize=8192)
def normalize_logical_path(path: str) -> str:
    """
    Normalize a relative path to the canonical logical form.

    Examples:
        "Tex\\A.dds"       → "Tex/A.dds"
        "./tex//a.dds"     → "tex/a.dds"
        "/tex/a.dds"       → "tex/a.dds"
    """
    if not path:
        return ""

    segments = [s for s in _PATTERN_SEPARATORS.split(path.strip()) if s and s != "."]
    return "/".join(segments)


def ledger_key(path: str) -> str:
    """Case-insensitive identity of a logical path, as persisted in ledgers."""
    return normalize_logical_path(path).lower()


def split_archive_segment(path: str) -> Tuple[str, str]:
    """
    Split a logical path into (first segment, remainder).
    A path without separator has an empty first segment.
    """
    normalized = normalize_logical_path(path)
    head, sep, tail = normalized.partition("/")
    if not sep:
        return "", normalized
    return head, tail


def strip_shared_prefix(source: str, target: str) -> str:
    """
    Return target without its first segment when source starts with the same segment.

    The comparison is purely textual (case-insensitive): two unrelated archive
    groups whose folders share a name are indistinguishable here.
    """
    source_head, _ = split_archive_segment(source)
    target_head, target_tail = split_archive_segment(target)
    if source_head and source_head.lower() == target_head.lower():
        return target_tail
    return normalize_logical_path(target)


def repair_target(source: str, target: str, archive_prefix: Optional[str]) -> str:
    """
    Restore the archive-name segment that strip_shared_prefix() removed.

    A target that does not start with archive_prefix borrows everything up to
    and including the first separator of source. Without an archive_prefix
    the target is returned unchanged.
    """
    if not archive_prefix:
        return target
    if target.lower().startswith(archive_prefix.lower()):
        return target

    separator_pos = -1
    for separator in ("\\", "/"):
        pos = source.find(separator)
        if pos > 0:
            separator_pos = pos
            break

    return source[:separator_pos + 1] + target
