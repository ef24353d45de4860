"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/archive_service.py
Extraction and repacking of .rbz texture archives (plain zip files).

An archive stores its textures under one base folder named after the archive
(e.g. "track-972_M_textures/..."). That folder becomes the first segment of
every logical path once the archive is extracted into a workspace.
"""
import os
import logging
import zipfile
from pathlib import Path
from typing import List, Union

from texremap.exceptions import ArchiveError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ArchiveService:

    @staticmethod
    def extract(archive_path: PathLike, destination: PathLike) -> List[str]:
        """
        Extracts an archive into destination, overwriting existing files.
        Returns the archive member names.
        """
        archive_path, destination = Path(archive_path), Path(destination)
        dest_root = destination.resolve()

        try:
            destination.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path) as archive:
                names = archive.namelist()
                for name in names:
                    target = (dest_root / name).resolve()
                    if target != dest_root and dest_root not in target.parents:
                        raise ArchiveError(f"Archive member escapes destination: {name} in {archive_path}")
                archive.extractall(destination)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Failed to extract {archive_path}: {e}") from e

        logger.debug(f"Extracted {len(names)} entries from {archive_path} to {destination}")
        return names

    @staticmethod
    def repack(folder: PathLike, archive_path: PathLike, fast: bool = False) -> Path:
        """
        Zips folder into archive_path with the folder name as base entry.
        fast=True stores files without compression.
        """
        folder, archive_path = Path(folder), Path(archive_path)
        if not folder.is_dir():
            raise ArchiveError(f"Not a directory: {folder}")

        compression = zipfile.ZIP_STORED if fast else zipfile.ZIP_DEFLATED
        compresslevel = None if fast else 9
        count = 0

        try:
            archive_path.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path, "w", compression=compression, compresslevel=compresslevel) as archive:
                for root, dirs, files in os.walk(folder):
                    dirs.sort()
                    if not dirs and not files:
                        # Keep empty folders (e.g. an archive whose textures were all remapped)
                        arcname = Path(folder.name) / Path(root).relative_to(folder)
                        archive.write(root, arcname.as_posix() + "/")
                        continue
                    for filename in sorted(files):
                        path = Path(root) / filename
                        arcname = Path(folder.name) / path.relative_to(folder)
                        archive.write(path, arcname.as_posix())
                        count += 1
        except OSError as e:
            raise ArchiveError(f"Failed to create {archive_path}: {e}") from e

        logger.debug(f"Packed {count} files from {folder} into {archive_path}")
        return archive_path

    @staticmethod
    def archive_folders(workspace: PathLike, archive_prefix: str) -> List[Path]:
        """Extracted archive folders of one track (folder name starts with archive_prefix)."""
        workspace = Path(workspace)
        if not workspace.is_dir():
            return []
        prefix = archive_prefix.lower()
        return [
            d for d in sorted(workspace.iterdir())
            if d.is_dir() and d.name.lower().startswith(prefix)
        ]
