"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
File removal and copy operations used by deduplication and restore.
Removal either unlinks the file or moves it to the system trash (send2trash).
"""
import shutil
import logging
from pathlib import Path
from typing import Union

from send2trash import send2trash

from texremap.exceptions import FileDeletionError, FileOperationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileService:

    @staticmethod
    def delete_file(file_path: PathLike, use_trash: bool = False) -> None:
        """
        Removes a file from disk, or moves it to the system trash.
        Raises FileDeletionError unless the file is really gone afterwards.
        """
        path = Path(file_path)

        if not path.exists():
            raise FileDeletionError(f"File not found: {path}")

        try:
            if use_trash:
                send2trash(str(path))
            else:
                path.unlink()
        except Exception as e:
            raise FileDeletionError(f"Failed to delete {path}: {e}") from e

        if path.exists():
            raise FileDeletionError(f"File still present after deletion: {path}")

        logger.debug(f"Deleted {path}{' (trash)' if use_trash else ''}")

    @staticmethod
    def copy_file(source: PathLike, destination: PathLike) -> None:
        """Copies source to destination, creating missing parent directories."""
        source, destination = Path(source), Path(destination)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
        except OSError as e:
            raise FileOperationError(f"Failed to copy {source} to {destination}: {e}") from e

        logger.debug(f"Copied {source} -> {destination}")

    @staticmethod
    def replace_file(source: PathLike, destination: PathLike) -> None:
        """Moves source over destination (destination is overwritten)."""
        source, destination = Path(source), Path(destination)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(destination))
        except OSError as e:
            raise FileOperationError(f"Failed to move {source} to {destination}: {e}") from e

        logger.debug(f"Moved {source} -> {destination}")

    @staticmethod
    def remove_tree(folder: PathLike) -> None:
        """Removes a temporary folder and everything in it."""
        folder = Path(folder)
        if not folder.exists():
            return
        try:
            shutil.rmtree(folder)
        except OSError as e:
            raise FileOperationError(f"Failed to remove {folder}: {e}") from e

        logger.debug(f"Removed {folder}")
