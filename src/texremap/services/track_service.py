"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/track_service.py
Resolves a track id to its texture archives and remap ledger location using
the game's Maps/Tracks.ini:

    [Map972]
    TrackName="Maps\\Track-972"

Texture archives live next to the track as <TrackName>_<sky>_textures.rbz
for the sky types M, N, E and O; the ledger is TextureFilenameMap<id>.ini in
the same folder.
"""
import configparser
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from texremap.core.models import DeduplicationConfig
from texremap.exceptions import TrackNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class TrackInfo:
    track_id: int
    track_name: str
    track_folder: Path
    ledger_path: Path
    archive_prefix: str
    archive_paths: List[Path] = field(default_factory=list)

    @property
    def ledger_exists(self) -> bool:
        return self.ledger_path.is_file()

    def __repr__(self):
        return f"<TrackInfo id={self.track_id}, name={self.track_name}, archives={len(self.archive_paths)}>"


class TrackLocator:
    TRACKS_INI = Path("Maps") / "Tracks.ini"

    def __init__(self, rbr_folder: Union[str, Path]):
        self.rbr_folder = Path(rbr_folder)
        self._parser: Optional[configparser.ConfigParser] = None

    @property
    def tracks_ini(self) -> Path:
        return self.rbr_folder / self.TRACKS_INI

    def _load(self) -> configparser.ConfigParser:
        if self._parser is None:
            parser = configparser.ConfigParser(
                interpolation=None,
                strict=False,
                comment_prefixes=(";", "#"),
                inline_comment_prefixes=(";",),
            )
            if self.tracks_ini.is_file():
                text = self.tracks_ini.read_text(encoding="utf-8", errors="replace")
                parser.read_string(text, source=str(self.tracks_ini))
            else:
                logger.warning(f"Tracks.ini not found: {self.tracks_ini}")
            self._parser = parser
        return self._parser

    def track_name(self, track_id: int) -> Optional[str]:
        """TrackName value of [Map<id>], without quotes, or None."""
        parser = self._load()
        wanted = f"map{track_id}"
        for section in parser.sections():
            if section.strip().lower() == wanted:
                value = parser.get(section, "TrackName", fallback="").strip().strip('"').strip()
                return value or None
        return None

    def locate(self, track_id: int) -> TrackInfo:
        track_name = self.track_name(track_id)
        if not track_name:
            raise TrackNotFoundError(f"Track {track_id} has no TrackName in {self.tracks_ini}")

        track_base = self.rbr_folder / Path(*[p for p in track_name.replace("\\", "/").split("/") if p])
        track_folder = track_base.parent

        archive_paths = []
        for sky in DeduplicationConfig.SKY_TYPES:
            archive = track_folder / DeduplicationConfig.ARCHIVE_NAME_PATTERN.format(
                track_name=track_base.name, sky=sky)
            if archive.is_file():
                archive_paths.append(archive)

        return TrackInfo(
            track_id=track_id,
            track_name=track_name,
            track_folder=track_folder,
            ledger_path=track_folder / DeduplicationConfig.LEDGER_NAME_PATTERN.format(track_id=track_id),
            archive_prefix=DeduplicationConfig.ARCHIVE_PREFIX_PATTERN.format(track_id=track_id),
            archive_paths=archive_paths,
        )
