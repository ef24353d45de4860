#!/usr/bin/env python3
"""
texremap CLI — Command line interface for texture deduplication and restore.

Two ways to point it at textures:
  --input DIR          a folder of already extracted textures (plain mode)
  --rbr-folder DIR     the game folder; tracks are looked up in Maps/Tracks.ini
                       and their .rbz archives extracted into --backup-folder
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from texremap.core.models import DeduplicationParams, DeduplicationConfig, RemapLedger, RestoreResult, DetectionResult
from texremap.core.ledger import read_ledger, write_ledger
from texremap.commands import (
    DeduplicationCommand, RestoreCommand, TrackDeduplicationCommand, TrackRestoreCommand,
    TrackParams, TrackReport, TrackRestoreReport, merge_entries)
from texremap.exceptions import TexRemapError
from texremap.utils.convert_utils import ConvertUtils
from texremap.aliases import MIN_SIZE_HELP_TEXT, ARCHIVE_PREFIX_HELP_TEXT, EPILOG_TEXT


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="texremap",
            description="texremap — Remap identical textures onto one shared copy",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Plain mode
        parser.add_argument(
            "--input", "-i",
            type=str,
            help="Folder of extracted textures to deduplicate or restore"
        )
        parser.add_argument(
            "--ledger", "-l",
            nargs="+",
            default=[],
            type=str,
            metavar='',
            help="Ledger file(s). Deduplication writes one (default: <input>/TextureFilenameMap.ini),\n"
                 "restore reads one or more"
        )
        parser.add_argument(
            "--archive-prefix",
            type=str,
            default=None,
            help=ARCHIVE_PREFIX_HELP_TEXT
        )

        # Track mode
        parser.add_argument(
            "--rbr-folder",
            type=str,
            help="Game folder containing Maps/Tracks.ini"
        )
        parser.add_argument(
            "--track", "-t",
            nargs="+",
            default=[],
            type=int,
            metavar='',
            dest="tracks",
            help="Track id(s) (space separated)"
        )
        parser.add_argument(
            "--backup-folder", "-b",
            type=str,
            help="Folder for extracted textures, new archives and backups of replaced files"
        )

        # Filtering options
        parser.add_argument(
            "--extensions", "-x",
            nargs="+",
            default=list(DeduplicationConfig.DEFAULT_EXTENSIONS),
            type=str,
            metavar='',
            help="Texture extensions (space separated). Default: .dds"
        )
        parser.add_argument(
            "--min-size", "-m",
            default="1K",
            type=str,
            metavar='',
            help=MIN_SIZE_HELP_TEXT
        )

        # Actions
        parser.add_argument(
            "--restore",
            action="store_true",
            help="Restore the original textures from ledger(s) instead of deduplicating"
        )
        parser.add_argument(
            "--delete-duplicates",
            action="store_true",
            help="Track mode: replace the track's archives with the deduplicated ones.\n"
                 "Without it the run is a simulation, results stay in the backup folder"
        )
        parser.add_argument(
            "--force-update",
            action="store_true",
            help="Redo tracks/ledgers that already exist; with --restore replace the archives"
        )
        parser.add_argument(
            "--zip-fast",
            action="store_true",
            help="Store files in new archives without compression"
        )
        parser.add_argument(
            "--trash",
            action="store_true",
            help="Plain mode: move duplicates to the system trash instead of deleting them"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show detailed statistics and progress"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if bool(args.input) == bool(args.rbr_folder):
            self.error_exit("Use exactly one of --input or --rbr-folder")

        if args.restore and args.delete_duplicates:
            self.error_exit("--delete-duplicates cannot be combined with --restore")

        if not ConvertUtils.is_valid_size_format(args.min_size):
            self.error_exit(f"Invalid size format: {args.min_size}")

        if args.input:
            root_path = Path(args.input)
            if not root_path.exists():
                self.error_exit(f"Directory not found: {args.input}")
            if not root_path.is_dir():
                self.error_exit(f"Path is not a directory: {args.input}")

            if args.restore:
                if not args.ledger:
                    self.error_exit("--restore needs at least one --ledger file")
                for ledger in args.ledger:
                    if not Path(ledger).is_file():
                        self.error_exit(f"Ledger not found: {ledger}")
            elif len(args.ledger) > 1:
                self.error_exit("Deduplication writes a single ledger file")
        else:
            if not args.tracks:
                self.error_exit("--rbr-folder needs at least one --track id")
            if not args.backup_folder:
                self.error_exit("--rbr-folder needs --backup-folder")
            if not Path(args.rbr_folder).is_dir():
                self.error_exit(f"Game folder not found: {args.rbr_folder}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    # =============================
    # Plain mode
    # =============================

    def run_deduplication(self, args: argparse.Namespace) -> DetectionResult:
        try:
            params = DeduplicationParams.from_human_readable(
                root_dir=str(Path(args.input).resolve()),
                min_size_str=args.min_size,
                extensions_str=",".join(args.extensions),
                archive_prefix=args.archive_prefix,
                use_trash=args.trash,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")
        params.progress_callback = self.progress_callback if self.verbose else None
        ledger_path = Path(args.ledger[0]) if args.ledger else Path(params.root_dir) / DeduplicationConfig.DEFAULT_LEDGER_NAME
        if ledger_path.exists() and not args.force_update:
            self.error_exit(f"Ledger already exists: {ledger_path} (use --force-update to extend it)")

        if not self.quiet:
            print(f"Scanning directory: {params.root_dir}")

        result = DeduplicationCommand().execute(params)

        existing = read_ledger(ledger_path).entries if ledger_path.exists() else []
        ledger = RemapLedger(
            name=ledger_path.name,
            entries=merge_entries(existing, result.entries),
            archive_prefix=params.archive_prefix,
        )
        write_ledger(ledger, ledger_path)

        if self.verbose:
            sys.stderr.write("\n")
            print(result.stats.print_summary())
        if not self.quiet:
            self.output_detection(result)
            print(f"Ledger: {ledger_path} ({len(ledger)} entries)")
        return result

    def run_restore(self, args: argparse.Namespace) -> RestoreResult:
        ledgers = [read_ledger(Path(path), archive_prefix=args.archive_prefix) for path in args.ledger]
        result = RestoreCommand().execute(
            Path(args.input),
            ledgers,
            progress_callback=self.progress_callback if self.verbose else None
        )
        if self.verbose:
            sys.stderr.write("\n")
        self.output_restore(result)
        return result

    # =============================
    # Track mode
    # =============================

    def create_track_params(self, args: argparse.Namespace) -> TrackParams:
        try:
            return TrackParams(
                rbr_folder=args.rbr_folder,
                backup_folder=args.backup_folder,
                track_ids=args.tracks,
                delete_duplicates=args.delete_duplicates,
                force_update=args.force_update,
                zip_fast=args.zip_fast,
                min_size_bytes=ConvertUtils.human_to_bytes(args.min_size),
                extensions=args.extensions,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def run_track_deduplication(self, params: TrackParams) -> List[TrackReport]:
        progress = self.progress_callback if self.verbose else None
        reports = TrackDeduplicationCommand(params, progress_callback=progress).execute()
        if self.verbose:
            sys.stderr.write("\n")

        for report in reports:
            if report.skipped_reason:
                self.warning(f"Track {report.track_id} skipped: {report.skipped_reason}")
                continue
            if self.quiet:
                continue
            print(f"\n🏁 Track {report.track_id}")
            self.output_detection(report.detection)
            print(f"   Ledger: {report.ledger_path}")
            if report.updated:
                print(f"   ✅ Archives updated, originals backed up in {report.backup_dir}")
            else:
                print(f"   Simulation only, results in {report.backup_dir}")
        return reports

    def run_track_restore(self, params: TrackParams) -> TrackRestoreReport:
        progress = self.progress_callback if self.verbose else None
        report = TrackRestoreCommand(params, progress_callback=progress).execute()
        if self.verbose:
            sys.stderr.write("\n")

        for track_id, reason in report.skipped_tracks.items():
            self.warning(f"Track {track_id} skipped: {reason}")
        self.output_restore(report.result)
        if not self.quiet:
            if report.updated:
                print(f"✅ Archives restored, previous versions backed up in {report.backup_dir}")
            else:
                print(f"Simulation only, new archives in {report.backup_dir}")
        return report

    # =============================
    # Output
    # =============================

    def output_detection(self, result: DetectionResult) -> None:
        if self.quiet:
            return
        if not result.count:
            print("No duplicate textures found.")
            return
        print(f"Removed {result.count} duplicate textures "
              f"({ConvertUtils.bytes_to_human(result.stats.bytes_saved)} saved)")
        if self.verbose:
            for entry in result.entries:
                print(f"   {entry.source_path}  →  {entry.target_path}")

    def output_restore(self, result: RestoreResult) -> None:
        if not self.quiet:
            print(f"Restored {len(result.restored)} textures "
                  f"({result.skipped} already present, {result.passes} passes)")
        if result.unresolved:
            self.warning(f"{len(result.unresolved)} textures could not be restored "
                         f"(their target is outside the restored tracks):")
            for entry in result.unresolved[:10]:
                self.warning(f"   {entry}")
            if len(result.unresolved) > 10:
                self.warning(f"   ...and {len(result.unresolved) - 10} more")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        if self.verbose:
            logging.getLogger().setLevel(logging.DEBUG)
        elif not self.quiet:
            logging.getLogger().setLevel(logging.WARNING)

        self.validate_args(args)

        try:
            if args.input:
                if args.restore:
                    self.run_restore(args)
                else:
                    self.run_deduplication(args)
            else:
                params = self.create_track_params(args)
                if args.restore:
                    self.run_track_restore(params)
                else:
                    self.run_track_deduplication(params)
        except TexRemapError as e:
            self.error_exit(str(e))

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
