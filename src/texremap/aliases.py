"""Help texts shared by the CLI parser."""

MIN_SIZE_HELP_TEXT = (
    "Textures smaller than this are never deduplicated (e.g. 1K, 4KB). Default: 1K"
)

ARCHIVE_PREFIX_HELP_TEXT = (
    "Archive-name prefix of the top-level folders (e.g. track-972_).\n"
    "Enables archive mode: a target in the same archive folder as its source\n"
    "is stored without the folder name, and restore puts it back."
)

EPILOG_TEXT = """
Examples:
  Remove duplicate textures from an extracted folder and write a ledger
  %(prog)s -i ~/textures -l ~/textures/TextureFilenameMap.ini

  Restore the original textures from one or more ledgers
  %(prog)s -i ~/textures -l map1.ini map2.ini --restore

  Simulate deduplication of track 972 (results only in the backup folder)
  %(prog)s --rbr-folder "~/games/Richard Burns Rally" --track 972 --backup-folder ~/backup

  Deduplicate track 972 and update its texture archives
  %(prog)s --rbr-folder ~/games/rbr --track 972 --backup-folder ~/backup --delete-duplicates --force-update

  Restore the original archives of tracks 320 and 321
  %(prog)s --rbr-folder ~/games/rbr --track 320 321 --backup-folder ~/backup --restore --zip-fast --force-update
"""
