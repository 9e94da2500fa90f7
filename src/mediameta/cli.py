"""
Command-line interface for mediameta.

Usage:
  mediameta --image photo.jpg                  # JSON record on stdout
  mediameta --video clip.mp4 --id <uuid>       # Use a known media item id
  mediameta --image -q *.jpg                   # Quick summary
  mediameta --video -o report.json *.mp4       # JSON export
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid

from mediameta._version import __version__
from mediameta.analyze import extract_metadata
from mediameta.config import get_config
from mediameta.errors import ExtractionError
from mediameta.formatters import format_json, format_json_list, format_quiet
from mediameta.models import MediaType

logger = logging.getLogger("mediameta")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediameta",
        description="Extract EXIF metadata from images and track metadata from MP4 videos.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
The media type is never guessed from the file: pass --image or --video.

Examples:
  mediameta --image photo.jpg
  mediameta --video --id 0b6e3a8e-1f0c-4f7e-9d47-2f1a4c7d3e10 clip.mp4
  mediameta --image -q *.jpg
  mediameta --video -o report.json *.mp4
        """,
    )
    parser.add_argument("files", nargs="+", help="Media file(s) to read")
    parser.add_argument("-o", "--output", help="Save records to JSON file")
    parser.add_argument("-q", "--quiet", action="store_true", help="One-line summary per file")
    parser.add_argument(
        "--id",
        dest="media_item_id",
        type=uuid.UUID,
        metavar="UUID",
        help="Media item id to tag the record with (single file only)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Log more (repeat for debug)"
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    type_group = parser.add_mutually_exclusive_group(required=True)
    type_group.add_argument(
        "--image",
        dest="media_type",
        action="store_const",
        const=MediaType.IMAGE,
        help="Files are images (EXIF)",
    )
    type_group.add_argument(
        "--video",
        dest="media_type",
        action="store_const",
        const=MediaType.VIDEO,
        help="Files are MP4 videos",
    )
    return parser


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = getattr(logging, get_config().logging.level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for mediameta CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.media_item_id is not None and len(args.files) != 1:
        parser.error("--id can only be used with a single file")

    _configure_logging(args.verbose)

    records = []
    errors = 0

    for file_path in args.files:
        media_item_id = args.media_item_id or uuid.uuid4()
        try:
            record = extract_metadata(media_item_id, file_path, args.media_type)
        except ExtractionError as e:
            print(f"Error reading {file_path}: {e}", file=sys.stderr)
            errors += 1
            continue

        records.append(record)
        if args.quiet:
            print(f"{file_path} | {format_quiet(record)}")
        elif not args.output:
            print(format_json(record))

    # JSON export
    if args.output and records:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(format_json_list(records))
        print(f"Records saved to: {args.output}")

    return 1 if errors > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
