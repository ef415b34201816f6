#!/usr/bin/env python3
"""exifreader - structured EXIF metadata from the command line.

Reads one or more images (local files or URLs), extracts their EXIF data and
prints the structured metadata as JSON.

Usage:
    python -m exifreader photo.jpg
    python -m exifreader https://example.com/image.jpg
    python -m exifreader *.jpg --no-gps --continue-on-fail
"""

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ._version import __version__
from .config import ConfigManager
from .config.manager import ConfigError
from .exceptions import ExifReaderError
from .processing import ExifReaderProcessor, ReaderOptions
from .source import BinaryData, Item

BINARY_PROPERTY = "data"

logger = logging.getLogger(__name__)


def setup_logging(config: ConfigManager, verbose: bool = False) -> None:
    """Configure logging for the application.

    Console output goes to stderr so that stdout carries only JSON.

    Args:
        config: Configuration manager (for level, file and format)
        verbose: If True, enable DEBUG level logging
    """
    level_name = "DEBUG" if verbose else str(config.get("logging.level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)s - %(name)s - %(message)s'
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if config.get("logging.file") else level)
    root_logger.addHandler(console_handler)

    log_file = config.get("logging.file")
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)  # Always DEBUG in file
        file_handler.setFormatter(logging.Formatter(
            config.get(
                "logging.format",
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        ))
        root_logger.addHandler(file_handler)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="exifreader",
        description="Extract structured EXIF metadata from images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Read a local file
  python -m exifreader photo.jpg

  # Download and read an image
  python -m exifreader https://example.com/image.jpg

  # Skip GPS data and keep timestamps as epoch seconds
  python -m exifreader photo.jpg --no-gps --raw-timestamps

  # Keep going when a file cannot be read
  python -m exifreader *.jpg --continue-on-fail
"""
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"exifreader {__version__}"
    )
    parser.add_argument(
        "sources",
        nargs="+",
        metavar="SOURCE",
        help="Image file path or http(s) URL"
    )

    # Reader options (override the reader section of the config file)
    parser.add_argument(
        "--output-property",
        metavar="NAME",
        help="Key to store the metadata under (default: exif)"
    )
    parser.add_argument(
        "--no-gps",
        dest="include_gps",
        action="store_const",
        const=False,
        help="Leave GPS coordinates out of the output"
    )
    parser.add_argument(
        "--no-image-size",
        dest="include_image_size",
        action="store_const",
        const=False,
        help="Leave image dimensions out of the output"
    )
    parser.add_argument(
        "--raw-timestamps",
        dest="convert_timestamps",
        action="store_const",
        const=False,
        help="Keep timestamps as epoch seconds instead of converting them"
    )
    parser.add_argument(
        "--continue-on-fail",
        action="store_const",
        const=True,
        help="Emit an error entry for unreadable images instead of stopping"
    )
    parser.add_argument(
        "--timeout",
        type=int,
        metavar="SECONDS",
        help="HTTP download timeout (default: 30)"
    )

    # Configuration
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: ~/.exifreader/config.yaml)"
    )

    # Output control
    parser.add_argument(
        "--full",
        action="store_true",
        help="Print complete items (json, binary, pairedItem) instead of json only"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose debug logging"
    )

    return parser.parse_args(argv)


def is_url(source: str) -> bool:
    """Return True if the source should be downloaded rather than read from disk."""
    return source.lower().startswith(("http://", "https://"))


def build_items(
    sources: List[str],
    options: ReaderOptions
) -> Tuple[List[Item], List[ReaderOptions], Dict[int, str]]:
    """Turn command-line sources into pipeline items and per-item options.

    Local files become items with a binary attachment; URLs become empty
    items read through the URL input source. With continue_on_fail, a file
    that cannot be read becomes an item without attachment and its error
    is recorded by position.

    Args:
        sources: File paths and URLs
        options: Base reader options

    Returns:
        Tuple of (items, per-item options, read errors by item index)

    Raises:
        OSError: If a local file cannot be read and continue_on_fail is off
    """
    items = []
    item_options = []
    read_errors = {}

    for index, source in enumerate(sources):
        if is_url(source):
            items.append(Item(json={"source": source}))
            item_options.append(options.with_url(source))
            continue

        path = Path(source).expanduser()
        item_options.append(options)
        try:
            data = path.read_bytes()
        except OSError as e:
            if not options.continue_on_fail:
                raise
            logger.warning(f"Could not read file: {e}")
            read_errors[index] = f"Could not read file: {e}"
            items.append(Item(json={"source": source}))
            continue

        binary = BinaryData(
            data=data,
            file_name=path.name,
            mime_type=mimetypes.guess_type(path.name)[0],
        )
        items.append(Item(json={"source": source}, binary={BINARY_PROPERTY: binary}))

    return items, item_options, read_errors


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for exifreader CLI.

    Returns:
        Exit code (0 for success, 1 for processing errors, 2 for config errors)
    """
    args = parse_arguments(argv)

    try:
        config = ConfigManager.load(config_path=args.config)
    except ConfigError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 2

    setup_logging(config, args.verbose)

    if args.timeout:
        config.set("http.timeout", args.timeout)

    try:
        options = ReaderOptions.from_config(
            config,
            input_source="binaryData",
            binary_property=BINARY_PROPERTY,
            output_property=args.output_property,
            include_gps=args.include_gps,
            include_image_size=args.include_image_size,
            convert_timestamps=args.convert_timestamps,
            continue_on_fail=args.continue_on_fail,
        )
    except (TypeError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    try:
        items, item_options, read_errors = build_items(args.sources, options)
        processor = ExifReaderProcessor.from_config(config)
        results = processor.process(items, lambda index: item_options[index])
        # Report why the file had no data rather than the missing attachment
        for index, message in read_errors.items():
            results[index].json["error"] = message
    except ExifReaderError as e:
        logger.error(f"Failed to read EXIF data: {e}", exc_info=args.verbose)
        return 1
    except OSError as e:
        logger.error(f"Could not read file: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Processing interrupted by user")
        return 130

    output = [item.to_dict() if args.full else item.json for item in results]
    print(json.dumps(output, indent=2, ensure_ascii=False, default=str))

    if any("error" in item.json for item in results):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
