import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import ImageSorterApp
from .exceptions import DirectoryAccessError
from .reporting import ReportGenerator


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Image Sorter: copy images into date folders, oldest first")

    p.add_argument("src", type=Path, help="Source directory to scan")
    p.add_argument("dest", type=Path, nargs="?", default=None,
                   help=f"Destination root (default: SRC/{config.DEFAULT_OUTPUT_FOLDER})")

    p.add_argument("--ext", action="append", default=None, metavar="EXT",
                   help="Recognized extension, repeatable (default: common raster formats)")
    p.add_argument("--ignore-case", action="store_true", help="Match extensions case-insensitively")
    p.add_argument("--workers", type=int, default=config.DEFAULT_MAX_WORKERS,
                   help="Parallel workers for metadata extraction")
    p.add_argument("--stamp-names", action="store_true", help="Append the resolved date to copied file names")
    p.add_argument("--dry-run", action="store_true", help="Simulate actions without modifying disk")
    p.add_argument("--report-csv", type=Path, default=None, help="Write a per-file CSV report to this path")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--no-progress", action="store_true", help="Hide the copy progress bar")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    # 1. Setup
    src_root = args.src.resolve()
    dest_root = args.dest.resolve() if args.dest else None

    setup_logging(args.verbose, args.log_file)

    logging.info("=== Image Sorter Started ===")
    logging.info(f"Source: {src_root}")
    logging.info(f"Dest:   {dest_root or src_root / config.DEFAULT_OUTPUT_FOLDER}")

    # 2. Execution
    app = ImageSorterApp(
        extensions=args.ext,
        ignore_case=args.ignore_case,
        max_workers=args.workers,
        progress=not args.no_progress,
    )

    try:
        report = app.run(
            src_root=src_root,
            dest_root=dest_root,
            dry_run=args.dry_run,
            stamp_names=args.stamp_names,
        )
    except DirectoryAccessError as e:
        logging.error(f"Aborting: {e}")
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1
    except Exception:
        logging.exception("Fatal error during sorting.")
        return 1

    # 3. Report
    reporter = ReportGenerator(report)
    reporter.log_summary()
    if args.report_csv:
        reporter.write_csv(args.report_csv)

    return 0


if __name__ == "__main__":
    sys.exit(main())
