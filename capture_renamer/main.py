import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import CaptureRenamerApp
from .metadata.probe import MetadataProbe
from .models import RenameOptions, TimeShift, TimestampSource
from .reporting import ReportGenerator
from .settings import SettingsStore


def setup_logging(log_file: Optional[Path], verbose: bool):
    """Sets up logging to the console and, if given, to log_file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Capture Renamer: rename camera files to YYYYMMDD_HHMMSS_<id>")

    p.add_argument("directory", type=Path, nargs="?", default=None,
                   help="Folder to process (default: the last folder used)")
    p.add_argument("--source", choices=[s.value for s in TimestampSource],
                   default=TimestampSource.FILE_MODIFICATION_TIME.value,
                   help="Where the capture time comes from: file mtime, video metadata or an encoded filename")

    p.add_argument("--hours", type=int, default=0, help="Shift capture time by N hours")
    p.add_argument("--days", type=int, default=0, help="Shift capture time by N days")
    p.add_argument("--months", type=int, default=0, help="Shift capture time by N calendar months")
    p.add_argument("--tag", default="", help="Text appended after the suffix, e.g. '_paris'")

    p.add_argument("--apply", action="store_true", help="Actually rename files (default is a dry run that only logs the plan)")
    p.add_argument("--no-set-mtime", action="store_true", help="Do not write the shifted time back as mtime")
    p.add_argument("--ffprobe", default=config.FFPROBE_CMD, help="ffprobe executable to use")
    p.add_argument("--report-csv", type=Path, default=None, help="Write a CSV of every file's outcome")
    p.add_argument("--settings", type=Path, default=None, help="Settings file (remembers the last folder)")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    settings = SettingsStore(args.settings)

    # 1. Setup
    directory = args.directory or settings.last_path()
    if directory is None:
        logging.error("No folder given and no previously used folder remembered.")
        sys.exit(1)

    directory = directory.resolve()
    if not directory.is_dir():
        logging.error(f"Folder not found: {directory}")
        sys.exit(1)

    logging.info("=== Capture Renamer Started ===")
    logging.info(f"Folder: {directory}")
    settings.remember_path(directory)

    # 2. Config
    options = RenameOptions(
        timestamp_source=TimestampSource(args.source),
        shift=TimeShift(hours=args.hours, days=args.days, months=args.months),
        custom_tag=args.tag,
        dry_run=not args.apply,
        set_mtime=not args.no_set_mtime,
    )

    # 3. Execution
    app = CaptureRenamerApp(MetadataProbe(ffprobe_cmd=args.ffprobe))

    try:
        outcomes = app.run(directory, options, show_progress=True)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error during renaming.")
        sys.exit(1)

    if args.report_csv:
        ReportGenerator().write_csv(outcomes, args.report_csv)

    sys.exit(0)


if __name__ == "__main__":
    main()
