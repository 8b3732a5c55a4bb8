#!/usr/bin/env python3
"""
NMEA trip distance tool.
This script reads an NMEA 0183 GPS log, keeps the position fixes and speed
reports, and prints the distance covered while the vehicle was moving.
"""

from typing import IO
import argparse
import codecs
import logging
import sys

from . import __version__
from .config import TripConfig
from .diagnostics import DiagnosticCollector, log_diagnostic
from .distance import format_summary, measure_gps_log
from .line_filter import StreamReadError
from .metrics import collect_metrics, log_metrics

# Configure logging
logger = logging.getLogger("nmeatrip")

STDIN_FILENAME = "-"


def encoding_name(value: str) -> str:
    """Argparse type that accepts only encodings known to the codecs registry."""
    try:
        codecs.lookup(value)
    except LookupError:
        raise argparse.ArgumentTypeError(f"unknown encoding: {value}")
    return value


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Trip distance estimation from NMEA 0183 GPS logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="NMEA log file to process ('-' reads standard input)",
    )
    parser.add_argument(
        "--encoding",
        type=encoding_name,
        default="utf-8",
        help="Text encoding of the log file (default: utf-8)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 if any malformed sentence was found",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"nmeatrip {__version__}",
    )
    return parser


def setup_logging(config: TripConfig) -> None:
    """Setup logging configuration."""
    if hasattr(sys.stdout, "reconfigure") and sys.stdout.encoding != "utf-8":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            if hasattr(sys.stderr, "reconfigure") and sys.stderr.encoding != "utf-8":
                sys.stderr.reconfigure(encoding="utf-8")
            logger.debug("Reconfigured stdout and stderr to UTF-8 encoding.")
        except Exception as e:
            logger.debug(f"Could not reconfigure stdout/stderr to UTF-8: {e}")
    level = getattr(logging, config.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)


def open_log(filename: str) -> IO[bytes]:
    """
    Open a log for binary reading.

    Standard input is wrapped so that closing it after processing leaves
    sys.stdin itself open.
    """
    if filename == STDIN_FILENAME:
        return open(sys.stdin.fileno(), "rb", closefd=False)
    return open(filename, "rb")


def main():
    """
    Parses command-line arguments, processes the GPS log,
    and prints the total distance.
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if not args.filename:
        parser.print_help()
        sys.exit(1)

    config = TripConfig.from_args(args)
    setup_logging(config)

    try:
        stream = open_log(args.filename)
    except FileNotFoundError as e:
        logger.error(f"GPS log file not found: {args.filename}")
        print(f"Error processing GPS log file: {e}", file=sys.stderr)
        sys.exit(1)
    except PermissionError as e:
        logger.error(f"Cannot read GPS log file (permission denied): {args.filename}")
        print(f"Error processing GPS log file: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        logger.error(f"Cannot open GPS log file {args.filename}: {e}")
        print(f"Error processing GPS log file: {e}", file=sys.stderr)
        sys.exit(1)

    diagnostics = DiagnosticCollector(forward=log_diagnostic)
    try:
        result, line_filter = measure_gps_log(stream, config, diagnostics)
    except StreamReadError as e:
        print(f"Error processing GPS log file: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info(
        f"Processed {line_filter.lines_read} lines with {len(diagnostics)} malformed sentences"
    )

    print(format_summary(result.total_km))

    log_metrics(collect_metrics(line_filter, result, diagnostics), config)

    if config.strict and len(diagnostics) > 0:
        logger.warning(f"{len(diagnostics)} malformed sentences found")
        sys.exit(2)


if __name__ == "__main__":
    main()
