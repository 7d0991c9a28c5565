#!/usr/bin/python3
"""
Batch front-end: search a record source for a pattern.

Usage:

    python3 -m kmp_search <pattern> <source-path>

Reads the record source (header line, then identifier,content lines), selects
the records whose content contains the pattern and prints one line:

    {"patron":"TAGC","total":1,"sospechosos":["Alice"]}

Exits with status 1 and a message on stderr if arguments are missing, the
source cannot be opened, the source is empty or its header has no comma.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from cli import ArgumentParser, positive_int
from config import LOG_LEVELS
from logconfig import setup_logging
from output import encode_line, format_result
from record_filter import FilterError, RecordFilter


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Options are recognized anywhere. The first two remaining arguments are
    the pattern and the source, even when they start with '-'; any further
    arguments are ignored.

    Returns:
        Parsed command-line arguments.
    """
    p = ArgumentParser(
        prog="kmp_search",
        usage="%(prog)s [options] pattern source",
        description="Select the records whose content contains a pattern",
        add_help=False,
        allow_abbrev=False,
    )
    p.add_argument("--help", action="help", help="Show this help and exit")
    p.add_argument(
        "--escape",
        action="store_true",
        help="Emit properly escaped JSON instead of the raw legacy form",
    )
    p.add_argument(
        "--unique",
        action="store_true",
        help="Report each identifier at most once",
    )
    p.add_argument(
        "--workers",
        type=positive_int,
        default=1,
        help="Threads used to search the records (default: 1)",
    )
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
    )
    args, rest = p.parse_known_args(argv)

    if len(rest) > 2 and rest[0] == "--":
        rest = rest[1:]
    if len(rest) < 2:
        p.error("the following arguments are required: pattern, source")

    args.pattern = rest[0]
    args.source = Path(rest[1])
    if rest[2:]:
        logger.debug("Ignoring extra arguments: %r", rest[2:])
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the batch search entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    record_filter = RecordFilter(
        source_path=args.source,
        reread_on_query=True,
        workers=args.workers,
        unique_names=args.unique,
    )

    try:
        result = record_filter.filter(args.pattern)
    except FilterError as exc:
        logger.debug("Search failed", exc_info=True)
        raise SystemExit(f"Error: {exc}") from exc

    line = format_result(result, escape=args.escape)
    sys.stdout.buffer.write(encode_line(line))
    sys.stdout.buffer.flush()


if __name__ == "__main__":
    main()
