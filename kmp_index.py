#!/usr/bin/python3
"""
Direct front-end: print where a pattern first occurs in a text.

Usage:

    python3 -m kmp_index <pattern> <text>

Prints the 0-based byte offset of the leftmost occurrence, or -1 if the
pattern does not occur. An empty pattern prints 0.

Both arguments are taken verbatim, including values that start with '-';
arguments after the first two are ignored.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Optional, Sequence

from cli import ArgumentParser
from kmp import index_of


logger = logging.getLogger(__name__)

# argv entries can never contain NUL, so no argument parses as an option.
NO_OPTION_PREFIX = "\0"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = ArgumentParser(
        prog="kmp_index",
        description="Find the first occurrence of a pattern in a text",
        prefix_chars=NO_OPTION_PREFIX,
        add_help=False,
    )
    p.add_argument("pattern", help="Pattern to search for")
    p.add_argument("text", help="Text to search in")
    args, extras = p.parse_known_args(argv)
    if extras:
        logger.debug("Ignoring extra arguments: %r", extras)
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the direct search entry point."""
    args = parse_args(argv)
    print(index_of(os.fsencode(args.text), os.fsencode(args.pattern)))


if __name__ == "__main__":
    main()
