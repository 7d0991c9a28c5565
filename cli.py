#!/usr/bin/python3
"""
Command-line helpers shared by the front-ends.

argparse exits with status 2 on usage errors; the front-ends of this project
report every failure, usage errors included, with exit status 1.
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn


EXIT_FAILURE = 1


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with EXIT_FAILURE on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    """argparse type for integers >= 1."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid integer: {value!r}"
        ) from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {parsed}")
    return parsed
