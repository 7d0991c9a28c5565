#!/usr/bin/python3
"""
Delimited record source reader.

A record source is a newline-delimited text file:

    Nombre,Secuencia
    Alice,AGCTAGCTTAGC
    Bob,GGGGCCCC

The first line is a header. It is only checked for containing a separator;
its content is otherwise ignored. Every following line is split on its first
comma into (identifier, content). Empty lines and lines without a comma are
skipped. Every carriage return is removed from both fields.

Files are decoded as UTF-8 with "surrogateescape", so bytes that are not valid
UTF-8 survive a decode/encode round trip (see `to_bytes`).

Errors are surfaced as RecordSourceError subclasses with context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional


logger = logging.getLogger(__name__)

SEPARATOR = ","
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


class RecordSourceError(RuntimeError):
    """Raised when a record source cannot be used."""


class SourceUnavailable(RecordSourceError):
    """Raised when the record source is missing or unreadable."""


class MalformedHeader(RecordSourceError):
    """Raised when the source is empty or its header has no separator."""


@dataclass(frozen=True)
class Record:
    """One parsed data line.

    Attributes:
        identifier: Text before the first separator.
        content: Text after the first separator (the searched field).
    """

    identifier: str
    content: str


def parse_record(line: str) -> Optional[Record]:
    """Split a data line into a Record.

    Args:
        line: Raw line, with or without its line terminator.

    Returns:
        The parsed Record, or None if the line has no separator.
    """
    identifier, sep, content = line.rstrip("\n").partition(SEPARATOR)
    if not sep:
        return None
    return Record(identifier.replace("\r", ""), content.replace("\r", ""))


def to_bytes(value: str) -> bytes:
    """Return the original bytes of a value decoded from a record source."""
    return value.encode(ENCODING, ENCODING_ERRORS)


def read_records(file_path: Path) -> Iterator[Record]:
    """Yield the records of a source file in input order.

    The file is opened and the header validated on the first iteration.

    Args:
        file_path: Path to the record source.

    Yields:
        One Record per well-formed data line.

    Raises:
        SourceUnavailable: If the file cannot be opened or read.
        MalformedHeader: If the file is empty or the header has no separator.
    """
    path = Path(file_path)

    try:
        # Lines end at LF only; CRs are removed per field.
        with path.open(
            "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline="\n"
        ) as f:
            header = f.readline()
            if not header:
                raise MalformedHeader(f"Record source is empty: {path}")
            if SEPARATOR not in header:
                raise MalformedHeader(
                    f"Header has no {SEPARATOR!r} separator: {path}"
                )

            for lineno, line in enumerate(f, start=2):
                if not line.rstrip("\r\n"):
                    continue

                record = parse_record(line)
                if record is None:
                    logger.debug(
                        "Skipping line %d of %s: no separator", lineno, path
                    )
                    continue

                yield record
    except FileNotFoundError as exc:
        raise SourceUnavailable(f"Record source not found: {path}") from exc
    except OSError as exc:
        raise SourceUnavailable(
            f"Failed reading record source: {path} ({exc})"
        ) from exc


def load_records(file_path: Path) -> list[Record]:
    """Read every record of a source file into a list.

    Raises:
        RecordSourceError: See `read_records`.
    """
    return list(read_records(file_path))
