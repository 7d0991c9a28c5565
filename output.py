#!/usr/bin/python3
"""
Result serialization.

Two forms are produced for a FilterResult:

- raw (default): the legacy single-line object built by plain concatenation,

      {"patron":"TAGC","total":1,"sospechosos":["Alice"]}

  The pattern and identifiers are embedded as-is, so a value containing a
  double quote or a control character yields invalid JSON. Existing consumers
  parse this form, so it stays the default.

- escaped: the same object produced by `json.dumps` with compact separators,
  valid JSON for any input.
"""

from __future__ import annotations

import json

from record_filter import FilterResult
from records import ENCODING, ENCODING_ERRORS


def format_raw(result: FilterResult) -> str:
    """Serialize a result by raw concatenation (no escaping)."""
    names = ",".join(f'"{name}"' for name in result.names)
    return (
        f'{{"patron":"{result.pattern}",'
        f'"total":{result.total},'
        f'"sospechosos":[{names}]}}'
    )


def format_json(result: FilterResult) -> str:
    """Serialize a result as properly escaped JSON."""
    return json.dumps(
        {
            "patron": result.pattern,
            "total": result.total,
            "sospechosos": list(result.names),
        },
        ensure_ascii=False,
        separators=(",", ":"),
    )


def format_result(result: FilterResult, escape: bool = False) -> str:
    """Serialize a result in the raw or escaped form.

    Args:
        result: Filter result to serialize.
        escape: If True, use the JSON encoder; otherwise the raw form.

    Returns:
        A single line of text without a trailing newline.
    """
    if escape:
        return format_json(result)
    return format_raw(result)


def encode_line(line: str) -> bytes:
    """Encode a serialized line, newline included, back to raw bytes.

    Values decoded from a record source or from argv keep their original
    bytes, including bytes that are not valid UTF-8.
    """
    return (line + "\n").encode(ENCODING, ENCODING_ERRORS)
