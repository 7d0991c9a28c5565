#!/usr/bin/python3
"""
Tests for RecordFilter orchestration.

These tests verify that the RecordFilter:
- Selects records whose content contains the pattern, in input order.
- Skips malformed rows without affecting the count.
- Gives identical results with a thread pool.
- Respects reread_on_query semantics and the per-pattern result cache.
- Wraps record source errors as FilterError.
"""

from __future__ import annotations

import random
from pathlib import Path

import pytest

from config import AppConfig
from record_filter import FilterError, FilterResult, RecordFilter
from records import MalformedHeader, SourceUnavailable


SAMPLE = "Nombre,Secuencia\nAlice,AGCTAGCTTAGC\nBob,GGGGCCCC\n"


def _write(tmp_path: Path, text: str) -> Path:
    data = tmp_path / "records.csv"
    data.write_text(text, encoding="utf-8")
    return data


def test_filter_selects_matching_records(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE)

    result = RecordFilter(source_path=data).filter("TAGC")

    assert result == FilterResult("TAGC", ("Alice",))
    assert result.total == 1


def test_malformed_row_does_not_affect_count(tmp_path: Path) -> None:
    data = _write(
        tmp_path,
        "Nombre,Secuencia\n"
        "Alice,AGCTAGCTTAGC\n"
        "MALFORMED_NO_COMMA_TAGC\n"
        "Bob,GGGGCCCC\n"
        "Carol,TTAGCA\n",
    )

    result = RecordFilter(source_path=data).filter("TAGC")

    assert result.names == ("Alice", "Carol")
    assert result.total == 2


def test_no_match_is_a_valid_result(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE)

    result = RecordFilter(source_path=data).filter("XYZ")

    assert result.names == ()
    assert result.total == 0


def test_empty_pattern_matches_every_record(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE + "Dave,\n")

    result = RecordFilter(source_path=data).filter("")

    assert result.names == ("Alice", "Bob", "Dave")


def test_duplicate_names_kept_unless_unique(tmp_path: Path) -> None:
    data = _write(
        tmp_path,
        "Nombre,Secuencia\nAlice,TAGC\nBob,TAGC\nAlice,ATAGC\n",
    )

    assert RecordFilter(source_path=data).filter("TAGC").names == (
        "Alice",
        "Bob",
        "Alice",
    )
    assert RecordFilter(
        source_path=data, unique_names=True
    ).filter("TAGC").names == ("Alice", "Bob")


@pytest.mark.parametrize("workers", [2, 4, 8])
def test_threaded_filter_matches_sequential(
    tmp_path: Path, workers: int
) -> None:
    """Ensure the thread pool keeps results identical and in input order."""
    rng = random.Random(99)
    lines = ["Nombre,Secuencia"]
    for i in range(500):
        seq = "".join(rng.choice("ACGT") for _ in range(60))
        lines.append(f"P{i:04d},{seq}")
    data = _write(tmp_path, "\n".join(lines) + "\n")

    sequential = RecordFilter(source_path=data, workers=1)
    threaded = RecordFilter(source_path=data, workers=workers)

    for pattern in ["TAGC", "ACGTA", "GGG", "TTTTTTTTTT"]:
        assert threaded.filter(pattern) == sequential.filter(pattern)


def test_from_config(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE)
    cfg = AppConfig(
        csvpath=data,
        reread_on_query=False,
        workers=3,
        cache_max=7,
        unique_names=True,
    )

    rf = RecordFilter.from_config(cfg)

    assert rf.source_path == data
    assert rf.reread_on_query is False
    assert rf.workers == 3
    assert rf.cache_max == 7
    assert rf.unique_names is True


def test_reread_true_sees_file_changes(tmp_path: Path) -> None:
    """Ensure reread_on_query=True reflects file changes immediately."""
    data = _write(tmp_path, SAMPLE)
    rf = RecordFilter(source_path=data, reread_on_query=True)

    assert rf.filter("CCCC").names == ("Bob",)

    data.write_text(SAMPLE + "Carol,CCCCCC\n", encoding="utf-8")

    assert rf.filter("CCCC").names == ("Bob", "Carol")


def test_reread_false_does_not_see_changes_without_warmup(
    tmp_path: Path,
) -> None:
    """Ensure reread_on_query=False serves loaded records until warmup."""
    data = _write(tmp_path, SAMPLE)
    rf = RecordFilter(source_path=data, reread_on_query=False)
    rf.warmup()

    assert rf.filter("CCCC").names == ("Bob",)

    data.write_text(SAMPLE + "Carol,CCCCCC\n", encoding="utf-8")

    assert rf.filter("CCCC").names == ("Bob",)
    assert rf.filter("CCCCCC").names == ()

    rf.warmup()
    assert rf.filter("CCCC").names == ("Bob", "Carol")


def test_reread_false_loads_lazily(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE)
    rf = RecordFilter(source_path=data, reread_on_query=False)

    assert rf.filter("TAGC").names == ("Alice",)


def test_result_cache_evicts_oldest(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE)
    rf = RecordFilter(source_path=data, reread_on_query=False, cache_max=2)

    first = rf.filter("A")
    rf.filter("C")
    assert rf.filter("A") is first

    rf.filter("G")

    assert list(rf._results) == ["A", "G"]


def test_result_cache_disabled_with_zero(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE)
    rf = RecordFilter(source_path=data, reread_on_query=False, cache_max=0)

    rf.filter("A")

    assert len(rf._results) == 0


def test_reread_true_never_caches(tmp_path: Path) -> None:
    data = _write(tmp_path, SAMPLE)
    rf = RecordFilter(source_path=data, reread_on_query=True)
    rf.warmup()

    rf.filter("A")

    assert rf._records is None
    assert len(rf._results) == 0


def test_missing_source_raises_filter_error(tmp_path: Path) -> None:
    rf = RecordFilter(source_path=tmp_path / "missing.csv")

    with pytest.raises(FilterError, match="not found") as excinfo:
        rf.filter("TAGC")

    assert isinstance(excinfo.value.__cause__, SourceUnavailable)


@pytest.mark.parametrize("reread", [True, False])
def test_bad_header_raises_filter_error(tmp_path: Path, reread: bool) -> None:
    data = _write(tmp_path, "no header separator\nAlice,TAGC\n")
    rf = RecordFilter(source_path=data, reread_on_query=reread)

    with pytest.raises(FilterError, match="separator") as excinfo:
        rf.filter("TAGC")

    assert isinstance(excinfo.value.__cause__, MalformedHeader)


def test_empty_source_raises_filter_error(tmp_path: Path) -> None:
    data = _write(tmp_path, "")
    rf = RecordFilter(source_path=data, workers=4)

    with pytest.raises(FilterError, match="empty"):
        rf.filter("TAGC")


def test_filter_matches_on_original_bytes(tmp_path: Path) -> None:
    data = tmp_path / "records.csv"
    data.write_bytes(
        b"Nombre,Secuencia\n"
        b"Raw,\xff\xfeAB\n"
        b"Jose,Jos\xc3\xa9\n"
        b"Bob,GGCC\n"
    )
    record_filter = RecordFilter(source_path=data)

    # A pattern ending mid-character matches on bytes.
    partial = b"s\xc3".decode("utf-8", "surrogateescape")
    raw = b"\xfeA".decode("utf-8", "surrogateescape")

    assert record_filter.filter(partial).names == ("Jose",)
    assert record_filter.filter(raw).names == ("Raw",)
    assert record_filter.filter("é").names == ("Jose",)
