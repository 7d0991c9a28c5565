#!/usr/bin/python3
"""
Record filter orchestration.

This module provides a RecordFilter that runs the KMP matcher over the content
field of every record in a record source and collects the identifiers of the
records that contain a pattern. It supports two operational modes:

- reread_on_query=True: the source is read anew for each query (no caching).
- reread_on_query=False: records are loaded once (warmup) and results are
  cached per pattern, oldest entries evicted beyond cache_max.

With workers > 1 the per-record searches run on a thread pool that shares one
matcher; results keep input order either way.

Record source errors are raised as RecordSourceError by `records.py` and are
wrapped as FilterError at this layer.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from config import AppConfig
from kmp import KMPMatcher
from records import (
    Record,
    RecordSourceError,
    load_records,
    read_records,
    to_bytes,
)


logger = logging.getLogger(__name__)


class FilterError(RuntimeError):
    """Raised when the record filter cannot operate correctly."""


@dataclass(frozen=True)
class FilterResult:
    """Identifiers of the records whose content contains a pattern.

    Attributes:
        pattern: The pattern that was searched for.
        names: Matching identifiers, in input order.
    """

    pattern: str
    names: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        """Number of matching identifiers."""
        return len(self.names)


def _dedupe(names: Iterable[str]) -> tuple[str, ...]:
    """Drop repeated names, keeping the first occurrence of each."""
    return tuple(dict.fromkeys(names))


@dataclass
class RecordFilter:
    """Filter that selects records whose content contains a pattern.

    Attributes:
        source_path: Path to the record source.
        reread_on_query: Whether to read the source anew for each query.
        workers: Number of threads used per query (1 means sequential).
        cache_max: Maximum number of cached results (reread_on_query=False).
        unique_names: Whether repeated identifiers are reported once.
        _records: Loaded records when reread_on_query=False.
        _results: Per-pattern result cache when reread_on_query=False.
    """

    source_path: Path
    reread_on_query: bool = True
    workers: int = 1
    cache_max: int = 100
    unique_names: bool = False
    _records: Optional[list[Record]] = field(
        default=None, repr=False, compare=False
    )
    _results: "OrderedDict[str, FilterResult]" = field(
        default_factory=OrderedDict, repr=False, compare=False
    )
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @classmethod
    def from_config(cls, cfg: AppConfig) -> "RecordFilter":
        """Create a RecordFilter from an AppConfig."""
        return cls(
            source_path=cfg.csvpath,
            reread_on_query=cfg.reread_on_query,
            workers=cfg.workers,
            cache_max=cfg.cache_max,
            unique_names=cfg.unique_names,
        )

    def warmup(self) -> None:
        """Load the records into memory.

        Only useful when reread_on_query=False. If reread_on_query=True, any
        loaded records and cached results are cleared.

        Raises:
            FilterError: If the record source cannot be read.
        """
        with self._lock:
            self._results.clear()

            if self.reread_on_query:
                self._records = None
                return

            try:
                records = load_records(self.source_path)
            except RecordSourceError as exc:
                raise FilterError(str(exc)) from exc
            self._records = records

        logger.info(
            "Loaded %d records from %s", len(records), self.source_path
        )

    def _cached(self, pattern: str) -> Optional[FilterResult]:
        with self._lock:
            result = self._results.get(pattern)
            if result is not None:
                self._results.move_to_end(pattern)
            return result

    def _remember(self, result: FilterResult) -> None:
        if self.cache_max <= 0:
            return

        with self._lock:
            self._results[result.pattern] = result
            while len(self._results) > self.cache_max:
                evicted, _ = self._results.popitem(last=False)
                logger.debug("Evicted cached result for %r", evicted)

    def _match_names(
        self, matcher: KMPMatcher[bytes], records: Iterable[Record]
    ) -> tuple[list[str], int]:
        """Return (matching identifiers, number of records scanned)."""
        def is_hit(record: Record) -> bool:
            return matcher.contains(to_bytes(record.content))

        if self.workers <= 1:
            names: list[str] = []
            scanned = 0
            for record in records:
                scanned += 1
                if is_hit(record):
                    names.append(record.identifier)
            return names, scanned

        batch = list(records)
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            hits = list(pool.map(is_hit, batch))
        names = [r.identifier for r, hit in zip(batch, hits) if hit]
        return names, len(batch)

    def filter(self, pattern: str) -> FilterResult:
        """Collect the identifiers of records whose content has the pattern.

        Args:
            pattern: Pattern to search for in each record's content.

        Returns:
            A FilterResult with matching identifiers in input order.

        Raises:
            FilterError: If the record source is missing, unreadable, empty,
                or has a malformed header.
        """
        if not self.reread_on_query:
            cached = self._cached(pattern)
            if cached is not None:
                logger.debug("Cache hit for pattern %r", pattern)
                return cached

            if self._records is None:
                self.warmup()

        start = time.perf_counter()
        # Match on the original bytes, not on decoded code points.
        matcher = KMPMatcher(to_bytes(pattern))

        try:
            if self.reread_on_query:
                records: Iterable[Record] = read_records(self.source_path)
            else:
                assert self._records is not None
                records = self._records
            names, scanned = self._match_names(matcher, records)
        except RecordSourceError as exc:
            raise FilterError(str(exc)) from exc

        if self.unique_names:
            result = FilterResult(pattern, _dedupe(names))
        else:
            result = FilterResult(pattern, tuple(names))

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info(
            "Pattern %r: %d/%d records matched in %.3f ms",
            pattern,
            result.total,
            scanned,
            elapsed_ms,
        )

        if not self.reread_on_query:
            self._remember(result)

        return result
