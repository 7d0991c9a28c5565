#!/usr/bin/python3
# benchmarks/benchmark_kmp.py

from __future__ import annotations

import argparse
import csv
import random
import statistics
import time
from pathlib import Path
from typing import Any, Callable, Optional

from kmp import search
from record_filter import RecordFilter


# ----------------------------
# Utilities
# ----------------------------

def now_ts() -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S")


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def time_call(fn: Callable[[], Any], repeat: int) -> list[float]:
    """Return the wall time of each call in milliseconds."""
    durations_ms: list[float] = []
    for _ in range(repeat):
        t0 = time.perf_counter()
        fn()
        durations_ms.append((time.perf_counter() - t0) * 1000.0)
    return durations_ms


def naive_search(text: str, pattern: str) -> Optional[int]:
    """Quadratic reference scan: restart after every mismatch."""
    if not pattern:
        return 0
    for start in range(len(text) - len(pattern) + 1):
        j = 0
        while j < len(pattern) and text[start + j] == pattern[j]:
            j += 1
        if j == len(pattern):
            return start
    return None


def str_find(text: str, pattern: str) -> Optional[int]:
    idx = text.find(pattern)
    return None if idx < 0 else idx


SEARCHERS: dict[str, Callable[[str, str], Optional[int]]] = {
    "kmp": search,
    "naive": naive_search,
    "str_find": str_find,
}


# ----------------------------
# Data generation
# ----------------------------

def adversarial_case(n: int, k: int) -> tuple[str, str]:
    """Text "a"*n + "b" searched for "a"*k + "b" (worst case for naive)."""
    return "a" * n + "b", "a" * k + "b"


def generate_record_file(path: Path, rows: int, length: int,
                         seed: int = 123) -> None:
    """Write a deterministic record source of random DNA-like sequences."""
    rng = random.Random(seed)
    ensure_dir(path.parent)

    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write("Nombre,Secuencia\n")
        for i in range(rows):
            seq = "".join(rng.choice("ACGT") for _ in range(length))
            f.write(f"P{i:07d},{seq}\n")


# ----------------------------
# Benchmarks
# ----------------------------

def benchmark_searchers(
    n: int, k: int, searchers: list[str], repeat: int
) -> list[dict[str, Any]]:
    text, pattern = adversarial_case(n, k)
    rows: list[dict[str, Any]] = []

    for name in searchers:
        fn = SEARCHERS[name]
        durations = time_call(lambda: fn(text, pattern), repeat)
        rows.append(
            {
                "ts": now_ts(),
                "searcher": name,
                "text_len": len(text),
                "pattern_len": len(pattern),
                "avg_ms": statistics.mean(durations),
                "min_ms": min(durations),
                "max_ms": max(durations),
            }
        )

    return rows


def benchmark_filter(
    data_file: Path, rows: int, workers: int, patterns: list[str],
) -> dict[str, Any]:
    record_filter = RecordFilter(
        source_path=data_file,
        reread_on_query=False,
        workers=workers,
        cache_max=0,
    )
    record_filter.warmup()

    durations_ms: list[float] = []
    matches = 0
    for pattern in patterns:
        t0 = time.perf_counter()
        result = record_filter.filter(pattern)
        durations_ms.append((time.perf_counter() - t0) * 1000.0)
        matches += result.total

    return {
        "ts": now_ts(),
        "rows": rows,
        "workers": workers,
        "patterns": len(patterns),
        "matches": matches,
        "avg_ms": statistics.mean(durations_ms),
        "p50_ms": statistics.median(durations_ms),
        "max_ms": max(durations_ms),
    }


# ----------------------------
# CSV writing
# ----------------------------

def write_csv(path: Path, rows: list[dict[str, Any]]) -> None:
    if not rows:
        return
    ensure_dir(path.parent)

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        for r in rows:
            w.writerow(r)


# ----------------------------
# CLI
# ----------------------------

def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Benchmark KMP search and record filtering."
    )
    p.add_argument(
        "--outdir", default="benchmarks/results",
        help="Output directory for CSV results."
    )
    p.add_argument(
        "--datadir", default="benchmarks/data",
        help="Directory to store generated record files."
    )
    p.add_argument(
        "--text-sizes", default="10000,20000,40000,80000",
        help="Comma-separated text lengths for the adversarial case."
    )
    p.add_argument(
        "--searchers", default="kmp,naive,str_find",
        help="Comma-separated searchers."
    )
    p.add_argument(
        "--rows", default="1000,10000,50000",
        help="Comma-separated record counts for the filter benchmark."
    )
    p.add_argument(
        "--workers", default="1,2,4",
        help="Comma-separated worker counts for the filter benchmark."
    )
    p.add_argument("--seq-length", type=int, default=200)
    p.add_argument("--repeat", type=int, default=3)
    p.add_argument(
        "--mode", choices=["search", "filter", "both"], default="both"
    )
    p.add_argument(
        "--verbose", action="store_true", help="Print progress updates."
    )
    return p.parse_args()


def main() -> None:
    args = parse_args()

    outdir = Path(args.outdir)
    datadir = Path(args.datadir)
    ensure_dir(outdir)

    searchers = [x.strip() for x in args.searchers.split(",") if x.strip()]
    unknown = set(searchers) - set(SEARCHERS)
    if unknown:
        raise SystemExit(f"Unknown searchers: {sorted(unknown)}")

    search_rows: list[dict[str, Any]] = []
    filter_rows: list[dict[str, Any]] = []

    if args.mode in {"search", "both"}:
        for n in [int(x) for x in args.text_sizes.split(",") if x.strip()]:
            if args.verbose:
                print(f"search: text_len={n + 1}", flush=True)
            search_rows.extend(
                benchmark_searchers(n, n // 2, searchers, args.repeat)
            )

    if args.mode in {"filter", "both"}:
        patterns = ["TAGC", "GATTACA", "ACGTACGTAC", "TTTTTTTT"]
        for rows in [int(x) for x in args.rows.split(",") if x.strip()]:
            data_file = datadir / f"records_{rows}.csv"
            generate_record_file(data_file, rows, args.seq_length)
            for workers in [
                int(x) for x in args.workers.split(",") if x.strip()
            ]:
                if args.verbose:
                    print(f"filter: rows={rows} workers={workers}",
                          flush=True)
                filter_rows.append(
                    benchmark_filter(data_file, rows, workers, patterns)
                )

    write_csv(outdir / "results_search.csv", search_rows)
    write_csv(outdir / "results_filter.csv", filter_rows)

    print(f"Wrote results to: {outdir}", flush=True)


if __name__ == "__main__":
    main()
