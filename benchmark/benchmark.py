"""
Food index benchmarking.

Measures: index build time, snapshot size, search latency, and search
latency while a rebuild of the same locale is running (searches must keep
answering from the previous version). Uses synthetic records in a temp
directory; never touches a real snapshot store.
"""

import csv
import random
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from server import FoodIndexServer, FoodRecord
from sources import InMemoryRecordSource

BENCHMARK_COUNTS = (1000, 10000, 50000)
SEARCH_RUNS = 50

_WORDS = (
    "apple banana bread butter cheese chicken chocolate coffee cream egg fish "
    "juice lamb milk orange pasta pie pork potato rice salad sauce soup steak "
    "sugar tea tomato yoghurt boiled fried grilled roast baked raw low fat whole "
    "semi skimmed sweet sour spicy plain smoked frozen canned dried fresh"
).split()

_QUERIES = ("aple pie", "chiken soup", "semi skimmed milk", "fried rice", "choclate cake", "tomato")


def synthetic_records(count: int, locale_id: str = "en", seed: int = 7) -> List[FoodRecord]:
    """count records of 2-5 random food words each, deterministic for a seed."""
    rng = random.Random(seed)
    return [
        FoodRecord(
            food_id=f"F{i:06d}",
            locale_id=locale_id,
            description=" ".join(rng.sample(_WORDS, rng.randint(2, 5))),
            popularity_rank=rng.randint(0, 100),
        )
        for i in range(count)
    ]


def _search_latency(server: FoodIndexServer, runs: int = SEARCH_RUNS) -> float:
    t0 = time.perf_counter()
    for i in range(runs):
        server.search("en", _QUERIES[i % len(_QUERIES)], 20)
    return (time.perf_counter() - t0) / runs


def _search_during_rebuild(server: FoodIndexServer, threads: int = 8) -> Tuple[float, int, List[int]]:
    """Average latency, error count and versions observed while a rebuild runs."""
    latencies: List[float] = []
    versions: List[int] = []
    errors = 0
    lock = threading.Lock()
    stop = threading.Event()

    def worker(n: int) -> None:
        nonlocal errors
        i = n
        while not stop.is_set():
            t0 = time.perf_counter()
            try:
                res = server.search("en", _QUERIES[i % len(_QUERIES)], 20)
            except Exception:
                with lock:
                    errors += 1
                continue
            with lock:
                latencies.append(time.perf_counter() - t0)
                if res.version is not None:
                    versions.append(res.version)
            i += 1

    pool = [threading.Thread(target=worker, args=(n,), daemon=True) for n in range(threads)]
    for t in pool:
        t.start()
    server.request_rebuild("en")
    server.coordinator.wait_idle()
    stop.set()
    for t in pool:
        t.join()
    avg = sum(latencies) / len(latencies) if latencies else 0.0
    return avg, errors, sorted(set(versions))


def run_benchmark(
    counts: Tuple[int, ...] = BENCHMARK_COUNTS,
    use_sqlite: bool = False,
    csv_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """Run every size in an isolated temp directory; returns per-size rows and a summary."""
    results: List[Dict[str, Any]] = []
    for count in counts:
        row: Dict[str, Any] = {"num_records": count, "use_sqlite": use_sqlite}
        with tempfile.TemporaryDirectory() as tmp:
            source = InMemoryRecordSource(synthetic_records(count))
            server = FoodIndexServer(source, storage_dir=Path(tmp), use_sqlite_snapshots=use_sqlite)
            try:
                t0 = time.perf_counter()
                server.rebuild_and_wait(["en"])
                row["build_sec"] = round(time.perf_counter() - t0, 4)
                status = server.rebuild_status("en")
                row["version"] = status.version
                row["snapshot_bytes"] = sum(p.stat().st_size for p in Path(tmp).rglob("*") if p.is_file())
                row["search_ms"] = round(_search_latency(server) * 1000, 3)
                avg, errors, versions = _search_during_rebuild(server)
                row["search_during_rebuild_ms"] = round(avg * 1000, 3)
                row["search_errors"] = errors
                row["versions_observed"] = " ".join(str(v) for v in versions)
            finally:
                server.close()
        results.append(row)

    largest = max(results, key=lambda r: r["num_records"]) if results else None
    summary = "No runs."
    if largest:
        summary = (
            f"N={largest['num_records']}: build {largest['build_sec']:.2f} s, "
            f"search {largest['search_ms']:.2f} ms, "
            f"search during rebuild {largest['search_during_rebuild_ms']:.2f} ms "
            f"({largest['search_errors']} errors)."
        )
    out: Dict[str, Any] = {
        "benchmark_results": results,
        "dataset_sizes": list(counts),
        "summary": summary,
    }
    if csv_path:
        fieldnames = [
            "num_records", "use_sqlite", "build_sec", "version", "snapshot_bytes",
            "search_ms", "search_during_rebuild_ms", "search_errors", "versions_observed",
        ]
        with open(csv_path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
            w.writeheader()
            w.writerows(results)
    return out
