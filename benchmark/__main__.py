"""python -m benchmark [--sqlite] [--csv PATH] [N ...]"""

import argparse
import logging
from pathlib import Path

from .benchmark import BENCHMARK_COUNTS, run_benchmark


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark food index build and search")
    parser.add_argument("counts", nargs="*", type=int, default=list(BENCHMARK_COUNTS))
    parser.add_argument("--sqlite", action="store_true", help="SQLite snapshots instead of JSON")
    parser.add_argument("--csv", default="benchmark_results.csv", help="CSV output path")
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING)
    out = run_benchmark(tuple(args.counts), use_sqlite=args.sqlite, csv_path=Path(args.csv))
    for row in out["benchmark_results"]:
        print(row)
    print(out["summary"])
    print("Results written to", args.csv)


if __name__ == "__main__":
    main()
