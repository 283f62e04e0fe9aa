"""Food index benchmarking: build time, search latency, search during rebuild."""

from .benchmark import run_benchmark, synthetic_records, BENCHMARK_COUNTS

__all__ = ["run_benchmark", "synthetic_records", "BENCHMARK_COUNTS"]
