"""Benchmark: rule registry scan latency, p50/p99 per lookup.

Scans a 20k-record registry for ids spread across the file, so each
lookup reads up to the last requested record and stops there.
"""
from __future__ import annotations

import json
import sys
import tempfile
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gitgate_access.provenance.registry import RuleRegistryScanner

_WARMUP: int = 20
_ITERATIONS: int = 500
_RECORDS: int = 20_000
_REQUESTED: list[int] = [7, 4_096, 15_000]


def _write_registry(path: Path) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        for rule_id in range(1, _RECORDS + 1):
            fh.write(f"{rule_id} gitolite.conf {rule_id * 2}\n")


def bench_registry_scan_latency() -> dict[str, object]:
    """Benchmark RuleRegistryScanner.scan() per-call latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    with tempfile.TemporaryDirectory() as tmp:
        registry = Path(tmp) / "rule_info"
        _write_registry(registry)
        scanner = RuleRegistryScanner(registry)

        for _ in range(_WARMUP):
            scanner.scan(_REQUESTED)

        latencies_ms: list[float] = []
        for _ in range(_ITERATIONS):
            t0 = time.perf_counter()
            scanner.scan(_REQUESTED)
            latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "registry_scan_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_registry_scan] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_registry_scan_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "registry_scan_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
