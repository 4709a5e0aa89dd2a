"""Benchmark: trace decode throughput against an in-memory resolver."""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gitgate_access.provenance.decoder import TraceDecoder
from gitgate_access.provenance.resolver import RuleInfo

_ITERATIONS: int = 10_000
_RULES: int = 40


class _StaticResolver:
    def __init__(self, count: int) -> None:
        self._infos = {i: RuleInfo(i, "gitolite.conf", i, f"    RW+ = user{i}") for i in range(1, count + 1)}

    def resolve(self, ids):
        return {i: self._infos[i] for i in ids if i in self._infos}


def _make_trail(count: int) -> str:
    tokens = [f" {i} dr" for i in range(1, count)]
    return "".join(tokens) + f" {count} drpA"


def bench_trace_decode_throughput() -> dict[str, object]:
    """Benchmark TraceDecoder.render() over a trail touching every rule.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, memory_peak_mb.
    """
    decoder = TraceDecoder(_StaticResolver(_RULES))
    trail = _make_trail(_RULES)

    start = time.perf_counter()
    for _ in range(_ITERATIONS):
        list(decoder.render(trail))
    total = time.perf_counter() - start

    result: dict[str, object] = {
        "operation": "trace_decode_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_trace_decode] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_trace_decode_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "decode_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
