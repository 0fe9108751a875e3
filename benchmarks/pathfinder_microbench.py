#!/usr/bin/env python3
"""
Pathfinder Micro-benchmark Harness.

Benchmarks `Pathfinder.find_path()` and `Pathfinder.find_all_reachable()`
on deterministic synthetic grids with randomly closed cells.
"""

from __future__ import annotations

import argparse
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import math
from pathlib import Path
import random
import statistics
import sys
import time
import tracemalloc
from typing import Any, Callable, Optional

# Ensure repository root is importable when executing this file directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from wayfinder.core import NodeGraph, Pathfinder, SearchStatus
from wayfinder.grid import GridMover, NodeType, build_grid_graph, get_node_type


@dataclass(frozen=True)
class ScenarioConfig:
    """Benchmark scenario configuration."""

    grid_size: int
    closed_ratio: float
    query_count: int
    reach_budget: float
    warmup_runs: int
    measured_runs: int
    seed: int


def build_synthetic_grid(grid_size: int, closed_ratio: float, seed: int) -> NodeGraph:
    """
    Build a deterministic grid with a fraction of cells closed.

    The two opposite corners are always left open so the longest query
    has valid endpoints.
    """
    rng = random.Random(seed)
    corners = {(0, 0), (grid_size - 1, grid_size - 1)}
    closed = [
        (x, y)
        for y in range(grid_size)
        for x in range(grid_size)
        if (x, y) not in corners and rng.random() < closed_ratio
    ]
    return build_grid_graph(grid_size, grid_size, closed=closed)


def generate_queries(
    graph: NodeGraph,
    query_count: int,
    seed: int,
) -> list[tuple[tuple[int, int], tuple[int, int]]]:
    """Pick deterministic (start, target) pairs among open cells."""
    rng = random.Random(seed + 1)
    open_cells = [n for n in graph if get_node_type(graph, n) == NodeType.OPEN]
    if len(open_cells) < 2:
        return []

    queries = []
    for _ in range(query_count):
        start, target = rng.sample(open_cells, 2)
        queries.append((start, target))
    return queries


def percentile(values: list[float], percentile_rank: float) -> float:
    """Compute percentile with linear interpolation."""
    if not values:
        return 0.0
    ordered = sorted(values)
    if len(ordered) == 1:
        return ordered[0]

    position = (len(ordered) - 1) * percentile_rank
    lower = math.floor(position)
    upper = math.ceil(position)
    if lower == upper:
        return ordered[lower]

    fraction = position - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def summarize(values: list[float]) -> dict[str, float]:
    """Min/max/mean/median/p95 summary of a sample."""
    if not values:
        return {"min": 0.0, "max": 0.0, "mean": 0.0, "median": 0.0, "p95": 0.0}
    return {
        "min": min(values),
        "max": max(values),
        "mean": statistics.mean(values),
        "median": statistics.median(values),
        "p95": percentile(values, 0.95),
    }


def measure(
    operation: Callable[[], Any],
    warmup_runs: int,
    measured_runs: int,
) -> tuple[list[float], list[float], Any]:
    """Time an operation, returning latencies (ms), peak memory (MiB) and the last result."""
    for _ in range(warmup_runs):
        operation()

    latencies_ms: list[float] = []
    peak_memory_mib: list[float] = []
    last_result: Any = None

    for _ in range(measured_runs):
        tracemalloc.start()
        started = time.perf_counter()
        last_result = operation()
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        _, peak_bytes = tracemalloc.get_traced_memory()
        tracemalloc.stop()

        latencies_ms.append(elapsed_ms)
        peak_memory_mib.append(peak_bytes / (1024.0 * 1024.0))

    return latencies_ms, peak_memory_mib, last_result


def run_scenario(config: ScenarioConfig) -> dict[str, Any]:
    """Run one benchmark scenario and return structured metrics."""
    graph = build_synthetic_grid(config.grid_size, config.closed_ratio, config.seed)
    queries = generate_queries(graph, config.query_count, config.seed)
    finder = Pathfinder(graph)
    mover = GridMover(graph)

    def run_paths():
        return [finder.find_path(mover, start, target) for start, target in queries]

    def run_reach():
        return finder.find_all_reachable(mover, (0, 0), config.reach_budget)

    path_latencies, path_memory, path_results = measure(
        run_paths, config.warmup_runs, config.measured_runs
    )
    reach_latencies, reach_memory, reachable = measure(
        run_reach, config.warmup_runs, config.measured_runs
    )

    status_counts = Counter(result.status.value for result in path_results or [])
    found = [result for result in path_results or [] if result.status == SearchStatus.FOUND]

    return {
        "scenario": {
            "grid_size": config.grid_size,
            "closed_ratio": config.closed_ratio,
            "queries": config.query_count,
            "reach_budget": config.reach_budget,
            "seed": config.seed,
            "warmup_runs": config.warmup_runs,
            "measured_runs": config.measured_runs,
        },
        "graph": {
            "nodes": len(graph),
            "edges": graph.edge_count,
        },
        "find_path": {
            "latency_ms": summarize(path_latencies),
            "peak_memory_mib": summarize(path_memory),
            "status_counts": dict(status_counts),
            "mean_nodes_expanded": (
                statistics.mean(r.nodes_expanded for r in found) if found else 0.0
            ),
        },
        "find_all_reachable": {
            "latency_ms": summarize(reach_latencies),
            "peak_memory_mib": summarize(reach_memory),
            "reachable_nodes": len(reachable or ()),
        },
    }


def print_human_summary(result: dict[str, Any]) -> None:
    """Print compact human-readable summary for CLI runs."""
    scenario = result["scenario"]
    graph = result["graph"]
    paths = result["find_path"]
    reach = result["find_all_reachable"]

    print(
        f"[Scenario] grid={scenario['grid_size']}x{scenario['grid_size']}, "
        f"closed={scenario['closed_ratio']:.0%}, queries={scenario['queries']}, "
        f"runs={scenario['measured_runs']}"
    )
    print(f"  Graph: nodes={graph['nodes']}, edges={graph['edges']}")
    print(
        "  find_path latency(ms): "
        f"mean={paths['latency_ms']['mean']:.2f}, median={paths['latency_ms']['median']:.2f}, "
        f"p95={paths['latency_ms']['p95']:.2f}"
    )
    print(
        f"  find_path outcomes: {paths['status_counts']}, "
        f"mean expanded={paths['mean_nodes_expanded']:.1f}"
    )
    print(
        "  find_all_reachable latency(ms): "
        f"mean={reach['latency_ms']['mean']:.2f}, median={reach['latency_ms']['median']:.2f}, "
        f"p95={reach['latency_ms']['p95']:.2f}, nodes={reach['reachable_nodes']}"
    )


def evaluate_threshold_warnings(
    result: dict[str, Any],
    warn_mean_latency_ms: Optional[float],
    warn_p95_latency_ms: Optional[float],
) -> list[str]:
    """Evaluate optional warning thresholds for one scenario."""
    warnings: list[str] = []
    grid_size = result["scenario"]["grid_size"]

    for operation in ("find_path", "find_all_reachable"):
        latency = result[operation]["latency_ms"]
        if warn_mean_latency_ms is not None and latency["mean"] > warn_mean_latency_ms:
            warnings.append(
                f"grid={grid_size} {operation}: mean latency {latency['mean']:.2f} ms "
                f"exceeds {warn_mean_latency_ms:.2f} ms"
            )
        if warn_p95_latency_ms is not None and latency["p95"] > warn_p95_latency_ms:
            warnings.append(
                f"grid={grid_size} {operation}: p95 latency {latency['p95']:.2f} ms "
                f"exceeds {warn_p95_latency_ms:.2f} ms"
            )

    return warnings


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark Pathfinder searches.")
    parser.add_argument(
        "--grid-sizes",
        nargs="+",
        type=int,
        default=[32, 128],
        help="Grid sizes to benchmark (N produces N*N nodes).",
    )
    parser.add_argument(
        "--closed-ratio",
        type=float,
        default=0.2,
        help="Fraction of cells closed at random.",
    )
    parser.add_argument(
        "--queries",
        type=int,
        default=20,
        help="Shortest-path queries per measured run.",
    )
    parser.add_argument(
        "--reach-budget",
        type=float,
        default=15.0,
        help="Cost budget for the reachability query from (0, 0).",
    )
    parser.add_argument(
        "--warmup-runs",
        type=int,
        default=1,
        help="Warmup iterations per scenario.",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=3,
        help="Measured iterations per scenario.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=7,
        help="Random seed for deterministic fixture generation.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="",
        help="Optional path to write JSON results.",
    )
    parser.add_argument(
        "--warn-mean-latency-ms",
        type=float,
        default=None,
        help="Optional warning threshold for mean latency per operation.",
    )
    parser.add_argument(
        "--warn-p95-latency-ms",
        type=float,
        default=None,
        help="Optional warning threshold for p95 latency per operation.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when any warning threshold is exceeded.",
    )
    args = parser.parse_args()

    started_at = datetime.now(timezone.utc).isoformat()
    results: list[dict[str, Any]] = []
    warnings: list[str] = []

    for grid_size in args.grid_sizes:
        scenario = ScenarioConfig(
            grid_size=grid_size,
            closed_ratio=args.closed_ratio,
            query_count=args.queries,
            reach_budget=args.reach_budget,
            warmup_runs=args.warmup_runs,
            measured_runs=args.runs,
            seed=args.seed,
        )
        result = run_scenario(scenario)
        results.append(result)
        print_human_summary(result)
        warnings.extend(
            evaluate_threshold_warnings(
                result=result,
                warn_mean_latency_ms=args.warn_mean_latency_ms,
                warn_p95_latency_ms=args.warn_p95_latency_ms,
            )
        )

    if warnings:
        print("[Warnings]")
        for warning in warnings:
            print(f"  - {warning}")

    payload = {
        "benchmark": "pathfinder_microbench",
        "started_at": started_at,
        "python": {
            "version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        },
        "thresholds": {
            "warn_mean_latency_ms": args.warn_mean_latency_ms,
            "warn_p95_latency_ms": args.warn_p95_latency_ms,
            "strict": args.strict,
        },
        "results": results,
        "warnings": warnings,
    }

    if args.output:
        with open(args.output, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        print(f"[Output] wrote JSON results to {args.output}")
    else:
        print(json.dumps(payload, indent=2))

    if args.strict and warnings:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
