#!/usr/bin/env python3
"""
Benchmark force evaluation against the opening-angle threshold.

For each body count and theta, times one tree build plus force pass and
reports the relative error against theta = 0 (exact pairwise forces).

Usage:
    uv run python scripts/benchmark_theta.py [--counts N,...] [--thetas T,...]

Examples:
    uv run python scripts/benchmark_theta.py
    uv run python scripts/benchmark_theta.py --counts 1000,5000 --thetas 0.3,0.7
    uv run python scripts/benchmark_theta.py --distribution annulus --output results.json
"""

from __future__ import annotations

import argparse
import json
import time
from typing import Any

import numpy as np

from nbody_octree import BodyStore, Octree, evaluate_forces
from nbody_octree.generators import GENERATORS


def force_pass(store: BodyStore, theta: float) -> tuple[np.ndarray, float]:
    """Build a tree and evaluate forces; return accelerations and elapsed time."""
    for body in store:
        body.next_acceleration = np.zeros(3)

    start = time.perf_counter()
    tree = Octree.from_store(store)
    evaluate_forces(tree.root, theta=theta)
    elapsed = time.perf_counter() - start

    return np.array([body.next_acceleration for body in store]), elapsed


def benchmark(count: int, thetas: list[float], distribution: str, seed: int) -> list[dict[str, Any]]:
    """Benchmark every theta on one generated body set."""
    store = GENERATORS[distribution](count, seed=seed)
    exact, exact_time = force_pass(store, 0.0)
    scale = np.linalg.norm(exact, axis=1).sum()

    results = [{"count": count, "theta": 0.0, "time_seconds": exact_time, "relative_error": 0.0}]
    for theta in thetas:
        approx, elapsed = force_pass(store, theta)
        error = np.linalg.norm(approx - exact, axis=1).sum() / scale
        results.append(
            {
                "count": count,
                "theta": theta,
                "time_seconds": elapsed,
                "relative_error": float(error),
            }
        )
    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Barnes-Hut accuracy against theta")
    parser.add_argument("--counts", default="250,1000", help="Comma-separated body counts")
    parser.add_argument("--thetas", default="0.3,0.5,1.0", help="Comma-separated theta values")
    parser.add_argument("--distribution", choices=sorted(GENERATORS), default="cube")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output", help="Output JSON file for results")

    args = parser.parse_args()

    counts = [int(c) for c in args.counts.split(",")]
    thetas = [float(t) for t in args.thetas.split(",")]

    print(f"\nBenchmarking {args.distribution} bodies, thetas: {thetas}")
    print("=" * 60)
    print(f"{'Bodies':>8s}{'Theta':>8s}{'Time (s)':>14s}{'Rel. error':>16s}")
    print("-" * 60)

    results = []
    for count in counts:
        for row in benchmark(count, thetas, args.distribution, args.seed):
            print(
                f"{row['count']:>8d}{row['theta']:>8.2f}"
                f"{row['time_seconds']:>14.4f}{row['relative_error']:>16.2e}"
            )
            results.append(row)

    if args.output and results:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
