#!/usr/bin/env python3
"""
Render simulation snapshots as 3D scatter plots.

Reads every ``<stem>.csv.<n>`` file in a snapshot directory and saves one
PNG per snapshot into ./build/, with marker size scaled by body radius.

Usage:
    uv run python scripts/plot_snapshots.py SNAPSHOT_DIR [--every N]

Examples:
    uv run python scripts/plot_snapshots.py cluster
    uv run python scripts/plot_snapshots.py cluster --every 10 --fixed-limits
"""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

# Output directory
BUILD_DIR = Path(__file__).parent.parent / "build"


def ensure_build_dir():
    """Create build directory if it doesn't exist."""
    BUILD_DIR.mkdir(exist_ok=True)


def snapshot_files(directory: Path) -> list[Path]:
    """Snapshot files in sequence order."""
    files = [p for p in directory.iterdir() if p.suffix[1:].isdigit()]
    return sorted(files, key=lambda p: int(p.suffix[1:]))


def load_snapshot(path: Path) -> np.ndarray:
    """Load a snapshot as an (n, 4) array of x, y, z, radius."""
    return np.atleast_2d(np.loadtxt(path, delimiter=",", skiprows=1))


def marker_sizes(radii: np.ndarray) -> np.ndarray:
    """Scale radii into a readable range of marker areas."""
    if radii.max() == 0:
        return np.full_like(radii, 4.0)
    return 2.0 + 30.0 * radii / radii.max()


def visualize(data: np.ndarray, title: str, ax, limits=None):
    """Draw one snapshot on a 3D axis."""
    ax.scatter(
        data[:, 0],
        data[:, 1],
        data[:, 2],
        s=marker_sizes(data[:, 3]),
        c="steelblue",
        alpha=0.7,
        edgecolors="none",
    )
    if limits is not None:
        lower, upper = limits
        ax.set_xlim(lower[0], upper[0])
        ax.set_ylim(lower[1], upper[1])
        ax.set_zlim(lower[2], upper[2])
    ax.set_title(title, fontsize=12, fontweight="bold")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")


def main():
    parser = argparse.ArgumentParser(description="Plot n-body snapshots")
    parser.add_argument("directory", type=Path, help="Snapshot directory")
    parser.add_argument("--every", type=int, default=1, help="Plot every N-th snapshot")
    parser.add_argument(
        "--fixed-limits",
        action="store_true",
        help="Use the first snapshot's bounds for every frame",
    )
    args = parser.parse_args()

    files = snapshot_files(args.directory)[:: args.every]
    if not files:
        print(f"No snapshots found in {args.directory}")
        return

    ensure_build_dir()
    print(f"Plotting {len(files)} snapshot(s) into {BUILD_DIR}/")

    limits = None
    for path in files:
        data = load_snapshot(path)
        if args.fixed_limits and limits is None:
            limits = (data[:, :3].min(axis=0), data[:, :3].max(axis=0))

        fig = plt.figure(figsize=(8, 8))
        ax = fig.add_subplot(projection="3d")
        visualize(data, f"{path.name} ({len(data)} bodies)", ax, limits)

        filepath = BUILD_DIR / f"{path.name.replace('.', '_')}.png"
        fig.savefig(filepath, dpi=150, bbox_inches="tight", facecolor="white")
        plt.close(fig)
        print(f"  Saved: {filepath}")


if __name__ == "__main__":
    main()
