"""
Command-line front end.

Usage:
    nbody-octree run FILE TIMESTEP ITERATIONS
    nbody-octree generate COUNT NAME TIMESTEP ITERATIONS [--distribution cube]

Examples:
    nbody-octree generate 500 cluster.csv 1000 2000 --seed 7
    nbody-octree run cluster.csv 1000 2000 --theta 0.5

Snapshots are written every --snapshot-interval iterations into a
directory named after the body file (``cluster/cluster.csv.0``, ...).
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .config import SimulationConfig
from .formats import SnapshotWriter, read_bodies, write_bodies
from .generators import GENERATORS
from .simulation import Simulation
from .types import BodyStore
from .validation import NBodyError, validate_count

logger = logging.getLogger(__name__)


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("timestep", type=float, help="Integration time step")
    parser.add_argument("iterations", type=int, help="Number of iterations")
    parser.add_argument("--theta", type=float, default=0.3, help="Opening-angle threshold (0 = exact)")
    parser.add_argument("--gravity", type=float, default=6.67e-11, help="Gravitational constant")
    parser.add_argument(
        "--snapshot-interval",
        type=int,
        default=100,
        help="Iterations between snapshots (0 disables)",
    )
    parser.add_argument("--output-dir", help="Snapshot directory (default: body file name without suffix)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nbody-octree",
        description="Barnes-Hut n-body simulation with velocity-Verlet integration",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Simulate bodies read from a body file")
    run.add_argument("file", help="Body file to read")
    _add_run_options(run)

    generate = sub.add_parser("generate", help="Generate bodies, save them, then simulate")
    generate.add_argument("count", type=int, help="Number of bodies")
    generate.add_argument("name", help="Body file to write the initial conditions to")
    _add_run_options(generate)
    generate.add_argument("--distribution", choices=sorted(GENERATORS), default="cube")
    generate.add_argument("--seed", type=int, help="Random seed for reproducible bodies")

    return parser


def snapshot_directory(path: Path, output_dir: Optional[str] = None) -> Path:
    """Directory snapshots of a run started from ``path`` are written to."""
    if output_dir:
        return Path(output_dir)
    directory = path.with_suffix("")
    if directory == path:
        directory = path.with_name(f"{path.name}_snapshots")
    return directory


def load_store(args: argparse.Namespace) -> tuple[BodyStore, Path]:
    """Read or generate the initial bodies; return them with the body file path."""
    if args.command == "run":
        path = Path(args.file)
        return read_bodies(path), path

    count = validate_count(args.count)
    path = Path(args.name)
    store = GENERATORS[args.distribution](count, seed=args.seed)
    write_bodies(store, path)
    logger.info("wrote %d generated bodies to %s", count, path)
    return store, path


def simulate(args: argparse.Namespace) -> Simulation:
    """Run a simulation from parsed arguments."""
    config = SimulationConfig(
        gravitational_constant=args.gravity,
        theta=args.theta,
        timestep=args.timestep,
        iterations=args.iterations,
        snapshot_interval=args.snapshot_interval,
    )
    store, path = load_store(args)
    writer = SnapshotWriter(snapshot_directory(path, args.output_dir), path.stem)
    return Simulation(store, config, snapshot_writer=writer).run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    start = time.perf_counter()
    try:
        sim = simulate(args)
    except (NBodyError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start

    print(
        f"Simulated {len(sim.store)} bodies for {sim.iteration} iterations "
        f"({sim.snapshots_written} snapshot(s)). Elapsed time: {elapsed:.3f} seconds"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
