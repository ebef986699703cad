"""
Snapshot output.

A snapshot lists every body's position and radius under a fixed header,
ready for point-cloud viewers:

    x coord,y coord,z coord,scalar
    px,py,pz,radius
    ...
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

from ..types import Body

PathLike = Union[str, Path]

SNAPSHOT_HEADER = "x coord,y coord,z coord,scalar"


def format_snapshot(bodies: Iterable[Body]) -> str:
    """Format bodies as snapshot text."""
    lines = [SNAPSHOT_HEADER]
    for body in bodies:
        values = [*body.position, body.radius]
        lines.append(",".join(repr(float(v)) for v in values))
    return "\n".join(lines) + "\n"


def write_snapshot(bodies: Iterable[Body], path: PathLike) -> Path:
    """Write a snapshot file and return its path."""
    path = Path(path)
    path.write_text(format_snapshot(bodies))
    return path


class SnapshotWriter:
    """
    Writes numbered snapshots into a directory.

    The n-th call writes ``<directory>/<stem>.csv.<n>``, counting from 0.
    The directory is created on first use.

    Example:
        writer = SnapshotWriter("run1", "run1")
        sim = Simulation(store, config, snapshot_writer=writer)
    """

    def __init__(self, directory: PathLike, stem: str) -> None:
        self.directory = Path(directory)
        self.stem = stem
        self.count = 0

    def path_for(self, number: int) -> Path:
        """Path of the snapshot with a given sequence number."""
        return self.directory / f"{self.stem}.csv.{number}"

    def __call__(self, bodies: Iterable[Body]) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = write_snapshot(bodies, self.path_for(self.count))
        self.count += 1
        return path


__all__ = [
    "SNAPSHOT_HEADER",
    "format_snapshot",
    "write_snapshot",
    "SnapshotWriter",
]
