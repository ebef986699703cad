"""
Body file and snapshot formats.

This module reads and writes the two text formats used by the simulation:
- Body files: full body state, used to start or resume a run
- Snapshots: positions and radii written periodically during a run

Example usage:
    from nbody_octree.formats import read_bodies, write_bodies, SnapshotWriter

    store = read_bodies("cluster.csv")
    writer = SnapshotWriter("cluster", "cluster")
    writer(store)  # writes cluster/cluster.csv.0
"""

from .bodies import format_bodies, parse_bodies, read_bodies, write_bodies
from .snapshot import SNAPSHOT_HEADER, SnapshotWriter, format_snapshot, write_snapshot

__all__ = [
    # Body files
    "format_bodies",
    "parse_bodies",
    "read_bodies",
    "write_bodies",
    # Snapshots
    "SNAPSHOT_HEADER",
    "SnapshotWriter",
    "format_snapshot",
    "write_snapshot",
]
