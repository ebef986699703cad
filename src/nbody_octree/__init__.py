"""
nbody-octree: Barnes-Hut n-body gravity simulation in Python.

This package approximates the gravitational dynamics of many bodies by
grouping distant bodies with an octree, and advances them with a
velocity-Verlet integrator.

Available components:
- spatial: Octree construction (Barnes-Hut tree)
- forces: Opening-angle force evaluation
- collisions: Elastic collision pass
- integrator: Velocity-Verlet step
- simulation: Iteration driver with periodic snapshots
- formats: Body files and snapshots
- generators: Random initial conditions
"""

__version__ = "0.1.0"

# Shared types
from .types import (
    Body,
    BodyStore,
    Event,
    EventType,
    Region,
    kinetic_energy,
    total_momentum,
)

# Configuration
from .config import SimulationConfig

# Spatial data structures
from .spatial import Internal, Leaf, Octree, OctreeNode, build_octree

# Physics
from .collisions import detect_collisions, elastic_collision, resolve_collisions
from .forces import GRAVITATIONAL_CONSTANT, accumulate_acceleration, evaluate_forces
from .integrator import integrate, verlet_step

# Driver
from .simulation import Simulation

# File formats
from .formats import (
    SnapshotWriter,
    format_bodies,
    format_snapshot,
    parse_bodies,
    read_bodies,
    write_bodies,
    write_snapshot,
)

# Initial conditions
from .generators import annulus, spherical_shell, uniform_cube

# Errors
from .validation import (
    BodyFileWarning,
    DegenerateGeometryError,
    InvalidInputError,
    InvalidRegionError,
    NBodyError,
    NumericalError,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Body",
    "BodyStore",
    "Region",
    "EventType",
    "Event",
    "total_momentum",
    "kinetic_energy",
    # Configuration
    "SimulationConfig",
    # Spatial data structures
    "Leaf",
    "Internal",
    "OctreeNode",
    "Octree",
    "build_octree",
    # Physics
    "GRAVITATIONAL_CONSTANT",
    "accumulate_acceleration",
    "evaluate_forces",
    "elastic_collision",
    "resolve_collisions",
    "detect_collisions",
    "verlet_step",
    "integrate",
    # Driver
    "Simulation",
    # File formats
    "format_bodies",
    "parse_bodies",
    "read_bodies",
    "write_bodies",
    "format_snapshot",
    "write_snapshot",
    "SnapshotWriter",
    # Initial conditions
    "uniform_cube",
    "annulus",
    "spherical_shell",
    # Errors
    "NBodyError",
    "InvalidInputError",
    "InvalidRegionError",
    "DegenerateGeometryError",
    "NumericalError",
    "BodyFileWarning",
]
