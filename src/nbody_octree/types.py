"""
Common types for the n-body simulation.

This module provides the fundamental types shared by every stage:
- Body: Point mass with position, velocity and acceleration state
- BodyStore: Canonical, index-addressed collection of bodies
- Region: Axis-aligned box with the bodies it contains
- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterable, Iterator, Optional, Sequence, TypedDict, Union

import numpy as np

from .validation import InvalidInputError, InvalidRegionError, validate_mass, validate_radius

VectorLike = Union[Sequence[float], np.ndarray]

# Number of children of an internal octree node
OCTANTS = 8

# Path label of the root region. Child paths append three bits per level,
# so the leading 1 keeps paths of different depth distinct.
ROOT_PATH = 1


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: Iterations have begun
    - tick: Fired once per iteration
    - snapshot: A snapshot of the body store was written
    - end: The run finished or was stopped
    """

    start = 0
    tick = 1
    snapshot = 2
    end = 3


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    iteration: int
    time: float
    path: Optional[Any]


def as_vector(value: Optional[VectorLike]) -> np.ndarray:
    """Coerce a 3-sequence to a float64 vector (zeros for None)."""
    if value is None:
        return np.zeros(3, dtype=np.float64)
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (3,):
        raise InvalidInputError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


@dataclass(eq=False)
class Body:
    """
    A body with position, velocity and mass for gravity calculations.

    Attributes:
        position: Position vector
        velocity: Velocity vector
        acceleration: Acceleration used by the previous step ("old")
        next_acceleration: Accumulator filled by the force evaluator
        mass: Mass (> 0)
        radius: Collision radius (>= 0)
        index: Slot in the BodyStore
    """

    position: np.ndarray
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    mass: float = 1.0
    radius: float = 0.0
    index: int = -1
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))
    next_acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.position = as_vector(self.position)
        self.velocity = as_vector(self.velocity)
        self.acceleration = as_vector(self.acceleration)
        self.next_acceleration = as_vector(self.next_acceleration)
        self.mass = validate_mass(self.mass)
        self.radius = validate_radius(self.radius)
        self.index = int(self.index)

    def copy(self) -> Body:
        """Return an independent copy of this body."""
        return Body(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            mass=self.mass,
            radius=self.radius,
            index=self.index,
            acceleration=self.acceleration.copy(),
            next_acceleration=self.next_acceleration.copy(),
        )

    def __repr__(self) -> str:
        x, y, z = self.position
        return f"Body(index={self.index}, position=({x:.4g}, {y:.4g}, {z:.4g}), mass={self.mass:.4g})"


class BodyStore:
    """
    Flat collection of bodies addressed by stable integer index.

    Body ``i`` always lives in slot ``i``. The store is the only state that
    survives from one iteration to the next; the integrator writes updated
    bodies back with sync().

    Example:
        store = BodyStore([
            Body(position=(0, 0, 0), mass=1e30),
            Body(position=(1e11, 0, 0), mass=1e30),
        ])
        lower, upper = store.bounds(padding=1.0)
    """

    def __init__(self, bodies: Iterable[Body] = ()) -> None:
        """
        Initialize store.

        Bodies with index -1 are assigned their slot. Any other index must
        match the body's position in the sequence.

        Raises:
            InvalidInputError: If an index does not match its slot
        """
        self._bodies: list[Body] = []
        for slot, body in enumerate(bodies):
            if body.index == -1:
                body.index = slot
            elif body.index != slot:
                raise InvalidInputError(f"body index {body.index} does not match its slot {slot}")
            self._bodies.append(body)

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def __getitem__(self, index: int) -> Body:
        return self._bodies[index]

    def __repr__(self) -> str:
        return f"BodyStore({len(self._bodies)} bodies)"

    def sync(self, body: Body) -> None:
        """Write a body back into the slot named by its index."""
        if not 0 <= body.index < len(self._bodies):
            raise InvalidInputError(f"body index {body.index} out of bounds [0, {len(self._bodies)})")
        self._bodies[body.index] = body

    def copy(self) -> BodyStore:
        """Return a deep copy of the store."""
        return BodyStore(body.copy() for body in self._bodies)

    def positions(self) -> np.ndarray:
        """Positions as an (n, 3) array."""
        return np.array([b.position for b in self._bodies], dtype=np.float64).reshape(-1, 3)

    def velocities(self) -> np.ndarray:
        """Velocities as an (n, 3) array."""
        return np.array([b.velocity for b in self._bodies], dtype=np.float64).reshape(-1, 3)

    def masses(self) -> np.ndarray:
        """Masses as an (n,) array."""
        return np.array([b.mass for b in self._bodies], dtype=np.float64)

    def bounds(self, padding: float = 1.0) -> tuple[np.ndarray, np.ndarray]:
        """
        Axis-aligned bounding box of all bodies.

        Args:
            padding: Margin added on each side of every axis

        Returns:
            (lower, upper) corner vectors

        Raises:
            InvalidRegionError: If the store is empty
        """
        if not self._bodies:
            raise InvalidRegionError("cannot bound an empty body store")
        positions = self.positions()
        return positions.min(axis=0) - padding, positions.max(axis=0) + padding


@dataclass(eq=False)
class Region:
    """
    Axis-aligned box plus the bodies whose positions fall inside it.

    Attributes:
        lower: Minimum corner
        upper: Maximum corner
        bodies: Bodies contained in the box
        path: Octant path from the root (ROOT_PATH, then 3 bits per level)
        collision_checked: True once this region or an ancestor was marked for a collision check
    """

    lower: np.ndarray
    upper: np.ndarray
    bodies: list[Body] = field(default_factory=list)
    path: int = ROOT_PATH
    collision_checked: bool = False

    def __post_init__(self) -> None:
        self.lower = as_vector(self.lower)
        self.upper = as_vector(self.upper)

    @classmethod
    def from_store(cls, store: BodyStore, padding: float = 1.0) -> Region:
        """Root region covering every body in the store."""
        lower, upper = store.bounds(padding)
        return cls(lower, upper, list(store))

    @property
    def midpoint(self) -> np.ndarray:
        return (self.lower + self.upper) / 2

    @property
    def depth(self) -> int:
        return path_depth(self.path)

    def octant_of(self, position: VectorLike) -> int:
        """
        Octant index for a position.

        Bit 0 selects the upper x half, bit 1 the upper y half, bit 2 the
        upper z half. A coordinate equal to the midpoint goes to the upper
        half, and anything on the outer max face stays in the upper octant.
        """
        upper_half = np.asarray(position, dtype=np.float64) >= self.midpoint
        return int(upper_half[0]) | (int(upper_half[1]) << 1) | (int(upper_half[2]) << 2)

    def subdivide(self) -> list[Region]:
        """
        Split into 8 octant regions and distribute the bodies among them.

        Children inherit the collision_checked flag.
        """
        mid = self.midpoint
        children = []
        for octant in range(OCTANTS):
            bits = np.array([octant & 1, octant & 2, octant & 4], dtype=bool)
            children.append(
                Region(
                    lower=np.where(bits, mid, self.lower),
                    upper=np.where(bits, self.upper, mid),
                    path=child_path(self.path, octant),
                    collision_checked=self.collision_checked,
                )
            )
        for body in self.bodies:
            children[self.octant_of(body.position)].bodies.append(body)
        return children


def child_path(path: int, octant: int) -> int:
    """Path label of an octant child."""
    return (path << 3) | octant


def path_depth(path: int) -> int:
    """Depth of a path label (root is 0)."""
    return (path.bit_length() - 1) // 3


def is_ancestor(path: int, other: int) -> bool:
    """True if ``path`` labels a strict ancestor of ``other``."""
    shift = 3 * (path_depth(other) - path_depth(path))
    return shift > 0 and (other >> shift) == path


def total_momentum(bodies: Iterable[Body]) -> np.ndarray:
    """Sum of m * v over bodies."""
    total = np.zeros(3, dtype=np.float64)
    for body in bodies:
        total += body.mass * body.velocity
    return total


def kinetic_energy(bodies: Iterable[Body]) -> float:
    """Sum of m * |v|^2 / 2 over bodies."""
    return float(sum(0.5 * body.mass * float(np.dot(body.velocity, body.velocity)) for body in bodies))


__all__ = [
    "Body",
    "BodyStore",
    "Region",
    "EventType",
    "Event",
    "OCTANTS",
    "ROOT_PATH",
    "as_vector",
    "child_path",
    "path_depth",
    "is_ancestor",
    "total_momentum",
    "kinetic_energy",
]
