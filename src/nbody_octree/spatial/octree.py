"""
Octree implementation for Barnes-Hut gravity approximation.

The octree recursively subdivides 3D space into octants, enabling
O(n log n) approximate n-body force calculations. Each internal node
carries the aggregate mass, center of mass and extent of the bodies
below it; leaves hold exactly one body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

import numpy as np

from ..types import OCTANTS, Body, BodyStore, Region, path_depth
from ..validation import DegenerateGeometryError, InvalidRegionError

logger = logging.getLogger(__name__)

# Recursion guard for subdivision. Bodies that are still together after
# this many halvings of the root box are treated as inseparable.
DEFAULT_MAX_DEPTH = 64

# Extent is reported as this multiple of the mean distance from the
# center of mass.
EXTENT_SCALE = 2.0

# A region is marked for a collision check once its extent drops below
# this multiple of the largest radius it contains.
DEFAULT_EXTENT_FACTOR = 10.0


@dataclass(eq=False)
class Leaf:
    """A node holding exactly one body. Extent is always zero."""

    body: Body
    path: int

    @property
    def mass(self) -> float:
        return self.body.mass

    @property
    def center_of_mass(self) -> np.ndarray:
        return self.body.position

    @property
    def extent(self) -> float:
        return 0.0

    @property
    def max_radius(self) -> float:
        return self.body.radius

    @property
    def body_count(self) -> int:
        return 1

    def is_leaf(self) -> bool:
        return True


@dataclass(eq=False)
class Internal:
    """
    A node with up to 8 children.

    Attributes:
        path: Octant path of the originating region
        mass: Total mass of bodies in this subtree
        center_of_mass: Mass-weighted mean position of those bodies
        extent: 2x the mean distance of those bodies from the center of mass
        max_radius: Largest body radius in this subtree
        body_count: Number of bodies in this subtree
        collision_check: True on the highest compact node of a branch; the
            collision pass resolves this subtree's bodies here
        children: One entry per octant, None where the octant is empty
    """

    path: int
    mass: float
    center_of_mass: np.ndarray
    extent: float
    max_radius: float
    body_count: int
    collision_check: bool = False
    children: List[Optional[OctreeNode]] = field(default_factory=lambda: [None] * OCTANTS)

    def is_leaf(self) -> bool:
        return False

    def present_children(self) -> Iterator[OctreeNode]:
        """Children that exist, in octant order."""
        return (child for child in self.children if child is not None)


OctreeNode = Union[Leaf, Internal]


def region_statistics(bodies: List[Body]) -> tuple[float, np.ndarray, float, float]:
    """
    Aggregate statistics for a set of bodies.

    Returns:
        (total mass, center of mass, extent, max radius)
    """
    positions = np.array([b.position for b in bodies], dtype=np.float64)
    masses = np.array([b.mass for b in bodies], dtype=np.float64)
    total_mass = float(masses.sum())
    center_of_mass = (masses[:, np.newaxis] * positions).sum(axis=0) / total_mass
    mean_distance = float(np.linalg.norm(positions - center_of_mass, axis=1).mean())
    max_radius = max(b.radius for b in bodies)
    return total_mass, center_of_mass, EXTENT_SCALE * mean_distance, max_radius


def build_octree(
    region: Region,
    max_depth: int = DEFAULT_MAX_DEPTH,
    extent_factor: float = DEFAULT_EXTENT_FACTOR,
) -> OctreeNode:
    """
    Recursively build an octree over a region.

    A single body becomes a Leaf. Otherwise the region's statistics are
    stored in an Internal node, the box is bisected on every axis, and each
    non-empty octant is built recursively. Empty octants are left as None.

    The first node on a branch with extent < extent_factor * max radius is
    marked with ``collision_check`` and the region's collision_checked flag
    is set, so no region below it is marked again.

    Args:
        region: Region with at least one body
        max_depth: Deepest subdivision level allowed
        extent_factor: Extent / max radius ratio below which a node is marked

    Returns:
        Root node of the (sub)tree

    Raises:
        InvalidRegionError: If the region has no bodies
        DegenerateGeometryError: If bodies cannot be separated
    """
    bodies = region.bodies
    if not bodies:
        raise InvalidRegionError(f"region {region.path:o} contains no bodies")

    if len(bodies) == 1:
        return Leaf(bodies[0], region.path)

    first = bodies[0].position
    if all(np.array_equal(b.position, first) for b in bodies[1:]):
        indices = ", ".join(str(b.index) for b in bodies)
        raise DegenerateGeometryError(f"bodies {indices} share the position {first.tolist()}")

    depth = path_depth(region.path)
    if depth >= max_depth:
        raise DegenerateGeometryError(
            f"{len(bodies)} bodies still share a region at depth {depth} (max_depth={max_depth})"
        )

    mass, center_of_mass, extent, max_radius = region_statistics(bodies)
    node = Internal(
        path=region.path,
        mass=mass,
        center_of_mass=center_of_mass,
        extent=extent,
        max_radius=max_radius,
        body_count=len(bodies),
    )
    if not region.collision_checked and extent < extent_factor * max_radius:
        node.collision_check = True
        region.collision_checked = True

    for octant, child in enumerate(region.subdivide()):
        if child.bodies:
            node.children[octant] = build_octree(child, max_depth, extent_factor)

    return node


def iter_leaves(node: Optional[OctreeNode]) -> Iterator[Leaf]:
    """Yield every leaf below node in octant order."""
    if node is None:
        return
    if isinstance(node, Leaf):
        yield node
        return
    for child in node.present_children():
        yield from iter_leaves(child)


def iter_bodies(node: Optional[OctreeNode]) -> Iterator[Body]:
    """Yield every body below node."""
    for leaf in iter_leaves(node):
        yield leaf.body


def count_nodes(node: Optional[OctreeNode]) -> int:
    """Number of nodes in a subtree."""
    if node is None:
        return 0
    if isinstance(node, Leaf):
        return 1
    return 1 + sum(count_nodes(child) for child in node.present_children())


def tree_depth(node: Optional[OctreeNode]) -> int:
    """Deepest level in a subtree, relative to the tree root."""
    return max((path_depth(leaf.path) for leaf in iter_leaves(node)), default=0)


class Octree:
    """
    Barnes-Hut octree over the bodies of a BodyStore.

    The tree is a snapshot: it is built once from the store, used for one
    iteration, then released. Leaves reference the store's Body objects.

    Usage:
        tree = Octree.from_store(store, padding=1.0)
        for leaf in tree.leaves():
            ...
        tree.release()
    """

    def __init__(
        self,
        region: Region,
        max_depth: int = DEFAULT_MAX_DEPTH,
        extent_factor: float = DEFAULT_EXTENT_FACTOR,
    ) -> None:
        """
        Build a tree over a region.

        Args:
            region: Root region; its bodies must lie inside its box
            max_depth: Deepest subdivision level allowed
            extent_factor: Extent / max radius ratio that marks a node for collisions
        """
        self.region = region
        self.max_depth = max_depth
        self.root: Optional[OctreeNode] = build_octree(region, max_depth, extent_factor)
        self.body_count = len(region.bodies)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "built octree: %d bodies, %d nodes, depth %d",
                self.body_count,
                count_nodes(self.root),
                tree_depth(self.root),
            )

    @classmethod
    def from_store(
        cls,
        store: BodyStore,
        padding: float = 1.0,
        max_depth: int = DEFAULT_MAX_DEPTH,
        extent_factor: float = DEFAULT_EXTENT_FACTOR,
    ) -> Octree:
        """
        Build an octree from every body in a store.

        Args:
            store: Body store
            padding: Margin added around the bodies' bounding box
            max_depth: Deepest subdivision level allowed
            extent_factor: Extent / max radius ratio that marks a node for collisions

        Returns:
            Octree over a fresh root region
        """
        return cls(Region.from_store(store, padding), max_depth=max_depth, extent_factor=extent_factor)

    def leaves(self) -> Iterator[Leaf]:
        """All leaves of the tree."""
        return iter_leaves(self.root)

    def release(self) -> None:
        """Drop the tree so the next iteration starts from scratch."""
        self.root = None
        self.region.bodies = []

    @property
    def released(self) -> bool:
        return self.root is None


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_EXTENT_FACTOR",
    "EXTENT_SCALE",
    "Leaf",
    "Internal",
    "OctreeNode",
    "Octree",
    "build_octree",
    "region_statistics",
    "iter_leaves",
    "iter_bodies",
    "count_nodes",
    "tree_depth",
]
