"""
Elastic collision resolution.

Collisions are resolved as a separate pass over a built octree. While the
tree is built, the first internal node on each branch whose extent is
small compared to the largest body radius it holds is marked with
``collision_check``. The pass walks the tree, checks the bodies of each
marked node pairwise, and does not descend below it.

Within one check each body collides at most once: pairs are visited in
index order and the first overlapping pair wins.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .spatial.octree import DEFAULT_EXTENT_FACTOR, Leaf, OctreeNode, iter_bodies
from .types import Body

logger = logging.getLogger(__name__)

def elastic_collision(a: Body, b: Body) -> None:
    """
    Update two velocities for an elastic collision along the line of centers.

    Conserves total momentum and kinetic energy. Positions are unchanged.
    Bodies at the same position have no line of centers and are left alone.
    """
    offset = a.position - b.position
    dist_sq = float(np.dot(offset, offset))
    if dist_sq == 0.0:
        return

    total_mass = a.mass + b.mass
    approach = float(np.dot(a.velocity - b.velocity, offset))
    a.velocity = a.velocity - (2 * b.mass * approach / (total_mass * dist_sq)) * offset
    b.velocity = b.velocity + (2 * a.mass * approach / (total_mass * dist_sq)) * offset


def overlapping(a: Body, b: Body) -> bool:
    """True if two bodies are closer than the sum of their radii."""
    return float(np.linalg.norm(a.position - b.position)) < a.radius + b.radius


def resolve_collisions(bodies: Sequence[Body]) -> List[Tuple[int, int]]:
    """
    Resolve pairwise collisions among a set of bodies.

    Each body takes part in at most one collision per call; a body touching
    two others collides only with the first one found.

    Args:
        bodies: Bodies to check

    Returns:
        Body index pairs that collided, in resolution order
    """
    collided: set[int] = set()
    pairs: List[Tuple[int, int]] = []
    for i, a in enumerate(bodies):
        if i in collided:
            continue
        for j in range(i + 1, len(bodies)):
            if j in collided:
                continue
            b = bodies[j]
            if overlapping(a, b):
                elastic_collision(a, b)
                collided.update((i, j))
                pairs.append((a.index, b.index))
                break
    return pairs


def detect_collisions(root: Optional[OctreeNode]) -> List[Tuple[int, int]]:
    """
    Run the collision pass over a built tree.

    Bodies of each node marked with ``collision_check`` are resolved in
    store index order, so the greedy first match does not depend on which
    octant a body landed in.

    Args:
        root: Tree root

    Returns:
        Body index pairs that collided
    """
    pairs: List[Tuple[int, int]] = []
    _detect(root, pairs)
    if pairs:
        logger.debug("resolved %d collision(s): %s", len(pairs), pairs)
    return pairs


def _detect(node: Optional[OctreeNode], pairs: List[Tuple[int, int]]) -> None:
    if node is None or isinstance(node, Leaf):
        return
    if node.collision_check:
        pairs.extend(resolve_collisions(sorted(iter_bodies(node), key=lambda b: b.index)))
        return
    for child in node.present_children():
        _detect(child, pairs)


__all__ = [
    "DEFAULT_EXTENT_FACTOR",
    "elastic_collision",
    "overlapping",
    "resolve_collisions",
    "detect_collisions",
]
