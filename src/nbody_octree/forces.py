"""
Barnes-Hut gravitational acceleration.

For each leaf the whole tree is walked from the root. A node that is a
leaf, or whose extent seen from the body is small enough
(extent / distance < theta), is treated as a point mass at its center of
mass. Any other node is opened and its children visited.

The result is accumulated into each body's ``next_acceleration``; the
current ``acceleration`` is left for the integrator.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .spatial.octree import Leaf, OctreeNode, iter_leaves
from .types import is_ancestor
from .validation import DegenerateGeometryError, NumericalError

# Gravitational constant in SI units (m^3 kg^-1 s^-2)
GRAVITATIONAL_CONSTANT = 6.67e-11

# Default opening-angle threshold
DEFAULT_THETA = 0.3


def point_mass_acceleration(
    position: np.ndarray,
    source: np.ndarray,
    mass: float,
    gravitational_constant: float = GRAVITATIONAL_CONSTANT,
) -> np.ndarray:
    """
    Acceleration at ``position`` due to a point mass at ``source``.

    Raises:
        DegenerateGeometryError: If the two points coincide
    """
    offset = source - position
    dist = math.sqrt(float(np.dot(offset, offset)))
    if dist == 0.0:
        raise DegenerateGeometryError(f"zero separation at {position.tolist()}")
    return (gravitational_constant * mass / (dist * dist * dist)) * offset


def accumulate_acceleration(
    leaf: Leaf,
    root: Optional[OctreeNode],
    gravitational_constant: float = GRAVITATIONAL_CONSTANT,
    theta: float = DEFAULT_THETA,
) -> np.ndarray:
    """
    Add the tree's pull on one leaf to its body's next_acceleration.

    Args:
        leaf: Leaf whose body receives the acceleration
        root: Root of the tree to walk
        gravitational_constant: G
        theta: Opening-angle threshold (0 = open every internal node)

    Returns:
        The body's updated next_acceleration

    Raises:
        DegenerateGeometryError: On zero separation from an accepted node
        NumericalError: If the accumulated acceleration is not finite
    """
    body = leaf.body
    total = np.zeros(3, dtype=np.float64)
    stack = [root] if root is not None else []

    while stack:
        node = stack.pop()

        # Skip self-interaction
        if node.path == leaf.path:
            continue

        # Nodes containing the leaf are always opened
        contains_leaf = is_ancestor(node.path, leaf.path)

        if isinstance(node, Leaf) or (not contains_leaf and _accepted(node, body.position, theta)):
            total += point_mass_acceleration(
                body.position, node.center_of_mass, node.mass, gravitational_constant
            )
        else:
            stack.extend(reversed([c for c in node.children if c is not None]))

    if not np.all(np.isfinite(total)):
        raise NumericalError(f"non-finite acceleration {total.tolist()} for body {body.index}")

    body.next_acceleration = body.next_acceleration + total
    return body.next_acceleration


def _accepted(node: OctreeNode, position: np.ndarray, theta: float) -> bool:
    """Opening-angle criterion: extent / distance < theta."""
    dist = float(np.linalg.norm(node.center_of_mass - position))
    if dist == 0.0:
        return False
    return node.extent / dist < theta


def evaluate_forces(
    root: Optional[OctreeNode],
    gravitational_constant: float = GRAVITATIONAL_CONSTANT,
    theta: float = DEFAULT_THETA,
) -> None:
    """Accumulate next_acceleration for every leaf of a tree."""
    for leaf in iter_leaves(root):
        accumulate_acceleration(leaf, root, gravitational_constant, theta)


__all__ = [
    "GRAVITATIONAL_CONSTANT",
    "DEFAULT_THETA",
    "point_mass_acceleration",
    "accumulate_acceleration",
    "evaluate_forces",
]
