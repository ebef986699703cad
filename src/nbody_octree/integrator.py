"""
Velocity-Verlet time integration.

Each step uses the body's old acceleration ``a`` and the freshly evaluated
``a'`` held in ``next_acceleration``:

    x <- x + dt * v + dt^2 / 2 * a
    v <- v + dt / 2 * (a + a')
    a <- a'
    a' <- 0
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .spatial.octree import OctreeNode, iter_leaves
from .types import Body, BodyStore


def verlet_step(body: Body, timestep: float) -> Body:
    """Advance one body by one velocity-Verlet step, in place."""
    old = body.acceleration
    new = body.next_acceleration
    body.position = body.position + timestep * body.velocity + (0.5 * timestep * timestep) * old
    body.velocity = body.velocity + (0.5 * timestep) * (old + new)
    body.acceleration = new
    body.next_acceleration = np.zeros(3, dtype=np.float64)
    return body


def integrate(root: Optional[OctreeNode], store: BodyStore, timestep: float) -> int:
    """
    Step every leaf body and write it back to the store.

    Returns:
        Number of bodies updated
    """
    count = 0
    for leaf in iter_leaves(root):
        store.sync(verlet_step(leaf.body, timestep))
        count += 1
    return count


__all__ = ["verlet_step", "integrate"]
