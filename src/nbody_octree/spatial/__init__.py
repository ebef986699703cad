"""
Spatial data structures for efficient gravity calculations.

Provides the octree used for Barnes-Hut O(n log n) force approximation.
"""

from .octree import (
    Internal,
    Leaf,
    Octree,
    OctreeNode,
    build_octree,
    count_nodes,
    iter_bodies,
    iter_leaves,
    tree_depth,
)

__all__ = [
    "Internal",
    "Leaf",
    "Octree",
    "OctreeNode",
    "build_octree",
    "count_nodes",
    "iter_bodies",
    "iter_leaves",
    "tree_depth",
]
