"""Tests for elastic collision resolution."""

import numpy as np
import pytest

from nbody_octree.collisions import (
    detect_collisions,
    elastic_collision,
    overlapping,
    resolve_collisions,
)
from nbody_octree.spatial.octree import Octree
from nbody_octree.types import Body, BodyStore, kinetic_energy, total_momentum


def head_on_pair():
    return [
        Body(position=(0.0, 0.0, 0.0), velocity=(1.0, 0.0, 0.0), mass=1.0, radius=1.0, index=0),
        Body(position=(1.5, 0.0, 0.0), velocity=(-1.0, 0.0, 0.0), mass=1.0, radius=1.0, index=1),
    ]


class TestElasticCollision:
    """Tests for the two-body velocity update."""

    def test_equal_masses_swap_velocities(self):
        """Head-on equal masses exchange velocities."""
        a, b = head_on_pair()
        elastic_collision(a, b)
        assert a.velocity.tolist() == pytest.approx([-1.0, 0.0, 0.0])
        assert b.velocity.tolist() == pytest.approx([1.0, 0.0, 0.0])

    def test_conserves_momentum_and_energy(self):
        """Oblique collision of unequal masses conserves both invariants."""
        a = Body(position=(0.0, 0.0, 0.0), velocity=(3.0, 1.0, -2.0), mass=2.0, radius=1.0)
        b = Body(position=(1.0, 0.5, 0.2), velocity=(-1.0, 0.5, 0.0), mass=5.0, radius=1.0)
        momentum = total_momentum([a, b])
        energy = kinetic_energy([a, b])
        elastic_collision(a, b)
        assert total_momentum([a, b]) == pytest.approx(momentum, rel=1e-12)
        assert kinetic_energy([a, b]) == pytest.approx(energy, rel=1e-12)

    def test_tangential_velocity_unchanged(self):
        """Only the component along the line of centers changes."""
        a = Body(position=(0.0, 0.0, 0.0), velocity=(1.0, 2.0, 0.0), mass=1.0, radius=1.0)
        b = Body(position=(1.0, 0.0, 0.0), velocity=(0.0, -3.0, 0.0), mass=1.0, radius=1.0)
        elastic_collision(a, b)
        assert a.velocity[1] == pytest.approx(2.0)
        assert b.velocity[1] == pytest.approx(-3.0)

    def test_positions_unchanged(self):
        """Collisions only touch velocities."""
        a, b = head_on_pair()
        elastic_collision(a, b)
        assert a.position.tolist() == [0.0, 0.0, 0.0]
        assert b.position.tolist() == [1.5, 0.0, 0.0]

    def test_coincident_bodies_untouched(self):
        """Without a line of centers nothing changes."""
        a = Body(position=(1, 1, 1), velocity=(1, 0, 0), radius=1.0)
        b = Body(position=(1, 1, 1), velocity=(-1, 0, 0), radius=1.0)
        elastic_collision(a, b)
        assert a.velocity.tolist() == [1.0, 0.0, 0.0]
        assert b.velocity.tolist() == [-1.0, 0.0, 0.0]


class TestResolveCollisions:
    """Tests for the greedy pairwise pass."""

    def test_overlapping(self):
        """Overlap is distance < sum of radii."""
        a, b = head_on_pair()
        assert overlapping(a, b)
        b.position = np.array([2.0, 0.0, 0.0])
        assert not overlapping(a, b)

    def test_resolves_overlapping_pair(self):
        """An overlapping pair is reported and resolved."""
        bodies = head_on_pair()
        assert resolve_collisions(bodies) == [(0, 1)]
        assert bodies[0].velocity[0] == pytest.approx(-1.0)

    def test_non_colliding_bodies_unchanged(self):
        """Bodies not in contact keep their velocities."""
        bodies = head_on_pair() + [
            Body(position=(100.0, 0.0, 0.0), velocity=(0.0, 7.0, 0.0), mass=3.0, radius=1.0, index=2)
        ]
        resolve_collisions(bodies)
        assert bodies[2].velocity.tolist() == [0.0, 7.0, 0.0]

    def test_first_match_wins(self):
        """A body touching two others collides with only the first."""
        bodies = [
            Body(position=(0.0, 0.0, 0.0), velocity=(1.0, 0.0, 0.0), radius=1.0, index=0),
            Body(position=(1.0, 0.0, 0.0), velocity=(-1.0, 0.0, 0.0), radius=1.0, index=1),
            Body(position=(-1.0, 0.0, 0.0), velocity=(2.0, 0.0, 0.0), radius=1.0, index=2),
        ]
        pairs = resolve_collisions(bodies)
        assert pairs == [(0, 1)]
        assert bodies[2].velocity.tolist() == [2.0, 0.0, 0.0]

    def test_each_body_collides_once(self):
        """Two disjoint overlapping pairs are both resolved."""
        bodies = [
            Body(position=(0.0, 0.0, 0.0), velocity=(1.0, 0.0, 0.0), radius=1.0, index=0),
            Body(position=(50.0, 0.0, 0.0), velocity=(0.0, 1.0, 0.0), radius=1.0, index=1),
            Body(position=(1.0, 0.0, 0.0), velocity=(-1.0, 0.0, 0.0), radius=1.0, index=2),
            Body(position=(50.0, 1.0, 0.0), velocity=(0.0, -1.0, 0.0), radius=1.0, index=3),
        ]
        assert resolve_collisions(bodies) == [(0, 2), (1, 3)]

    def test_conservation_over_pass(self):
        """Momentum and energy are conserved over a whole pass."""
        rng = np.random.default_rng(2)
        bodies = [
            Body(
                position=rng.uniform(-2, 2, 3),
                velocity=rng.uniform(-1, 1, 3),
                mass=float(rng.uniform(0.5, 2.0)),
                radius=1.0,
                index=i,
            )
            for i in range(6)
        ]
        momentum = total_momentum(bodies)
        energy = kinetic_energy(bodies)
        assert resolve_collisions(bodies)
        assert total_momentum(bodies) == pytest.approx(momentum, rel=1e-9, abs=1e-12)
        assert kinetic_energy(bodies) == pytest.approx(energy, rel=1e-9)


class TestDetectCollisions:
    """Tests for the collision pass over a tree."""

    def test_compact_region_is_checked(self):
        """Overlapping large bodies are resolved from the tree."""
        store = BodyStore(head_on_pair())
        tree = Octree.from_store(store)
        assert tree.root.collision_check
        assert detect_collisions(tree.root) == [(0, 1)]
        assert store[0].velocity[0] == pytest.approx(-1.0)
        assert store[1].velocity[0] == pytest.approx(1.0)

    def test_checked_once_per_branch(self):
        """Subtrees of a checked node are not checked again."""
        # Checking twice would swap the velocities back
        store = BodyStore(head_on_pair())
        tree = Octree.from_store(store)
        pairs = detect_collisions(tree.root)
        assert len(pairs) == 1
        assert store[0].velocity[0] == pytest.approx(-1.0)

    def test_point_bodies_never_checked(self):
        """Bodies with zero radius never trigger a check."""
        store = BodyStore(
            [
                Body(position=(0, 0, 0), velocity=(1, 0, 0)),
                Body(position=(1e-3, 0, 0), velocity=(-1, 0, 0)),
            ]
        )
        tree = Octree.from_store(store)
        assert detect_collisions(tree.root) == []
        assert store[0].velocity.tolist() == [1.0, 0.0, 0.0]

    def test_sparse_region_descends(self):
        """A wide root is skipped but a compact child cluster is checked."""
        store = BodyStore(
            [
                Body(position=(0.0, 0.0, 0.0), velocity=(1, 0, 0), radius=1.0),
                Body(position=(1.5, 0.0, 0.0), velocity=(-1, 0, 0), radius=1.0),
                Body(position=(1e4, 1e4, 1e4), radius=1.0),
                Body(position=(-1e4, 1e4, -1e4), radius=1.0),
            ]
        )
        tree = Octree.from_store(store)
        assert not tree.root.collision_check
        assert tree.root.children[5].collision_check
        assert detect_collisions(tree.root) == [(0, 1)]

    def test_resolves_in_index_order(self):
        """First match follows store order, not the octant a body landed in."""
        store = BodyStore(
            [
                Body(position=(1.0, 0.0, 0.0), velocity=(-1, 0, 0), radius=5.0),
                Body(position=(0.0, 0.0, 0.0), velocity=(1, 0, 0), radius=5.0),
                Body(position=(-1.0, 0.0, 0.0), velocity=(2, 0, 0), radius=5.0),
            ]
        )
        expected = resolve_collisions(list(store.copy()))
        tree = Octree.from_store(store)
        assert detect_collisions(tree.root) == expected == [(0, 1)]
        assert store[2].velocity.tolist() == [2.0, 0.0, 0.0]

    def test_only_highest_compact_node_marked(self):
        """Descendants of a marked node are never marked themselves."""
        store = BodyStore(
            [Body(position=(x, 0.0, 0.0), radius=1.0) for x in (0.0, 1.5, 3.0, 4.5)]
        )
        tree = Octree.from_store(store)
        marked = []
        stack = [tree.root]
        while stack:
            node = stack.pop()
            if node.is_leaf():
                continue
            if node.collision_check:
                marked.append(node.path)
            stack.extend(node.present_children())
        assert marked == [tree.root.path]
        assert tree.region.collision_checked

    def test_empty_tree(self):
        """A missing root yields no collisions."""
        assert detect_collisions(None) == []
