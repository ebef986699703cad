"""Tests for velocity-Verlet integration."""

import numpy as np
import pytest

from nbody_octree.integrator import integrate, verlet_step
from nbody_octree.spatial.octree import Octree
from nbody_octree.types import Body, BodyStore


class TestVerletStep:
    """Tests for a single body step."""

    def test_position_and_velocity_update(self):
        """x += dt v + dt^2/2 a, v += dt/2 (a + a')."""
        body = Body(
            position=(0.0, 0.0, 0.0),
            velocity=(1.0, 0.0, 0.0),
            acceleration=(2.0, 0.0, 0.0),
            next_acceleration=(4.0, 0.0, 0.0),
        )
        verlet_step(body, 0.5)
        assert body.position.tolist() == pytest.approx([0.5 + 0.125 * 2.0, 0.0, 0.0])
        assert body.velocity.tolist() == pytest.approx([1.0 + 0.25 * 6.0, 0.0, 0.0])

    def test_acceleration_rotation(self):
        """The new acceleration becomes the old one and the accumulator is cleared."""
        body = Body(position=(0, 0, 0), acceleration=(1, 1, 1), next_acceleration=(3, 2, 1))
        verlet_step(body, 1.0)
        assert body.acceleration.tolist() == [3.0, 2.0, 1.0]
        assert body.next_acceleration.tolist() == [0.0, 0.0, 0.0]

    def test_zero_acceleration_is_linear(self):
        """Without forces a body moves in a straight line."""
        start = np.array([1.0, 2.0, 3.0])
        velocity = np.array([0.5, -0.25, 2.0])
        body = Body(position=start, velocity=velocity)
        for _ in range(10):
            verlet_step(body, 0.5)
        assert body.position.tolist() == pytest.approx((start + 10 * 0.5 * velocity).tolist())
        assert body.velocity.tolist() == velocity.tolist()

    def test_returns_same_body(self):
        """The step is in place."""
        body = Body(position=(0, 0, 0))
        assert verlet_step(body, 1.0) is body


class TestIntegrate:
    """Tests for stepping every leaf of a tree."""

    def test_updates_every_body(self):
        """Every leaf body is stepped and kept in the store."""
        store = BodyStore(
            [
                Body(position=(0, 0, 0), velocity=(1, 0, 0)),
                Body(position=(5, 5, 5), velocity=(0, 1, 0)),
                Body(position=(-3, 2, 1), velocity=(0, 0, 1)),
            ]
        )
        tree = Octree.from_store(store)
        assert integrate(tree.root, store, 2.0) == 3
        assert store[0].position.tolist() == [2.0, 0.0, 0.0]
        assert store[1].position.tolist() == [5.0, 7.0, 5.0]
        assert store[2].position.tolist() == [-3.0, 2.0, 3.0]

    def test_syncs_into_store(self):
        """Stepped bodies occupy their own slot in the store."""
        store = BodyStore([Body(position=(0, 0, 0)), Body(position=(1, 1, 1))])
        tree = Octree.from_store(store)
        integrate(tree.root, store, 1.0)
        for i, body in enumerate(store):
            assert body.index == i

    def test_empty_tree(self):
        """A released tree steps nothing."""
        store = BodyStore([Body(position=(0, 0, 0), velocity=(1, 0, 0))])
        assert integrate(None, store, 1.0) == 0
        assert store[0].position.tolist() == [0.0, 0.0, 0.0]
