"""
Simulation configuration.

Physical constants and run parameters are collected in one immutable
value, built once and handed to the simulation driver.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .collisions import DEFAULT_EXTENT_FACTOR
from .forces import DEFAULT_THETA, GRAVITATIONAL_CONSTANT
from .spatial.octree import DEFAULT_MAX_DEPTH
from .validation import (
    InvalidInputError,
    validate_iterations,
    validate_positive,
    validate_theta,
    validate_timestep,
)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Parameters of a simulation run.

    Attributes:
        gravitational_constant: G used by the force evaluator
        theta: Opening-angle threshold (0 = no approximation)
        timestep: Integration time step
        iterations: Number of iterations run() performs
        snapshot_interval: Write a snapshot every this many iterations
        boundary_padding: Margin around the bodies' bounding box
        collision_extent_factor: Check collisions below extent < factor * max radius
        max_depth: Deepest octree subdivision level
        prime_acceleration: Evaluate forces once before the first step so the
            first step has a real old acceleration
    """

    gravitational_constant: float = GRAVITATIONAL_CONSTANT
    theta: float = DEFAULT_THETA
    timestep: float = 1.0
    iterations: int = 100
    snapshot_interval: int = 100
    boundary_padding: float = 1.0
    collision_extent_factor: float = DEFAULT_EXTENT_FACTOR
    max_depth: int = DEFAULT_MAX_DEPTH
    prime_acceleration: bool = True

    def __post_init__(self) -> None:
        validate_positive(self.gravitational_constant, "gravitational_constant")
        validate_theta(self.theta)
        validate_timestep(self.timestep)
        validate_iterations(self.iterations)
        if int(self.snapshot_interval) != self.snapshot_interval or self.snapshot_interval < 0:
            raise InvalidInputError(
                f"snapshot_interval must be >= 0 (0 disables snapshots), got {self.snapshot_interval}"
            )
        validate_positive(self.boundary_padding, "boundary_padding")
        if self.collision_extent_factor < 0:
            raise InvalidInputError(
                f"collision_extent_factor must be >= 0, got {self.collision_extent_factor}"
            )
        if int(self.max_depth) != self.max_depth or self.max_depth < 1:
            raise InvalidInputError(f"max_depth must be >= 1, got {self.max_depth}")

    def with_options(self, **changes: Any) -> SimulationConfig:
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


__all__ = ["SimulationConfig"]
