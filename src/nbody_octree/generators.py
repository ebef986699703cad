"""
Initial-condition generators.

Each generator returns a BodyStore of randomly sampled bodies:
- uniform_cube: Positions and velocities uniform in a cube
- annulus: Flat ring of bodies on circular orbits
- spherical_shell: Shell of bodies on circular orbits

Pass ``seed`` for reproducible initial conditions.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .forces import GRAVITATIONAL_CONSTANT
from .types import Body, BodyStore
from .validation import InvalidInputError, validate_count, validate_positive


def _rng(seed: Optional[int]) -> np.random.Generator:
    return np.random.default_rng(seed)


def _positive_uniform(rng: np.random.Generator, high: float, size: int) -> np.ndarray:
    """Samples in (0, high]."""
    return high * (1.0 - rng.random(size))


def _make_store(
    positions: np.ndarray,
    velocities: np.ndarray,
    masses: np.ndarray,
    radii: np.ndarray,
) -> BodyStore:
    return BodyStore(
        Body(
            position=positions[i],
            velocity=velocities[i],
            mass=float(masses[i]),
            radius=float(radii[i]),
            index=i,
        )
        for i in range(len(positions))
    )


def uniform_cube(
    count: int,
    *,
    half_width: float = 1e16,
    max_speed: float = 1e3,
    max_mass: float = 3e30,
    max_radius: float = 1e9,
    seed: Optional[int] = None,
) -> BodyStore:
    """
    Bodies scattered uniformly in a cube centered on the origin.

    Args:
        count: Number of bodies
        half_width: Half the cube's edge length
        max_speed: Each velocity component is uniform in [-max_speed, max_speed]
        max_mass: Masses are uniform in (0, max_mass]
        max_radius: Radii are uniform in [0, max_radius)
        seed: Random seed for reproducible output

    Returns:
        BodyStore with ``count`` bodies
    """
    count = validate_count(count)
    rng = _rng(seed)
    positions = rng.uniform(-half_width, half_width, (count, 3))
    velocities = rng.uniform(-max_speed, max_speed, (count, 3))
    masses = _positive_uniform(rng, max_mass, count)
    radii = rng.uniform(0.0, max_radius, count)
    return _make_store(positions, velocities, masses, radii)


def circular_velocities(
    positions: np.ndarray,
    central_mass: float,
    gravitational_constant: float = GRAVITATIONAL_CONSTANT,
    axis: Optional[np.ndarray] = None,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Velocities for circular orbits about a mass at the origin.

    Each velocity is perpendicular to its position with magnitude
    sqrt(G M / r). With ``axis`` all bodies orbit about that axis;
    otherwise each body gets a random orbital plane.
    """
    count = len(positions)
    if axis is None:
        rng = rng if rng is not None else _rng(None)
        axes = rng.normal(size=(count, 3))
    else:
        axes = np.broadcast_to(np.asarray(axis, dtype=np.float64), (count, 3))

    directions = np.cross(axes, positions)
    norms = np.linalg.norm(directions, axis=1)
    # Position parallel to the axis: pick any perpendicular direction
    degenerate = norms == 0.0
    if np.any(degenerate):
        directions[degenerate] = np.cross(positions[degenerate], [1.0, 0.0, 0.0])
        directions[degenerate & (np.linalg.norm(directions, axis=1) == 0.0)] = [0.0, 1.0, 0.0]
        norms = np.linalg.norm(directions, axis=1)

    r = np.linalg.norm(positions, axis=1)
    speeds = np.sqrt(gravitational_constant * central_mass / r)
    return directions / norms[:, np.newaxis] * speeds[:, np.newaxis]


def annulus(
    count: int,
    inner_radius: float = 1.2e9,
    outer_radius: float = 4e9,
    *,
    thickness: float = 1e5,
    central_mass: float = 1e30,
    include_central_body: bool = False,
    max_mass: float = 3e20,
    max_radius: float = 1e3,
    gravitational_constant: float = GRAVITATIONAL_CONSTANT,
    seed: Optional[int] = None,
) -> BodyStore:
    """
    Flat ring of bodies in the xy-plane on circular orbits about the z-axis.

    Args:
        count: Number of bodies (including the central body if requested)
        inner_radius: Inner ring radius
        outer_radius: Outer ring radius
        thickness: z coordinates are uniform in [-thickness, thickness]
        central_mass: Mass the orbital speeds are computed for
        include_central_body: Make the last body a mass of central_mass at the origin
        max_mass: Ring masses are uniform in (0, max_mass]
        max_radius: Ring radii are uniform in [0, max_radius)
        gravitational_constant: G used for orbital speeds
        seed: Random seed for reproducible output
    """
    count = validate_count(count)
    _validate_shell(inner_radius, outer_radius)
    validate_positive(central_mass, "central_mass")
    rng = _rng(seed)
    ring = count - 1 if include_central_body else count

    r = rng.uniform(inner_radius, outer_radius, ring)
    phi = rng.uniform(0.0, 2 * np.pi, ring)
    positions = np.column_stack(
        [r * np.cos(phi), r * np.sin(phi), rng.uniform(-thickness, thickness, ring)]
    )
    velocities = circular_velocities(
        positions, central_mass, gravitational_constant, axis=np.array([0.0, 0.0, 1.0])
    )
    masses = _positive_uniform(rng, max_mass, ring)
    radii = rng.uniform(0.0, max_radius, ring)
    return _with_central_body(
        positions, velocities, masses, radii, central_mass, include_central_body
    )


def spherical_shell(
    count: int,
    inner_radius: float = 10.0,
    outer_radius: float = 1e7,
    *,
    central_mass: float = 1e30,
    include_central_body: bool = False,
    max_mass: float = 3e20,
    max_radius: float = 1e3,
    gravitational_constant: float = GRAVITATIONAL_CONSTANT,
    seed: Optional[int] = None,
) -> BodyStore:
    """
    Bodies in a spherical shell on circular orbits in random planes.

    Args:
        count: Number of bodies (including the central body if requested)
        inner_radius: Inner shell radius
        outer_radius: Outer shell radius
        central_mass: Mass the orbital speeds are computed for
        include_central_body: Make the last body a mass of central_mass at the origin
        max_mass: Shell masses are uniform in (0, max_mass]
        max_radius: Shell radii are uniform in [0, max_radius)
        gravitational_constant: G used for orbital speeds
        seed: Random seed for reproducible output
    """
    count = validate_count(count)
    _validate_shell(inner_radius, outer_radius)
    validate_positive(central_mass, "central_mass")
    rng = _rng(seed)
    shell = count - 1 if include_central_body else count

    directions = rng.normal(size=(shell, 3))
    directions /= np.linalg.norm(directions, axis=1)[:, np.newaxis]
    r = rng.uniform(inner_radius, outer_radius, shell)
    positions = directions * r[:, np.newaxis]
    velocities = circular_velocities(positions, central_mass, gravitational_constant, rng=rng)
    masses = _positive_uniform(rng, max_mass, shell)
    radii = rng.uniform(0.0, max_radius, shell)
    return _with_central_body(
        positions, velocities, masses, radii, central_mass, include_central_body
    )


def _validate_shell(inner_radius: float, outer_radius: float) -> None:
    validate_positive(inner_radius, "inner_radius")
    if outer_radius < inner_radius:
        raise InvalidInputError(
            f"outer_radius must be >= inner_radius, got {outer_radius} < {inner_radius}"
        )


def _with_central_body(
    positions: np.ndarray,
    velocities: np.ndarray,
    masses: np.ndarray,
    radii: np.ndarray,
    central_mass: float,
    include_central_body: bool,
) -> BodyStore:
    if include_central_body:
        positions = np.vstack([positions, np.zeros(3)])
        velocities = np.vstack([velocities, np.zeros(3)])
        masses = np.append(masses, central_mass)
        radii = np.append(radii, 0.0)
    return _make_store(positions, velocities, masses, radii)


GENERATORS = {
    "cube": uniform_cube,
    "annulus": annulus,
    "shell": spherical_shell,
}


__all__ = [
    "GENERATORS",
    "uniform_cube",
    "annulus",
    "spherical_shell",
    "circular_velocities",
]
