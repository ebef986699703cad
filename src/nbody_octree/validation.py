"""
Errors and input validation for the n-body simulation.

Provides the exception hierarchy used throughout the package and small
validation helpers for run parameters and body properties. Raises
descriptive exceptions on invalid input.
"""

from __future__ import annotations

import math


class NBodyError(Exception):
    """Base exception for simulation errors."""

    pass


class InvalidInputError(NBodyError, ValueError):
    """Raised when a body file or run parameter is missing or malformed."""

    pass


class InvalidRegionError(NBodyError):
    """Raised when the octree builder is handed a region with no bodies."""

    pass


class DegenerateGeometryError(NBodyError):
    """Raised when bodies cannot be separated by subdivision (coincident positions)."""

    pass


class NumericalError(NBodyError, ArithmeticError):
    """Raised when a non-finite value reaches the acceleration accumulator."""

    pass


class BodyFileWarning(UserWarning):
    """Warning issued when a body file contains data past its end-of-data sentinel."""

    pass


def validate_positive(value: float, name: str) -> float:
    """
    Validate that a value is a finite, strictly positive number.

    Args:
        value: Value to check
        name: Parameter name used in the error message

    Returns:
        Validated value as float

    Raises:
        InvalidInputError: If value is not finite or not > 0
    """
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")
    return value


def validate_timestep(timestep: float) -> float:
    """Validate the integration time step is positive."""
    return validate_positive(timestep, "timestep")


def validate_iterations(iterations: int) -> int:
    """
    Validate iteration count is positive.

    Raises:
        InvalidInputError: If iterations < 1
    """
    if int(iterations) != iterations or iterations < 1:
        raise InvalidInputError(f"iterations must be >= 1, got {iterations}")
    return int(iterations)


def validate_count(count: int) -> int:
    """Validate a body count is a positive integer."""
    if int(count) != count or count < 1:
        raise InvalidInputError(f"body count must be >= 1, got {count}")
    return int(count)


def validate_theta(theta: float) -> float:
    """
    Validate the opening-angle threshold.

    Zero is allowed and disables the approximation.

    Raises:
        InvalidInputError: If theta is negative or not finite
    """
    theta = float(theta)
    if not math.isfinite(theta) or theta < 0:
        raise InvalidInputError(f"theta must be >= 0, got {theta}")
    return theta


def validate_mass(mass: float) -> float:
    """Validate a body mass is positive."""
    return validate_positive(mass, "mass")


def validate_radius(radius: float) -> float:
    """Validate a body radius is non-negative."""
    radius = float(radius)
    if not math.isfinite(radius) or radius < 0:
        raise InvalidInputError(f"radius must be >= 0, got {radius}")
    return radius


__all__ = [
    "NBodyError",
    "InvalidInputError",
    "InvalidRegionError",
    "DegenerateGeometryError",
    "NumericalError",
    "BodyFileWarning",
    "validate_positive",
    "validate_timestep",
    "validate_iterations",
    "validate_count",
    "validate_theta",
    "validate_mass",
    "validate_radius",
]
