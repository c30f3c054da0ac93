"""Knot vector validation and generation utilities.

This module provides the construction-time checks applied to the knot
vectors of a surface and a generator for clamped uniform knot vectors on
the unit parameter domain.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _check_knot_vector(knots: npt.NDArray[np.float64], degree: int) -> None:
    """Validate basic constraints on a knot vector and degree.

    Args:
        knots (npt.NDArray[np.float64]): 1D array representing the knot
            vector to check.
        degree (int): Non-negative polynomial degree.

    Raises:
        TypeError: If `knots` is not 1-dimensional.
        ValueError: If `degree` is negative, if there are fewer than
            `2*degree+2` knots, or if the knot vector is not non-decreasing.
    """
    if knots.ndim != 1:
        raise TypeError("knots must be a 1D array")
    if degree < 0:
        raise ValueError("degree must be non-negative")
    if knots.size < (2 * degree + 2):
        raise ValueError("knots must have at least 2*degree+2 elements")
    if not np.all(np.diff(knots) >= 0.0):
        raise ValueError("knots must be non-decreasing")


def create_uniform_open_knot_vector(
    num_control_points: int,
    degree: int,
) -> npt.NDArray[np.float64]:
    """Create a clamped uniform knot vector on [0, 1].

    The first and last knots are repeated (degree+1) times so that the
    surface interpolates the boundary control points, and the interior knots
    are uniformly spaced.

    Args:
        num_control_points (int): Number of control points along the axis.
            Must be at least degree+1.
        degree (int): Polynomial degree. Must be non-negative.

    Returns:
        npt.NDArray[np.float64]: Knot vector of length
            num_control_points + degree + 1.

    Raises:
        ValueError: If degree is negative or there are too few control points.

    Example:
        >>> create_uniform_open_knot_vector(5, 3)
        array([0. , 0. , 0. , 0. , 0.5, 1. , 1. , 1. , 1. ])
    """
    if degree < 0:
        raise ValueError("degree must be non-negative")
    if num_control_points < degree + 1:
        raise ValueError(
            f"num_control_points must be at least degree+1 ({degree + 1}), "
            f"got {num_control_points}"
        )

    num_intervals = num_control_points - degree
    interior = np.arange(1, num_intervals, dtype=np.float64) / num_intervals

    return np.concatenate(
        (
            np.zeros(degree + 1, dtype=np.float64),
            interior,
            np.ones(degree + 1, dtype=np.float64),
        )
    )


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0], dtype=np.float64)
    _check_knot_vector(knots_dummy, 2)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_check_knot_vector",
    "create_uniform_open_knot_vector",
]
