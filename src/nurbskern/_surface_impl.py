"""Numba kernels for rational surface point evaluation.

Single-point evaluation sums over the full control grid with zero-padded
basis arrays. Batch and grid evaluation distribute independent points (or
grid rows) over a ``prange`` loop; every iteration writes only its own
output slot and reads the surface arrays, which are never modified.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

from ._basis_core import _evaluate_all_impl

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator

    prange = range
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]
    prange = nb.prange


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _evaluate_point_impl(  # noqa: PLR0913
    u: float,
    v: float,
    degree_u: int,
    degree_v: int,
    knots_u: npt.NDArray[np.float64],
    knots_v: npt.NDArray[np.float64],
    control_points: npt.NDArray[np.float64],
    weights: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> None:
    """Evaluate the rational surface point at (u, v).

    Args:
        u (float): Parameter in the u direction.
        v (float): Parameter in the v direction.
        degree_u (int): Degree in the u direction.
        degree_v (int): Degree in the v direction.
        knots_u (npt.NDArray[np.float64]): Knot vector in u.
        knots_v (npt.NDArray[np.float64]): Knot vector in v.
        control_points (npt.NDArray[np.float64]): Control net of shape
            (u_count, v_count, 3).
        weights (npt.NDArray[np.float64]): Weights of shape (u_count, v_count).
        out (npt.NDArray[np.float64]): Output array of length 3.

    Note:
        Inputs are assumed to be correct (no validation performed). The
        weighted basis sum must be nonzero, which holds for positive weights.
    """
    u_count = weights.shape[0]
    v_count = weights.shape[1]

    basis_u = np.empty(u_count, dtype=np.float64)
    basis_v = np.empty(v_count, dtype=np.float64)
    _evaluate_all_impl(u, knots_u, degree_u, basis_u)
    _evaluate_all_impl(v, knots_v, degree_v, basis_v)

    weight_sum = 0.0
    for i in range(u_count):
        for j in range(v_count):
            weight_sum += basis_u[i] * basis_v[j] * weights[i, j]

    out[0] = 0.0
    out[1] = 0.0
    out[2] = 0.0
    for i in range(u_count):
        for j in range(v_count):
            rational = basis_u[i] * basis_v[j] * weights[i, j] / weight_sum
            for k in range(3):
                out[k] += rational * control_points[i, j, k]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=True,
)
def _evaluate_batch_impl(  # noqa: PLR0913
    uv: npt.NDArray[np.float64],
    degree_u: int,
    degree_v: int,
    knots_u: npt.NDArray[np.float64],
    knots_v: npt.NDArray[np.float64],
    control_points: npt.NDArray[np.float64],
    weights: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> None:
    """Evaluate the surface at every parameter pair of `uv`.

    Args:
        uv (npt.NDArray[np.float64]): Parameter pairs of shape (n, 2).
        degree_u (int): Degree in the u direction.
        degree_v (int): Degree in the v direction.
        knots_u (npt.NDArray[np.float64]): Knot vector in u.
        knots_v (npt.NDArray[np.float64]): Knot vector in v.
        control_points (npt.NDArray[np.float64]): Control net of shape
            (u_count, v_count, 3).
        weights (npt.NDArray[np.float64]): Weights of shape (u_count, v_count).
        out (npt.NDArray[np.float64]): Output array of shape (n, 3). Row k
            receives the point of pair k.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    n_pts = uv.shape[0]
    for pt_id in prange(n_pts):
        _evaluate_point_impl(
            uv[pt_id, 0],
            uv[pt_id, 1],
            degree_u,
            degree_v,
            knots_u,
            knots_v,
            control_points,
            weights,
            out[pt_id],
        )


@nb_jit(
    nopython=True,
    cache=True,
    parallel=True,
)
def _evaluate_grid_impl(  # noqa: PLR0913
    degree_u: int,
    degree_v: int,
    knots_u: npt.NDArray[np.float64],
    knots_v: npt.NDArray[np.float64],
    control_points: npt.NDArray[np.float64],
    weights: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> None:
    """Evaluate the surface on a uniform grid of the unit parameter square.

    The grid size is taken from `out`: sample (i, j) is evaluated at
    ``u = i / (u_samples - 1)`` and ``v = j / (v_samples - 1)``.

    Args:
        degree_u (int): Degree in the u direction.
        degree_v (int): Degree in the v direction.
        knots_u (npt.NDArray[np.float64]): Knot vector in u.
        knots_v (npt.NDArray[np.float64]): Knot vector in v.
        control_points (npt.NDArray[np.float64]): Control net of shape
            (u_count, v_count, 3).
        weights (npt.NDArray[np.float64]): Weights of shape (u_count, v_count).
        out (npt.NDArray[np.float64]): Output array of shape
            (u_samples, v_samples, 3), with both sample counts at least 2.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    u_samples = out.shape[0]
    v_samples = out.shape[1]
    u_den = float(u_samples - 1)
    v_den = float(v_samples - 1)

    for i in prange(u_samples):
        u = i / u_den
        for j in range(v_samples):
            _evaluate_point_impl(
                u,
                j / v_den,
                degree_u,
                degree_v,
                knots_u,
                knots_v,
                control_points,
                weights,
                out[i, j],
            )


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call.

    This function triggers compilation of the numba-decorated functions
    with float64 arrays, ensuring they are cached and ready for use.
    """
    knots_dummy = np.array([0.0, 0.0, 1.0, 1.0], dtype=np.float64)
    control_points_dummy = np.zeros((2, 2, 3), dtype=np.float64)
    weights_dummy = np.ones((2, 2), dtype=np.float64)

    _evaluate_point_impl(
        0.5,
        0.5,
        1,
        1,
        knots_dummy,
        knots_dummy,
        control_points_dummy,
        weights_dummy,
        np.empty(3, dtype=np.float64),
    )
    _evaluate_batch_impl(
        np.full((1, 2), 0.5, dtype=np.float64),
        1,
        1,
        knots_dummy,
        knots_dummy,
        control_points_dummy,
        weights_dummy,
        np.empty((1, 3), dtype=np.float64),
    )
    _evaluate_grid_impl(
        1,
        1,
        knots_dummy,
        knots_dummy,
        control_points_dummy,
        weights_dummy,
        np.empty((2, 2, 3), dtype=np.float64),
    )


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_evaluate_batch_impl",
    "_evaluate_grid_impl",
    "_evaluate_point_impl",
]
