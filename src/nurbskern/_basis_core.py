"""Core B-spline basis function evaluation kernels.

This module provides Numba-compiled implementations of knot span lookup,
Cox-de Boor basis evaluation and basis derivative evaluation. All kernels
write into caller-provided output arrays and keep no state between calls,
so they can be called concurrently from parallel loops.
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
def _find_span_impl(t: float, degree: int, knots: npt.NDArray[np.float64]) -> int:
    """Find the knot span containing the parameter `t`.

    Parameters at or beyond the domain ends are clamped to the first and last
    non-empty spans.

    Args:
        t (float): Parameter value.
        degree (int): B-spline degree.
        knots (npt.NDArray[np.float64]): Non-decreasing knot vector.

    Returns:
        int: Span index in [degree, n-1], where n is the number of basis
            functions (``len(knots) - degree - 1``).

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    n = knots.size - degree - 1

    if t >= knots[n]:
        return n - 1
    if t <= knots[degree]:
        return degree

    low = degree
    high = n
    while high - low > 1:
        mid = (low + high) // 2
        if knots[mid] > t:
            high = mid
        else:
            low = mid

    return low


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _basis_funs_impl(
    span: int,
    t: float,
    degree: int,
    knots: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> None:
    """Compute the nonzero basis functions on a knot span.

    Triangular Cox-de Boor recurrence (The NURBS Book, Algorithm A2.2).
    Results are written directly to the output array.

    Args:
        span (int): Knot span index of `t`.
        t (float): Parameter value.
        degree (int): B-spline degree.
        knots (npt.NDArray[np.float64]): Knot vector.
        out (npt.NDArray[np.float64]): Output array of length degree+1. On
            return, ``out[i]`` holds the value of basis function
            ``span - degree + i``.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    left = np.zeros(degree + 1, dtype=np.float64)
    right = np.zeros(degree + 1, dtype=np.float64)

    out[0] = 1.0
    for j in range(1, degree + 1):
        left[j] = t - knots[span + 1 - j]
        right[j] = knots[span + j] - t

        saved = 0.0
        for r in range(j):
            temp = out[r] / (right[r + 1] + left[j - r])
            out[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp

        out[j] = saved


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _evaluate_all_impl(
    t: float,
    knots: npt.NDArray[np.float64],
    degree: int,
    out: npt.NDArray[np.float64],
) -> None:
    """Evaluate all basis functions at `t`, zero-padded to full length.

    Args:
        t (float): Parameter value.
        knots (npt.NDArray[np.float64]): Knot vector.
        degree (int): B-spline degree.
        out (npt.NDArray[np.float64]): Output array of length
            ``len(knots) - degree - 1``.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    out.fill(0.0)

    # span <= n-1, so the scattered indices stay inside `out`.
    span = _find_span_impl(t, degree, knots)
    local = np.empty(degree + 1, dtype=np.float64)
    _basis_funs_impl(span, t, degree, knots, local)

    for i in range(degree + 1):
        out[span - degree + i] = local[i]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _evaluate_derivatives_impl(
    t: float,
    knots: npt.NDArray[np.float64],
    degree: int,
    order: int,
    out: npt.NDArray[np.float64],
) -> int:
    """Evaluate the nonzero basis functions and their derivatives at `t`.

    The NURBS Book, Algorithm A2.3. The triangular table `ndu` stores the
    basis functions (upper triangle) and the knot differences (lower
    triangle); the derivatives are then obtained by back-substitution through
    the two alternating rows of `a`.

    Args:
        t (float): Parameter value.
        knots (npt.NDArray[np.float64]): Knot vector.
        degree (int): B-spline degree.
        order (int): Highest derivative order requested.
        out (npt.NDArray[np.float64]): Output array of shape
            (order+1, degree+1). Row k holds the k-th derivatives of basis
            functions ``span - degree`` to ``span``. Rows above `degree`
            are zero.

    Returns:
        int: The knot span index of `t`.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    p = degree
    span = _find_span_impl(t, p, knots)

    ndu = np.zeros((p + 1, p + 1), dtype=np.float64)
    left = np.zeros(p + 1, dtype=np.float64)
    right = np.zeros(p + 1, dtype=np.float64)

    ndu[0, 0] = 1.0
    for j in range(1, p + 1):
        left[j] = t - knots[span + 1 - j]
        right[j] = knots[span + j] - t

        saved = 0.0
        for r in range(j):
            ndu[j, r] = right[r + 1] + left[j - r]
            temp = ndu[r, j - 1] / ndu[j, r]

            ndu[r, j] = saved + right[r + 1] * temp
            saved = left[j - r] * temp

        ndu[j, j] = saved

    out.fill(0.0)
    for j in range(p + 1):
        out[0, j] = ndu[j, p]

    n_ders = min(order, p)
    a = np.zeros((2, p + 1), dtype=np.float64)

    for r in range(p + 1):
        s1 = 0
        s2 = 1
        a.fill(0.0)
        a[0, 0] = 1.0

        for k in range(1, n_ders + 1):
            d = 0.0
            rk = r - k
            pk = p - k

            # The terms below r-k and above p-k fall outside the span's
            # nonzero functions of degree p-k and must be skipped.
            if r >= k:
                a[s2, 0] = a[s1, 0] / ndu[pk + 1, rk]
                d = a[s2, 0] * ndu[rk, pk]

            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if r - 1 <= pk else p - r

            for j in range(j1, j2 + 1):
                a[s2, j] = (a[s1, j] - a[s1, j - 1]) / ndu[pk + 1, rk + j]
                d += a[s2, j] * ndu[rk + j, pk]

            if r <= pk:
                a[s2, k] = -a[s1, k - 1] / ndu[pk + 1, r]
                d += a[s2, k] * ndu[r, pk]

            out[k, r] = d

            s1, s2 = s2, s1

    # Falling factorial p (p-1) ... (p-k+1).
    factor = float(p)
    for k in range(1, n_ders + 1):
        for j in range(p + 1):
            out[k, j] *= factor
        factor *= p - k

    return span


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call.

    This function triggers compilation of the numba-decorated functions
    with float64 arrays, ensuring they are cached and ready for use.
    """
    knots_dummy = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0], dtype=np.float64)
    degree_dummy = 2
    t_dummy = 0.5

    span = _find_span_impl(t_dummy, degree_dummy, knots_dummy)
    _basis_funs_impl(span, t_dummy, degree_dummy, knots_dummy, np.empty(3, dtype=np.float64))
    _evaluate_all_impl(t_dummy, knots_dummy, degree_dummy, np.empty(3, dtype=np.float64))
    _evaluate_derivatives_impl(
        t_dummy, knots_dummy, degree_dummy, 1, np.empty((2, 3), dtype=np.float64)
    )


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_basis_funs_impl",
    "_evaluate_all_impl",
    "_evaluate_derivatives_impl",
    "_find_span_impl",
]
