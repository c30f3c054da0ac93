"""Public API for B-spline basis function evaluation.

Thin wrappers around the Numba kernels in :mod:`nurbskern._basis_core` that
normalize inputs, validate or allocate output arrays, and return numpy
arrays. Knot vectors are expected to be non-decreasing and long enough for
the given degree; this precondition is not checked here.
"""

from typing import NamedTuple

import numpy as np
from numpy import typing as npt

from ._basis_core import (
    _basis_funs_impl,
    _evaluate_all_impl,
    _evaluate_derivatives_impl,
    _find_span_impl,
)
from ._basis_utils import _normalize_knots, _validate_out_array


class BasisFunctionSet(NamedTuple):
    """The nonzero basis function values at a parameter and their knot span.

    ``values[i]`` is the value of basis function ``span - degree + i``.
    """

    values: npt.NDArray[np.float64]
    span: int

    @property
    def first_basis(self) -> int:
        """Index of the first nonzero basis function."""
        return self.span - (self.values.size - 1)


def _num_basis(knots: npt.NDArray[np.float64], degree: int) -> int:
    """Number of basis functions defined by a knot vector and degree.

    Raises:
        ValueError: If degree is negative or the knot vector is too short.
    """
    if degree < 0:
        raise ValueError("degree must be non-negative")
    num_basis = knots.size - degree - 1
    if num_basis < 1:
        raise ValueError(
            f"knots must have at least degree+2 ({degree + 2}) elements, got {knots.size}"
        )
    return num_basis


def find_span(t: float, degree: int, knots: npt.ArrayLike) -> int:
    """Find the knot span containing a parameter.

    Args:
        t (float): Parameter value. Values outside the knot domain are
            clamped to the first or last span.
        degree (int): B-spline degree.
        knots (npt.ArrayLike): Non-decreasing knot vector.

    Returns:
        int: Span index in [degree, n-1], with ``n = len(knots) - degree - 1``.

    Example:
        >>> find_span(0.5, 3, [0, 0, 0, 0, 0.5, 1, 1, 1, 1])
        4
    """
    knots_arr = _normalize_knots(knots)
    _num_basis(knots_arr, degree)
    return int(_find_span_impl(float(t), int(degree), knots_arr))


def basis_funs(
    span: int,
    t: float,
    degree: int,
    knots: npt.ArrayLike,
    out: npt.NDArray[np.float64] | None = None,
) -> npt.NDArray[np.float64]:
    """Compute the degree+1 nonzero basis functions on a knot span.

    Args:
        span (int): Knot span index of `t` (see :func:`find_span`).
        t (float): Parameter value.
        degree (int): B-spline degree.
        knots (npt.ArrayLike): Non-decreasing knot vector.
        out (npt.NDArray[np.float64] | None): Optional output array of shape
            (degree+1,). If None, a new array is allocated.

    Returns:
        npt.NDArray[np.float64]: Basis values of functions
            ``span - degree`` to ``span``. They are non-negative and sum
            to one.

    Raises:
        ValueError: If `span` is outside [degree, n-1] or `out` is invalid.

    Example:
        >>> basis_funs(2, 0.5, 2, [0, 0, 0, 1, 1, 1])
        array([0.25, 0.5 , 0.25])
    """
    knots_arr = _normalize_knots(knots)
    num_basis = _num_basis(knots_arr, degree)
    if span < degree or span > num_basis - 1:
        raise ValueError(f"span must be in [{degree}, {num_basis - 1}], got {span}")

    if out is None:
        out = np.empty(degree + 1, dtype=np.float64)
    else:
        _validate_out_array(out, (degree + 1,))

    _basis_funs_impl(int(span), float(t), int(degree), knots_arr, out)
    return out


def evaluate_basis(
    t: float,
    knots: npt.ArrayLike,
    degree: int,
    out: npt.NDArray[np.float64] | None = None,
) -> npt.NDArray[np.float64]:
    """Evaluate all basis functions at a parameter.

    The result has one entry per basis function; entries outside the active
    knot span are zero.

    Args:
        t (float): Parameter value.
        knots (npt.ArrayLike): Non-decreasing knot vector.
        degree (int): B-spline degree.
        out (npt.NDArray[np.float64] | None): Optional output array of shape
            (len(knots) - degree - 1,). If None, a new array is allocated.

    Returns:
        npt.NDArray[np.float64]: Zero-padded basis values.

    Example:
        >>> evaluate_basis(0.0, [0, 0, 1, 1], 1)
        array([1., 0.])
    """
    knots_arr = _normalize_knots(knots)
    num_basis = _num_basis(knots_arr, degree)

    if out is None:
        out = np.empty(num_basis, dtype=np.float64)
    else:
        _validate_out_array(out, (num_basis,))

    _evaluate_all_impl(float(t), knots_arr, int(degree), out)
    return out


def compute_basis_function_set(t: float, knots: npt.ArrayLike, degree: int) -> BasisFunctionSet:
    """Compute the nonzero basis functions at a parameter together with their span.

    Args:
        t (float): Parameter value.
        knots (npt.ArrayLike): Non-decreasing knot vector.
        degree (int): B-spline degree.

    Returns:
        BasisFunctionSet: The degree+1 nonzero values and the knot span.
    """
    knots_arr = _normalize_knots(knots)
    _num_basis(knots_arr, degree)

    span = int(_find_span_impl(float(t), int(degree), knots_arr))
    values = np.empty(degree + 1, dtype=np.float64)
    _basis_funs_impl(span, float(t), int(degree), knots_arr, values)
    return BasisFunctionSet(values, span)


def evaluate_basis_derivatives(
    t: float,
    knots: npt.ArrayLike,
    degree: int,
    order: int,
    out: npt.NDArray[np.float64] | None = None,
) -> tuple[npt.NDArray[np.float64], int]:
    """Evaluate the nonzero basis functions and their derivatives at a parameter.

    Args:
        t (float): Parameter value.
        knots (npt.ArrayLike): Non-decreasing knot vector.
        degree (int): B-spline degree.
        order (int): Highest derivative order. Must be non-negative.
        out (npt.NDArray[np.float64] | None): Optional output array of shape
            (order+1, degree+1). If None, a new array is allocated.

    Returns:
        tuple[npt.NDArray[np.float64], int]: Tuple of (derivatives, span).
            ``derivatives[k, i]`` is the k-th derivative of basis function
            ``span - degree + i``. Rows with ``k > degree`` are zero.

    Raises:
        ValueError: If `order` is negative or `out` is invalid.
    """
    if order < 0:
        raise ValueError("order must be non-negative")

    knots_arr = _normalize_knots(knots)
    _num_basis(knots_arr, degree)

    if out is None:
        out = np.empty((order + 1, degree + 1), dtype=np.float64)
    else:
        _validate_out_array(out, (order + 1, degree + 1))

    span = _evaluate_derivatives_impl(float(t), knots_arr, int(degree), int(order), out)
    return out, int(span)
