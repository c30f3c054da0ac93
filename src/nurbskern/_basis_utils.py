"""Utility functions for preparing inputs and outputs of the evaluation kernels."""

import numpy as np
from numpy import typing as npt


def _normalize_knots(knots: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Normalize a knot vector to a contiguous 1D float64 array.

    Lists, tuples and arrays of any numeric dtype are accepted. The input is
    not copied when it already is a contiguous float64 array.

    Returns:
        npt.NDArray[np.float64]: The knot vector as a C-contiguous float64 array.

    Raises:
        TypeError: If the knots are not 1-dimensional.
    """
    arr = np.ascontiguousarray(knots, dtype=np.float64)
    if arr.ndim != 1:
        raise TypeError("knots must be a 1D array")
    return arr


def _normalize_uv_pairs(uv: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Normalize parameter pairs to a contiguous ``(n, 2)`` float64 array.

    A single pair given as a 1D sequence of length 2 is promoted to shape
    ``(1, 2)``.

    Raises:
        ValueError: If the input cannot be interpreted as ``(n, 2)`` pairs.
    """
    arr = np.ascontiguousarray(uv, dtype=np.float64)
    if arr.ndim == 1 and arr.size == 2:  # noqa: PLR2004
        arr = arr.reshape(1, 2)
    elif arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, 2)
    if arr.ndim != 2 or arr.shape[1] != 2:  # noqa: PLR2004
        raise ValueError(f"uv pairs must have shape (n, 2), got {arr.shape}")
    return arr


def _validate_out_array(
    out: npt.NDArray[np.float64],
    expected_shape: tuple[int, ...],
) -> None:
    """Validate that the output array has the correct shape and dtype.

    This function follows NumPy's style for output array validation.

    Args:
        out (npt.NDArray[np.float64]): The output array to validate.
        expected_shape (tuple[int, ...]): The expected shape of the output array.

    Raises:
        ValueError: If the array shape, dtype, layout or writeability does
            not match expectations.
    """
    if out.shape != expected_shape:
        raise ValueError(f"Output array has shape {out.shape}, but expected shape {expected_shape}")
    if out.dtype != np.float64:
        raise ValueError(f"Output array has dtype {out.dtype}, but expected dtype float64")
    if not out.flags.c_contiguous:
        raise ValueError("Output array must be C-contiguous")
    if not out.flags.writeable:
        raise ValueError("Output array is not writeable")
