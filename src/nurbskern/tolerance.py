"""Step sizes and degeneracy thresholds for numerical surface differentiation."""

from functools import cache
from typing import Any, Final, NamedTuple, cast

import numpy as np
from numpy import typing as npt


@cache
def _ensure_float_dtype_by_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached validator returning a floating dtype from its canonical name.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64").

    Returns:
        np.dtype[np.floating[Any]]: Validated floating-point dtype.

    Raises:
        ValueError: If dtype is not a supported floating-point type.
    """
    dtype_obj = np.dtype(name)
    if dtype_obj.type not in (np.float16, np.float32, np.float64, np.longdouble):
        raise ValueError(f"Unsupported dtype: {name}")
    return cast(np.dtype[np.floating[Any]], dtype_obj)


def _ensure_float_dtype(dtype: npt.DTypeLike) -> np.dtype[np.floating[Any]]:
    """Normalize and validate a dtype-like into a floating dtype."""
    dtype_obj = np.dtype(dtype)
    return _ensure_float_dtype_by_name(dtype_obj.name)


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon for a given floating-point dtype.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Machine epsilon for the given dtype.

    Raises:
        ValueError: If dtype is not a supported floating-point type.
    """
    return float(np.finfo(_ensure_float_dtype(dtype)).eps)


class DifferentiationSteps(NamedTuple):
    """Parametric step sizes used by the finite-difference stencils.

    The curvature step is used by the second-difference stencils, which
    divide by its square, and is larger than the tangent step.
    """

    tangent: float
    curvature: float


class DegeneracyThresholds(NamedTuple):
    """Magnitudes below which a differential quantity is treated as degenerate."""

    normal: float
    metric: float


_DEFAULT_STEPS: Final[DifferentiationSteps] = DifferentiationSteps(tangent=1e-6, curvature=1e-3)

_DEFAULT_THRESHOLDS: Final[DegeneracyThresholds] = DegeneracyThresholds(
    normal=1e-10, metric=1e-14
)

NORMAL_FALLBACK: Final[tuple[float, float, float]] = (0.0, 0.0, 1.0)

_MAX_STEP: Final[float] = 0.5


def get_differentiation_steps() -> DifferentiationSteps:
    """Get the default finite-difference step sizes.

    Returns:
        DifferentiationSteps: Tangent step 1e-6 and curvature step 1e-3.
    """
    return _DEFAULT_STEPS


def get_degeneracy_thresholds() -> DegeneracyThresholds:
    """Get the thresholds for the degenerate normal and metric fallbacks.

    Returns:
        DegeneracyThresholds: Cross-product magnitude 1e-10 and first
            fundamental form determinant 1e-14.
    """
    return _DEFAULT_THRESHOLDS


def _validate_step(name: str, value: float) -> float:
    """Check a finite-difference step and return it as a float.

    Raises:
        ValueError: If the step is not finite, is not larger than the square
            root of the float64 machine epsilon, or is not smaller than 0.5.
    """
    min_step = float(np.sqrt(get_machine_epsilon(np.float64)))
    if not np.isfinite(value):
        raise ValueError(f"{name} step must be finite")
    if value <= min_step:
        raise ValueError(f"{name} step must be larger than {min_step:.3e}")
    if value >= _MAX_STEP:
        raise ValueError(f"{name} step must be smaller than {_MAX_STEP}")
    return float(value)


def create_differentiation_steps(tangent: float, curvature: float) -> DifferentiationSteps:
    """Create a validated set of finite-difference step sizes.

    Args:
        tangent (float): Step used for first derivatives (tangents, normal).
        curvature (float): Step used for the second-derivative stencils.

    Returns:
        DifferentiationSteps: The validated steps.

    Raises:
        ValueError: If a step is not finite, is not larger than the square
            root of the float64 machine epsilon, or is not smaller than 0.5.

    Example:
        >>> create_differentiation_steps(1e-5, 1e-3)
        DifferentiationSteps(tangent=1e-05, curvature=0.001)
    """
    return DifferentiationSteps(
        tangent=_validate_step("tangent", tangent),
        curvature=_validate_step("curvature", curvature),
    )
