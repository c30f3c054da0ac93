"""Differential geometry of NURBS surfaces by finite differences.

Tangents, normals and principal curvatures are estimated from point
evaluations only (``surface.evaluate``). Perturbed parameters are clamped
into [0, 1] while the stencil denominators keep the nominal step, so at the
domain boundary the estimates use a smaller effective step.

Degenerate parameterizations do not raise: a vanishing tangent cross
product yields the fallback normal (0, 0, 1) and a vanishing first
fundamental form determinant yields zero curvatures.
"""

from typing import NamedTuple, Protocol

import numpy as np
from numpy import typing as npt

from .tolerance import (
    NORMAL_FALLBACK,
    _validate_step,
    get_degeneracy_thresholds,
    get_differentiation_steps,
)


class PointEvaluator(Protocol):
    """Anything exposing the point-evaluation primitive of a surface."""

    def evaluate(self, u: float, v: float) -> npt.NDArray[np.float64]:
        """Evaluate the 3D point at (u, v)."""
        ...


class CurvatureResult(NamedTuple):
    """Principal curvatures at a surface point, with ``k1 >= k2``."""

    k1: float
    k2: float

    @property
    def gaussian(self) -> float:
        """Gaussian curvature, the product of the principal curvatures."""
        return self.k1 * self.k2

    @property
    def mean(self) -> float:
        """Mean curvature, the average of the principal curvatures."""
        return 0.5 * (self.k1 + self.k2)


def _clamp(t: float) -> float:
    return min(max(t, 0.0), 1.0)


def compute_tangent(
    surface: PointEvaluator, u: float, v: float, step: float | None = None
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Compute the parametric tangent vectors at (u, v).

    Central differences ``(P(u+h, v) - P(u-h, v)) / 2h`` in each direction.

    Args:
        surface (PointEvaluator): The surface.
        u (float): Parameter in the u direction.
        v (float): Parameter in the v direction.
        step (float | None): Finite-difference step. Defaults to the tangent
            step of :func:`~nurbskern.tolerance.get_differentiation_steps`.

    Returns:
        tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]: The partial
            derivatives (du, dv), each of shape (3,).

    Raises:
        ValueError: If `step` is not finite or lies outside (sqrt(eps), 0.5).
    """
    h = get_differentiation_steps().tangent if step is None else _validate_step("tangent", step)

    du = (surface.evaluate(_clamp(u + h), v) - surface.evaluate(_clamp(u - h), v)) / (2.0 * h)
    dv = (surface.evaluate(u, _clamp(v + h)) - surface.evaluate(u, _clamp(v - h))) / (2.0 * h)

    return du, dv


def compute_normal(
    surface: PointEvaluator, u: float, v: float, step: float | None = None
) -> npt.NDArray[np.float64]:
    """Compute the unit surface normal at (u, v).

    The normal is ``du x dv`` normalized. When the cross product is shorter
    than the degeneracy threshold (collapsed or singular parameterization),
    the fallback normal (0, 0, 1) is returned.

    Args:
        surface (PointEvaluator): The surface.
        u (float): Parameter in the u direction.
        v (float): Parameter in the v direction.
        step (float | None): Finite-difference step for the tangents.

    Returns:
        npt.NDArray[np.float64]: Unit normal of shape (3,).

    Raises:
        ValueError: If `step` is given and is not a valid step.
    """
    du, dv = compute_tangent(surface, u, v, step)
    normal = np.cross(du, dv)
    length = float(np.linalg.norm(normal))

    if length < get_degeneracy_thresholds().normal:
        return np.array(NORMAL_FALLBACK, dtype=np.float64)

    return normal / length


def compute_curvature(
    surface: PointEvaluator, u: float, v: float, step: float | None = None
) -> CurvatureResult:
    """Compute the principal curvatures at (u, v).

    First and second partial derivatives are estimated with central
    differences of step `step`; the mixed partial uses the symmetric stencil

        ``(P(u+h, v+h) - P(u+h, v-h) - P(u-h, v+h) + P(u-h, v-h)) / 4h^2``.

    With the first (E, F, G) and second (L, M, N) fundamental forms,

        K = (LN - M^2) / (EG - F^2),
        H = (EN - 2FM + GL) / (2 (EG - F^2)),
        k1, k2 = H +- sqrt(max(H^2 - K, 0)).

    The sign of the curvatures follows the orientation of
    :func:`compute_normal`. When ``|EG - F^2|`` is below the degeneracy
    threshold, (0, 0) is returned.

    Args:
        surface (PointEvaluator): The surface.
        u (float): Parameter in the u direction.
        v (float): Parameter in the v direction.
        step (float | None): Finite-difference step for the derivative
            stencils. Defaults to the curvature step of
            :func:`~nurbskern.tolerance.get_differentiation_steps`.

    Returns:
        CurvatureResult: The principal curvatures (k1, k2), k1 >= k2.

    Raises:
        ValueError: If `step` is given and is not a valid step.
    """
    h = (
        get_differentiation_steps().curvature
        if step is None
        else _validate_step("curvature", step)
    )

    u_p, u_m = _clamp(u + h), _clamp(u - h)
    v_p, v_m = _clamp(v + h), _clamp(v - h)

    p = surface.evaluate(u, v)
    p_u_plus = surface.evaluate(u_p, v)
    p_u_minus = surface.evaluate(u_m, v)
    p_v_plus = surface.evaluate(u, v_p)
    p_v_minus = surface.evaluate(u, v_m)

    du = (p_u_plus - p_u_minus) / (2.0 * h)
    dv = (p_v_plus - p_v_minus) / (2.0 * h)

    duu = (p_u_plus - 2.0 * p + p_u_minus) / (h * h)
    dvv = (p_v_plus - 2.0 * p + p_v_minus) / (h * h)
    duv = (
        surface.evaluate(u_p, v_p)
        - surface.evaluate(u_p, v_m)
        - surface.evaluate(u_m, v_p)
        + surface.evaluate(u_m, v_m)
    ) / (4.0 * h * h)

    n = compute_normal(surface, u, v)

    e = float(np.dot(du, du))
    f = float(np.dot(du, dv))
    g = float(np.dot(dv, dv))

    l_coef = float(np.dot(duu, n))
    m_coef = float(np.dot(duv, n))
    n_coef = float(np.dot(dvv, n))

    denom = e * g - f * f
    if abs(denom) < get_degeneracy_thresholds().metric:
        return CurvatureResult(0.0, 0.0)

    k_gaussian = (l_coef * n_coef - m_coef * m_coef) / denom
    k_mean = (e * n_coef - 2.0 * f * m_coef + g * l_coef) / (2.0 * denom)

    disc = float(np.sqrt(max(k_mean * k_mean - k_gaussian, 0.0)))
    return CurvatureResult(k_mean + disc, k_mean - disc)
