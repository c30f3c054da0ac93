"""Tests for tangents, normals and principal curvatures."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import numpy.testing as nptest
import pytest

from nurbskern import (
    CurvatureResult,
    NurbsSurface,
    compute_curvature,
    compute_normal,
    compute_tangent,
    create_differentiation_steps,
)

QUARTER_ARC = np.array([[1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
QUARTER_ARC_WEIGHTS = np.array([1.0, np.sqrt(0.5), 1.0])
QUADRATIC_BEZIER_KNOTS = [0.0, 0.0, 0.0, 1.0, 1.0, 1.0]


def _quarter_cylinder(radius: float, height: float) -> NurbsSurface:
    """Quarter cylinder around the z axis: circular in u, straight in v."""
    cps = np.zeros((3, 2, 3))
    for i in range(3):
        for j in range(2):
            cps[i, j] = [radius * QUARTER_ARC[i, 0], radius * QUARTER_ARC[i, 1], height * j]
    weights = np.repeat(QUARTER_ARC_WEIGHTS[:, None], 2, axis=1)
    return NurbsSurface(2, 1, cps, weights, QUADRATIC_BEZIER_KNOTS, [0.0, 0.0, 1.0, 1.0])


def _sphere_octant() -> NurbsSurface:
    """Unit sphere octant: a meridian arc in u swept around the z axis in v."""
    cps = np.zeros((3, 3, 3))
    weights = np.zeros((3, 3))
    for i in range(3):
        r, z = QUARTER_ARC[i]
        for j in range(3):
            x, y = QUARTER_ARC[j]
            cps[i, j] = [r * x, r * y, z]
            weights[i, j] = QUARTER_ARC_WEIGHTS[i] * QUARTER_ARC_WEIGHTS[j]
    return NurbsSurface(2, 2, cps, weights, QUADRATIC_BEZIER_KNOTS, QUADRATIC_BEZIER_KNOTS)


class _AnalyticSurface:
    """Surface given by a height function over the unit square centered at the origin."""

    def __init__(self, height: Callable[[float, float], float]) -> None:
        self._height = height

    def evaluate(self, u: float, v: float) -> np.ndarray:
        x, y = u - 0.5, v - 0.5
        return np.array([x, y, self._height(x, y)])


class TestCurvatureResult:
    """Test the curvature result tuple."""

    def test_fields_and_derived_values(self) -> None:
        """Gaussian and mean curvature are derived from k1 and k2."""
        result = CurvatureResult(2.0, -0.5)
        k1, k2 = result
        assert (k1, k2) == (2.0, -0.5)
        assert result.gaussian == -1.0
        assert result.mean == 0.75  # noqa: PLR2004


class TestTangent:
    """Test central-difference tangents."""

    def test_flat_square(self, flat_square: NurbsSurface) -> None:
        """The bilinear square has unit axis-aligned tangents."""
        du, dv = compute_tangent(flat_square, 0.5, 0.5)
        nptest.assert_allclose(du, [1.0, 0.0, 0.0], atol=1e-8)
        nptest.assert_allclose(dv, [0.0, 1.0, 0.0], atol=1e-8)

    def test_custom_step(self, flat_square: NurbsSurface) -> None:
        """Any step is exact on a bilinear surface away from the boundary."""
        du, dv = compute_tangent(flat_square, 0.5, 0.5, step=0.1)
        nptest.assert_allclose(du, [1.0, 0.0, 0.0], atol=1e-12)
        nptest.assert_allclose(dv, [0.0, 1.0, 0.0], atol=1e-12)

    def test_clamped_at_boundary(self, flat_square: NurbsSurface) -> None:
        """At the boundary the clamped stencil halves the estimate."""
        du, dv = compute_tangent(flat_square, 0.0, 1.0, step=0.1)
        nptest.assert_allclose(du, [0.5, 0.0, 0.0], atol=1e-12)
        nptest.assert_allclose(dv, [0.0, 0.5, 0.0], atol=1e-12)


class TestNormal:
    """Test unit normals."""

    @pytest.mark.parametrize(("u", "v"), [(0.5, 0.5), (0.1, 0.9), (0.0, 0.0), (1.0, 1.0)])
    def test_planar_normal(self, bicubic_plane: NurbsSurface, u: float, v: float) -> None:
        """The normal of the xy-plane is +z."""
        nptest.assert_allclose(compute_normal(bicubic_plane, u, v), [0.0, 0.0, 1.0], atol=1e-10)

    @pytest.mark.parametrize(("u", "v"), [(0.2, 0.3), (0.5, 0.5), (0.77, 0.12), (0.95, 0.6)])
    def test_unit_length_and_orthogonal(
        self, wavy_surface: NurbsSurface, u: float, v: float
    ) -> None:
        """Normals are unit vectors orthogonal to both tangents."""
        normal = compute_normal(wavy_surface, u, v)
        assert abs(np.linalg.norm(normal) - 1.0) < 1e-10  # noqa: PLR2004
        du, dv = compute_tangent(wavy_surface, u, v)
        assert abs(np.dot(normal, du)) < 1e-8  # noqa: PLR2004
        assert abs(np.dot(normal, dv)) < 1e-8  # noqa: PLR2004

    def test_cylinder_normal_points_outward(self) -> None:
        """The cylinder normal is radial."""
        surface = _quarter_cylinder(2.0, 1.0)
        point = surface.evaluate(0.5, 0.5)
        radial = np.array([point[0], point[1], 0.0]) / np.hypot(point[0], point[1])
        nptest.assert_allclose(compute_normal(surface, 0.5, 0.5), radial, atol=1e-6)

    @pytest.mark.parametrize(("u", "v"), [(0.3, 0.4), (0.5, 0.5), (0.7, 0.2)])
    def test_sphere_normal_is_radial(self, u: float, v: float) -> None:
        """On the unit sphere the normal is parallel to the position."""
        surface = _sphere_octant()
        point = surface.evaluate(u, v)
        assert abs(np.linalg.norm(point) - 1.0) < 1e-12  # noqa: PLR2004
        alignment = abs(np.dot(compute_normal(surface, u, v), point))
        assert alignment == pytest.approx(1.0, abs=1e-6)

    def test_degenerate_surface_fallback(self) -> None:
        """A surface collapsed to a point gets the fallback normal."""
        cps = np.tile([1.0, 2.0, 3.0], (3, 3, 1))
        surface = NurbsSurface(
            2, 2, cps, np.ones((3, 3)), QUADRATIC_BEZIER_KNOTS, QUADRATIC_BEZIER_KNOTS
        )
        nptest.assert_array_equal(compute_normal(surface, 0.4, 0.6), [0.0, 0.0, 1.0])

    def test_collapsed_edge_fallback(self) -> None:
        """A parameter line collapsed to a point gets the fallback normal."""
        cps = np.zeros((2, 2, 3))
        cps[1, 0] = [1.0, 0.0, 0.0]
        cps[1, 1] = [1.0, 1.0, 0.0]
        knots = [0.0, 0.0, 1.0, 1.0]
        surface = NurbsSurface(1, 1, cps, np.ones((2, 2)), knots, knots)
        nptest.assert_array_equal(compute_normal(surface, 0.0, 0.5), [0.0, 0.0, 1.0])


class TestCurvature:
    """Test principal curvatures."""

    @pytest.mark.parametrize(("u", "v"), [(0.5, 0.5), (0.2, 0.8)])
    def test_plane_is_flat(self, bicubic_plane: NurbsSurface, u: float, v: float) -> None:
        """Both principal curvatures of a plane vanish."""
        k1, k2 = compute_curvature(bicubic_plane, u, v)
        assert abs(k1) < 1e-9  # noqa: PLR2004
        assert abs(k2) < 1e-9  # noqa: PLR2004

    @pytest.mark.parametrize("radius", [0.5, 2.0, 10.0])
    def test_cylinder(self, radius: float) -> None:
        """A cylinder bends in one direction only, with curvature 1/R."""
        result = compute_curvature(_quarter_cylinder(radius, 1.0), 0.5, 0.5)
        assert result.k1 == pytest.approx(0.0, abs=1e-5)
        assert result.k2 == pytest.approx(-1.0 / radius, rel=1e-4)
        assert result.gaussian == pytest.approx(0.0, abs=1e-5)

    @pytest.mark.parametrize(("u", "v"), [(0.3, 0.4), (0.5, 0.5), (0.6, 0.85)])
    def test_sphere(self, u: float, v: float) -> None:
        """The unit sphere is umbilic with unit curvature."""
        result = compute_curvature(_sphere_octant(), u, v)
        assert abs(result.k1) == pytest.approx(1.0, abs=1e-3)
        assert abs(result.k2) == pytest.approx(1.0, abs=1e-3)
        assert result.gaussian == pytest.approx(1.0, abs=2e-3)

    def test_ordering(self, wavy_surface: NurbsSurface) -> None:
        """The first principal curvature is never smaller than the second."""
        for u in np.linspace(0.05, 0.95, 5):
            for v in np.linspace(0.05, 0.95, 5):
                k1, k2 = compute_curvature(wavy_surface, u, v)
                assert k1 >= k2
                assert np.isfinite(k1)
                assert np.isfinite(k2)

    def test_paraboloid(self) -> None:
        """z = (x^2 + y^2) / 2 has unit curvature at its apex."""
        surface = _AnalyticSurface(lambda x, y: 0.5 * (x * x + y * y))
        k1, k2 = compute_curvature(surface, 0.5, 0.5)
        assert k1 == pytest.approx(1.0, abs=1e-6)
        assert k2 == pytest.approx(1.0, abs=1e-6)

    def test_saddle_uses_mixed_derivative(self) -> None:
        """z = xy has principal curvatures +1 and -1 at the origin."""
        surface = _AnalyticSurface(lambda x, y: x * y)
        result = compute_curvature(surface, 0.5, 0.5)
        assert result.k1 == pytest.approx(1.0, abs=1e-6)
        assert result.k2 == pytest.approx(-1.0, abs=1e-6)
        assert result.mean == pytest.approx(0.0, abs=1e-6)

    def test_custom_step(self) -> None:
        """A validated custom step gives the same cylinder curvature."""
        steps = create_differentiation_steps(1e-6, 1e-2)
        result = compute_curvature(_quarter_cylinder(2.0, 1.0), 0.5, 0.5, step=steps.curvature)
        assert result.k2 == pytest.approx(-0.5, rel=1e-2)

    def test_degenerate_surface_fallback(self) -> None:
        """A surface collapsed to a point has zero curvature."""
        cps = np.tile([1.0, 2.0, 3.0], (3, 3, 1))
        surface = NurbsSurface(
            2, 2, cps, np.ones((3, 3)), QUADRATIC_BEZIER_KNOTS, QUADRATIC_BEZIER_KNOTS
        )
        assert compute_curvature(surface, 0.5, 0.5) == CurvatureResult(0.0, 0.0)


class TestStepValidation:
    """Test that custom finite-difference steps are checked."""

    @pytest.mark.parametrize("step", [0.0, -1e-3, 1e-10, 0.5, np.nan, np.inf])
    def test_invalid_tangent_step(self, flat_square: NurbsSurface, step: float) -> None:
        """Tangents and normals reject steps that would divide by zero or overshoot."""
        with pytest.raises(ValueError, match="tangent step must be"):
            compute_tangent(flat_square, 0.5, 0.5, step=step)
        with pytest.raises(ValueError, match="tangent step must be"):
            compute_normal(flat_square, 0.5, 0.5, step=step)

    @pytest.mark.parametrize("step", [0.0, -1e-3, 1e-10, 0.75, np.nan])
    def test_invalid_curvature_step(self, flat_square: NurbsSurface, step: float) -> None:
        """Curvature rejects invalid steps instead of returning NaN."""
        with pytest.raises(ValueError, match="curvature step must be"):
            compute_curvature(flat_square, 0.5, 0.5, step=step)

    def test_validated_steps_are_accepted(self, wavy_surface: NurbsSurface) -> None:
        """Steps built with create_differentiation_steps pass through unchanged."""
        steps = create_differentiation_steps(1e-5, 2e-3)
        normal = compute_normal(wavy_surface, 0.4, 0.6, step=steps.tangent)
        assert np.all(np.isfinite(normal))
        k1, k2 = compute_curvature(wavy_surface, 0.4, 0.6, step=steps.curvature)
        assert np.isfinite(k1)
        assert np.isfinite(k2)
