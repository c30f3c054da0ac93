"""NurbsSurface class: a rational tensor-product B-spline surface in 3D."""

import logging

import numpy as np
from numpy import typing as npt

from ._basis_utils import _normalize_knots, _normalize_uv_pairs
from ._knots import _check_knot_vector
from ._surface_impl import _evaluate_batch_impl, _evaluate_grid_impl, _evaluate_point_impl
from .errors import (
    InvalidKnotVectorError,
    InvalidWeightError,
    KnotLengthMismatchError,
    ShapeMismatchError,
)

logger = logging.getLogger(__name__)

_SPACE_DIM = 3


def _frozen(arr: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Mark an owned array as read-only and return it."""
    arr.flags.writeable = False
    return arr


class NurbsSurface:
    """A NURBS surface defined by a weighted control net and two knot vectors.

    The surface state is set once at construction and is read-only
    afterwards: the control points, weights and knots are copied and stored
    as non-writeable arrays. Evaluation methods are pure functions of the
    surface and their arguments, so a surface may be shared across threads.

    Example:
        >>> knots = [0.0, 0.0, 1.0, 1.0]
        >>> cps = [[[0, 0, 0], [0, 1, 0]], [[1, 0, 0], [1, 1, 0]]]
        >>> surface = NurbsSurface(1, 1, cps, np.ones((2, 2)), knots, knots)
        >>> surface.evaluate(0.5, 0.5)
        array([0.5, 0.5, 0. ])
    """

    def __init__(  # noqa: PLR0913
        self,
        degree_u: int,
        degree_v: int,
        control_points: npt.ArrayLike,
        weights: npt.ArrayLike,
        knots_u: npt.ArrayLike,
        knots_v: npt.ArrayLike,
    ) -> None:
        """Initialize a NURBS surface.

        Args:
            degree_u (int): Polynomial degree in the u direction.
            degree_v (int): Polynomial degree in the v direction.
            control_points (npt.ArrayLike): Control net of shape
                (u_count, v_count, 3).
            weights (npt.ArrayLike): Positive weights of shape (u_count, v_count).
            knots_u (npt.ArrayLike): Knot vector in u, of length
                u_count + degree_u + 1.
            knots_v (npt.ArrayLike): Knot vector in v, of length
                v_count + degree_v + 1.

        Raises:
            ShapeMismatchError: If the control net is not (u_count, v_count, 3)
                or the weights do not match its (u_count, v_count) shape.
            KnotLengthMismatchError: If a knot vector length differs from the
                control-point count plus degree plus one.
            InvalidKnotVectorError: If a degree is negative or a knot vector
                is not 1D or not non-decreasing.
            InvalidWeightError: If a weight is not finite or not positive.
        """
        try:
            cps = np.array(control_points, dtype=np.float64)
            w = np.array(weights, dtype=np.float64)
        except ValueError as err:
            raise ShapeMismatchError(f"Control net is not a regular grid: {err}") from err

        if cps.ndim != 3 or cps.shape[2] != _SPACE_DIM:  # noqa: PLR2004
            raise ShapeMismatchError(
                f"Control points must have shape (u_count, v_count, 3). Got shape {cps.shape}."
            )
        if w.shape != cps.shape[:2]:
            raise ShapeMismatchError(
                f"Weights must have the same (u, v) shape as the control points. "
                f"Got {w.shape} weights and {cps.shape[:2]} control points."
            )
        if not np.all(np.isfinite(w)) or np.any(w <= 0.0):
            raise InvalidWeightError("Weights must be finite and strictly positive.")

        u_count, v_count = cps.shape[:2]
        knots_u_arr = self._prepare_knots("u", knots_u, degree_u, u_count)
        knots_v_arr = self._prepare_knots("v", knots_v, degree_v, v_count)

        self._degree_u = int(degree_u)
        self._degree_v = int(degree_v)
        self._control_points = _frozen(cps)
        self._weights = _frozen(w)
        self._knots_u = _frozen(knots_u_arr)
        self._knots_v = _frozen(knots_v_arr)

        logger.debug(
            "Created NURBS surface of degrees (%d, %d) with a %dx%d control net",
            self._degree_u,
            self._degree_v,
            u_count,
            v_count,
        )

    @staticmethod
    def _prepare_knots(
        axis: str, knots: npt.ArrayLike, degree: int, count: int
    ) -> npt.NDArray[np.float64]:
        """Copy and validate the knot vector of one parametric direction."""
        try:
            arr = np.array(_normalize_knots(knots), dtype=np.float64)
        except (TypeError, ValueError) as err:
            raise InvalidKnotVectorError(f"Invalid knot vector in {axis}: {err}") from err

        if degree < 0:
            raise InvalidKnotVectorError(f"Degree in {axis} must be non-negative. Got {degree}.")

        expected = count + degree + 1
        if arr.size != expected:
            raise KnotLengthMismatchError(
                f"Knot vector in {axis} must have {count} + {degree} + 1 = {expected} entries. "
                f"Got {arr.size}."
            )

        try:
            _check_knot_vector(arr, int(degree))
        except (TypeError, ValueError) as err:
            raise InvalidKnotVectorError(f"Invalid knot vector in {axis}: {err}") from err

        return arr

    @classmethod
    def from_flat(  # noqa: PLR0913
        cls,
        degree_u: int,
        degree_v: int,
        u_count: int,
        v_count: int,
        flat_control_points: npt.ArrayLike,
        flat_weights: npt.ArrayLike,
        knots_u: npt.ArrayLike,
        knots_v: npt.ArrayLike,
    ) -> "NurbsSurface":
        """Create a surface from flat, row-major control point and weight buffers.

        Args:
            degree_u (int): Polynomial degree in the u direction.
            degree_v (int): Polynomial degree in the v direction.
            u_count (int): Number of control points in u.
            v_count (int): Number of control points in v.
            flat_control_points (npt.ArrayLike): Buffer of u_count*v_count*3
                coordinates, ordered by u, then v, then (x, y, z).
            flat_weights (npt.ArrayLike): Buffer of u_count*v_count weights,
                ordered by u, then v.
            knots_u (npt.ArrayLike): Knot vector in u.
            knots_v (npt.ArrayLike): Knot vector in v.

        Returns:
            NurbsSurface: The constructed surface.

        Raises:
            ShapeMismatchError: If a buffer size does not match the counts.
            SurfaceConstructionError: For any other construction failure.
        """
        if u_count < 1 or v_count < 1:
            raise ShapeMismatchError(
                f"Control point counts must be positive. Got ({u_count}, {v_count})."
            )

        cps = np.asarray(flat_control_points, dtype=np.float64).ravel()
        w = np.asarray(flat_weights, dtype=np.float64).ravel()
        if cps.size != u_count * v_count * _SPACE_DIM:
            raise ShapeMismatchError(
                f"Expected {u_count * v_count * _SPACE_DIM} control point coordinates. "
                f"Got {cps.size}."
            )
        if w.size != u_count * v_count:
            raise ShapeMismatchError(f"Expected {u_count * v_count} weights. Got {w.size}.")

        return cls(
            degree_u,
            degree_v,
            cps.reshape(u_count, v_count, _SPACE_DIM),
            w.reshape(u_count, v_count),
            knots_u,
            knots_v,
        )

    @property
    def degree_u(self) -> int:
        """The degree in the u direction."""
        return self._degree_u

    @property
    def degree_v(self) -> int:
        """The degree in the v direction."""
        return self._degree_v

    @property
    def knots_u(self) -> npt.NDArray[np.float64]:
        """The (read-only) knot vector in u."""
        return self._knots_u

    @property
    def knots_v(self) -> npt.NDArray[np.float64]:
        """The (read-only) knot vector in v."""
        return self._knots_v

    @property
    def control_points(self) -> npt.NDArray[np.float64]:
        """The (read-only) control net, of shape (u_count, v_count, 3)."""
        return self._control_points

    @property
    def weights(self) -> npt.NDArray[np.float64]:
        """The (read-only) weights, of shape (u_count, v_count)."""
        return self._weights

    def dimensions(self) -> tuple[int, int]:
        """Get the control net dimensions.

        Returns:
            tuple[int, int]: (u_count, v_count).
        """
        u_count, v_count = self._weights.shape
        return int(u_count), int(v_count)

    def control_point(self, i: int, j: int) -> npt.NDArray[np.float64]:
        """Get a copy of the control point at index (i, j)."""
        return self._control_points[i, j].copy()

    def weight(self, i: int, j: int) -> float:
        """Get the weight at index (i, j)."""
        return float(self._weights[i, j])

    def evaluate(self, u: float, v: float) -> npt.NDArray[np.float64]:
        """Evaluate the surface at the parametric coordinates (u, v).

        Args:
            u (float): Parameter in the u direction.
            v (float): Parameter in the v direction.

        Returns:
            npt.NDArray[np.float64]: The 3D point of shape (3,).
        """
        out = np.empty(_SPACE_DIM, dtype=np.float64)
        _evaluate_point_impl(
            float(u),
            float(v),
            self._degree_u,
            self._degree_v,
            self._knots_u,
            self._knots_v,
            self._control_points,
            self._weights,
            out,
        )
        return out

    def __call__(self, u: float, v: float) -> npt.NDArray[np.float64]:
        """Evaluate the surface at (u, v). Same as :meth:`evaluate`."""
        return self.evaluate(u, v)

    def evaluate_batch(self, uv: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Evaluate the surface at many parameter pairs in parallel.

        Args:
            uv (npt.ArrayLike): Parameter pairs of shape (n, 2).

        Returns:
            npt.NDArray[np.float64]: Points of shape (n, 3); row k is the
                point of pair k.

        Raises:
            ValueError: If `uv` does not have shape (n, 2).
        """
        uv_arr = _normalize_uv_pairs(uv)
        out = np.empty((uv_arr.shape[0], _SPACE_DIM), dtype=np.float64)
        _evaluate_batch_impl(
            uv_arr,
            self._degree_u,
            self._degree_v,
            self._knots_u,
            self._knots_v,
            self._control_points,
            self._weights,
            out,
        )
        return out

    def evaluate_grid(self, u_samples: int, v_samples: int) -> npt.NDArray[np.float64]:
        """Evaluate the surface on a uniform grid over [0, 1] x [0, 1].

        Sample (i, j) is taken at ``u = i / (u_samples - 1)`` and
        ``v = j / (v_samples - 1)``. Rows are evaluated in parallel.

        Args:
            u_samples (int): Number of samples in u. Must be at least 2.
            v_samples (int): Number of samples in v. Must be at least 2.

        Returns:
            npt.NDArray[np.float64]: Grid of points of shape
                (u_samples, v_samples, 3).

        Raises:
            ValueError: If a sample count is smaller than 2.
        """
        if u_samples < 2 or v_samples < 2:  # noqa: PLR2004
            raise ValueError(
                f"Grid evaluation needs at least 2 samples per direction. "
                f"Got ({u_samples}, {v_samples})."
            )

        out = np.empty((int(u_samples), int(v_samples), _SPACE_DIM), dtype=np.float64)
        _evaluate_grid_impl(
            self._degree_u,
            self._degree_v,
            self._knots_u,
            self._knots_v,
            self._control_points,
            self._weights,
            out,
        )
        return out

    def __repr__(self) -> str:
        """Return a short description of the surface."""
        u_count, v_count = self.dimensions()
        return (
            f"NurbsSurface(degree_u={self._degree_u}, degree_v={self._degree_v}, "
            f"control_net=({u_count}, {v_count}))"
        )
