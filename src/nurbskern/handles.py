"""Handle-based boundary for language bridges and foreign callers.

A :class:`SurfaceRegistry` owns surfaces and hands out opaque
:class:`SurfaceHandle` values (slot index plus generation). Every operation
accepts flat buffers and never raises: an unknown, stale or malformed handle,
or a buffer of the wrong size, results in a ``None`` (or ``False``) return
and a logged warning. Freed slots are reused with a bumped generation, so a
handle kept after :meth:`SurfaceRegistry.free` is detected as stale instead
of reaching a different surface.
"""

import logging
import operator
import threading
from typing import NamedTuple

import numpy as np
from numpy import typing as npt

from .differential import compute_curvature, compute_normal
from .errors import SurfaceConstructionError
from .surface import NurbsSurface

logger = logging.getLogger(__name__)


class SurfaceHandle(NamedTuple):
    """Opaque reference to a surface owned by a :class:`SurfaceRegistry`."""

    index: int
    generation: int


class _Slot:
    __slots__ = ("generation", "surface")

    def __init__(self) -> None:
        self.generation = 0
        self.surface: NurbsSurface | None = None


def _flat_buffer(buffer: npt.ArrayLike | None, min_size: int) -> npt.NDArray[np.float64] | None:
    """Convert a buffer to a flat float64 array holding at least `min_size` entries."""
    if buffer is None:
        return None
    try:
        arr = np.asarray(buffer, dtype=np.float64).ravel()
    except (TypeError, ValueError):
        return None
    if arr.size < min_size:
        return None
    return arr


def _as_int(value: object) -> int | None:
    """Convert an integer-like count or length, or return None."""
    try:
        return operator.index(value)  # type: ignore[arg-type]
    except TypeError:
        return None


def _as_param(value: object) -> float | None:
    """Convert a parameter value to a float, or return None."""
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _as_params(operation: str, u: object, v: object) -> tuple[float, float] | None:
    u_val, v_val = _as_param(u), _as_param(v)
    if u_val is None or v_val is None:
        logger.warning("%s: invalid parameters (%r, %r)", operation, u, v)
        return None
    return u_val, v_val


class SurfaceRegistry:
    """Generational handle table owning NURBS surfaces.

    Creating and freeing surfaces is serialized by an internal lock.
    Evaluations only read an immutable surface and run without locking.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._slots: list[_Slot] = []
        self._free_slots: list[int] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        """Number of live surfaces."""
        return sum(1 for slot in self._slots if slot.surface is not None)

    def __contains__(self, handle: object) -> bool:
        """Whether `handle` refers to a live surface of this registry."""
        return self.get(handle) is not None

    def get(self, handle: object) -> NurbsSurface | None:
        """Resolve a handle to its surface.

        Args:
            handle (object): A handle previously returned by :meth:`create`.

        Returns:
            NurbsSurface | None: The surface, or None if the handle is not a
                live handle of this registry.
        """
        if not isinstance(handle, SurfaceHandle):
            return None
        index, generation = handle
        if not isinstance(index, int) or not 0 <= index < len(self._slots):
            return None
        slot = self._slots[index]
        if slot.generation != generation:
            return None
        return slot.surface

    def _resolve(self, handle: object, operation: str) -> NurbsSurface | None:
        surface = self.get(handle)
        if surface is None:
            logger.warning("%s: invalid or freed surface handle %r", operation, handle)
        return surface

    def create(  # noqa: PLR0913
        self,
        degree_u: int,
        degree_v: int,
        u_count: int,
        v_count: int,
        flat_control_points: npt.ArrayLike,
        flat_weights: npt.ArrayLike,
        knots_u: npt.ArrayLike,
        knots_v: npt.ArrayLike,
        knots_u_len: int | None = None,
        knots_v_len: int | None = None,
    ) -> SurfaceHandle | None:
        """Create a surface from flat buffers and register it.

        Args:
            degree_u (int): Degree in the u direction.
            degree_v (int): Degree in the v direction.
            u_count (int): Number of control points in u.
            v_count (int): Number of control points in v.
            flat_control_points (npt.ArrayLike): u_count*v_count*3 coordinates,
                ordered by u, then v, then (x, y, z).
            flat_weights (npt.ArrayLike): u_count*v_count weights.
            knots_u (npt.ArrayLike): Knot buffer in u.
            knots_v (npt.ArrayLike): Knot buffer in v.
            knots_u_len (int | None): Number of knots to read from `knots_u`.
                Defaults to the whole buffer.
            knots_v_len (int | None): Number of knots to read from `knots_v`.
                Defaults to the whole buffer.

        Returns:
            SurfaceHandle | None: Handle to the new surface, or None if the
                inputs are malformed.
        """
        try:
            knots_u_arr = np.asarray(knots_u, dtype=np.float64).ravel()
            knots_v_arr = np.asarray(knots_v, dtype=np.float64).ravel()
        except (TypeError, ValueError) as err:
            logger.warning("create: invalid knot buffer: %s", err)
            return None

        sizes = [_as_int(value) for value in (degree_u, degree_v, u_count, v_count)]
        if any(size is None for size in sizes):
            logger.warning(
                "create: degrees and counts must be integers, got %r",
                (degree_u, degree_v, u_count, v_count),
            )
            return None

        knot_buffers = (("u", knots_u_arr, knots_u_len), ("v", knots_v_arr, knots_v_len))
        sliced = []
        for axis, arr, length in knot_buffers:
            if length is None:
                sliced.append(arr)
                continue
            count = _as_int(length)
            if count is None or not 0 <= count <= arr.size:
                logger.warning(
                    "create: knot length %r in %s does not fit the buffer size %d",
                    length,
                    axis,
                    arr.size,
                )
                return None
            sliced.append(arr[:count])

        try:
            surface = NurbsSurface.from_flat(
                *sizes,
                flat_control_points,
                flat_weights,
                *sliced,
            )
        except (SurfaceConstructionError, TypeError, ValueError) as err:
            logger.warning("create: %s", err)
            return None

        with self._lock:
            if self._free_slots:
                index = self._free_slots.pop()
                slot = self._slots[index]
            else:
                index = len(self._slots)
                slot = _Slot()
                self._slots.append(slot)
            slot.surface = surface
            return SurfaceHandle(index, slot.generation)

    def free(self, handle: object) -> bool:
        """Release a surface. Its handle becomes stale.

        Args:
            handle (object): Handle to release.

        Returns:
            bool: True if a live surface was released, False if the handle
                was invalid or already freed.
        """
        with self._lock:
            if not isinstance(handle, SurfaceHandle) or self.get(handle) is None:
                logger.warning("free: invalid or freed surface handle %r", handle)
                return False
            slot = self._slots[handle.index]
            slot.surface = None
            slot.generation += 1
            self._free_slots.append(handle.index)
            return True

    def evaluate(self, handle: object, u: float, v: float) -> npt.NDArray[np.float64] | None:
        """Evaluate a surface point. Returns (x, y, z) or None."""
        surface = self._resolve(handle, "evaluate")
        params = _as_params("evaluate", u, v)
        if surface is None or params is None:
            return None
        return surface.evaluate(*params)

    def evaluate_batch(
        self, handle: object, flat_uv: npt.ArrayLike, n: int
    ) -> npt.NDArray[np.float64] | None:
        """Evaluate n parameter pairs given as a flat (u0, v0, u1, v1, ...) buffer.

        Returns:
            npt.NDArray[np.float64] | None: Flat buffer of n*3 coordinates, or
                None if the handle, the count or the buffer is invalid.
        """
        surface = self._resolve(handle, "evaluate_batch")
        if surface is None:
            return None
        count = _as_int(n)
        if count is None or count < 0:
            logger.warning("evaluate_batch: invalid point count %r", n)
            return None
        uv = _flat_buffer(flat_uv, 2 * count)
        if uv is None:
            logger.warning("evaluate_batch: uv buffer does not hold %d pairs", count)
            return None
        return surface.evaluate_batch(uv[: 2 * count].reshape(count, 2)).ravel()

    def evaluate_grid(
        self, handle: object, u_samples: int, v_samples: int
    ) -> npt.NDArray[np.float64] | None:
        """Evaluate a uniform grid.

        Returns:
            npt.NDArray[np.float64] | None: Flat buffer of
                u_samples*v_samples*3 coordinates ordered by u, then v, then
                (x, y, z), or None if the handle is invalid or a sample count
                is not an integer of at least 2.
        """
        surface = self._resolve(handle, "evaluate_grid")
        if surface is None:
            return None
        u_count, v_count = _as_int(u_samples), _as_int(v_samples)
        if u_count is None or v_count is None or u_count < 2 or v_count < 2:  # noqa: PLR2004
            logger.warning(
                "evaluate_grid: need at least 2 samples per direction, got (%r, %r)",
                u_samples,
                v_samples,
            )
            return None
        return surface.evaluate_grid(u_count, v_count).ravel()

    def normal(self, handle: object, u: float, v: float) -> npt.NDArray[np.float64] | None:
        """Compute the unit normal. Returns (nx, ny, nz) or None."""
        surface = self._resolve(handle, "normal")
        params = _as_params("normal", u, v)
        if surface is None or params is None:
            return None
        return compute_normal(surface, *params)

    def curvature(self, handle: object, u: float, v: float) -> npt.NDArray[np.float64] | None:
        """Compute the principal curvatures. Returns (k1, k2) or None."""
        surface = self._resolve(handle, "curvature")
        params = _as_params("curvature", u, v)
        if surface is None or params is None:
            return None
        return np.array(compute_curvature(surface, *params), dtype=np.float64)

    def dimensions(self, handle: object) -> tuple[int, int] | None:
        """Get the control net dimensions (u_count, v_count), or None."""
        surface = self._resolve(handle, "dimensions")
        if surface is None:
            return None
        return surface.dimensions()
