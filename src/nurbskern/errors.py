"""Exceptions raised when a NURBS surface cannot be constructed."""


class SurfaceConstructionError(ValueError):
    """Base class for malformed surface definitions."""


class ShapeMismatchError(SurfaceConstructionError):
    """Control points or weights do not have consistent grid shapes."""


class KnotLengthMismatchError(SurfaceConstructionError):
    """A knot vector length differs from control-point count + degree + 1."""


class InvalidKnotVectorError(SurfaceConstructionError):
    """A knot vector is not 1D, too short for its degree, or decreasing."""


class InvalidWeightError(SurfaceConstructionError):
    """A weight is not finite or not strictly positive."""
