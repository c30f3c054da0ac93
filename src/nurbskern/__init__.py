"""Public API surface for NURBSkern.

Defines package metadata and exported interfaces.
"""

from typing import Final

# Private API imports (accessible but not in __all__)
# Users can access private kernels via: nurbskern._basis_core._function_name, etc.
from . import (
    _basis_core,  # noqa: F401
    _surface_impl,  # noqa: F401
)

# Public API imports
from ._knots import create_uniform_open_knot_vector
from .basis import (
    BasisFunctionSet,
    basis_funs,
    compute_basis_function_set,
    evaluate_basis,
    evaluate_basis_derivatives,
    find_span,
)
from .differential import (
    CurvatureResult,
    compute_curvature,
    compute_normal,
    compute_tangent,
)
from .errors import (
    InvalidKnotVectorError,
    InvalidWeightError,
    KnotLengthMismatchError,
    ShapeMismatchError,
    SurfaceConstructionError,
)
from .handles import SurfaceHandle, SurfaceRegistry
from .surface import NurbsSurface
from .tolerance import (
    DegeneracyThresholds,
    DifferentiationSteps,
    create_differentiation_steps,
    get_degeneracy_thresholds,
    get_differentiation_steps,
    get_machine_epsilon,
)

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "NURBSkern developers"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "BasisFunctionSet",
    "CurvatureResult",
    "DegeneracyThresholds",
    "DifferentiationSteps",
    "InvalidKnotVectorError",
    "InvalidWeightError",
    "KnotLengthMismatchError",
    "NurbsSurface",
    "ShapeMismatchError",
    "SurfaceConstructionError",
    "SurfaceHandle",
    "SurfaceRegistry",
    "__author__",
    "__license__",
    "__version__",
    "basis_funs",
    "compute_basis_function_set",
    "compute_curvature",
    "compute_normal",
    "compute_tangent",
    "create_differentiation_steps",
    "create_uniform_open_knot_vector",
    "evaluate_basis",
    "evaluate_basis_derivatives",
    "find_span",
    "get_degeneracy_thresholds",
    "get_differentiation_steps",
    "get_machine_epsilon",
]
