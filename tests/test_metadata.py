"""Smoke tests for package metadata.

Validates public attributes exposed via the package API.
"""

from __future__ import annotations

import importlib
from typing import Final

import nurbskern


def test_package_all_exports() -> None:
    """Ensure all expected symbols are exported."""
    expected_metadata: Final[set[str]] = {"__version__", "__license__", "__author__"}
    assert expected_metadata.issubset(set(nurbskern.__all__))

    expected_public_api: Final[set[str]] = {
        # Basis functions
        "BasisFunctionSet",
        "basis_funs",
        "compute_basis_function_set",
        "evaluate_basis",
        "evaluate_basis_derivatives",
        "find_span",
        # Knots
        "create_uniform_open_knot_vector",
        # Surfaces
        "NurbsSurface",
        "SurfaceConstructionError",
        "ShapeMismatchError",
        "KnotLengthMismatchError",
        "InvalidKnotVectorError",
        "InvalidWeightError",
        # Differential geometry
        "CurvatureResult",
        "compute_curvature",
        "compute_normal",
        "compute_tangent",
        # Handles
        "SurfaceHandle",
        "SurfaceRegistry",
        # Tolerance
        "DegeneracyThresholds",
        "DifferentiationSteps",
        "create_differentiation_steps",
        "get_degeneracy_thresholds",
        "get_differentiation_steps",
        "get_machine_epsilon",
    }

    assert expected_public_api.issubset(set(nurbskern.__all__))

    # Only metadata may start with an underscore
    private_in_all = {name for name in nurbskern.__all__ if name.startswith("_")}
    assert private_in_all.issubset(expected_metadata)

    expected_all = expected_metadata | expected_public_api
    assert set(nurbskern.__all__) == expected_all


def test_exported_symbols_resolve() -> None:
    """Every name in __all__ is an attribute of the package."""
    for name in nurbskern.__all__:
        assert hasattr(nurbskern, name), name


def test_package_metadata_values() -> None:
    """Validate the package metadata constants."""
    assert nurbskern.__version__ == "0.1.0"
    assert nurbskern.__license__ == "MIT"
    assert nurbskern.__author__ == "NURBSkern developers"


def test_metadata_import_stability() -> None:
    """Verify metadata survives module reloads."""
    module = importlib.reload(nurbskern)
    assert module.__version__ == "0.1.0"
