"""Pytest configuration and shared surfaces.

Makes `src` importable without installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


def _ensure_src_on_sys_path() -> None:
    """Prepend the repository `src` directory to `sys.path` if missing."""
    repo_root: Path = Path(__file__).resolve().parents[1]
    src_path: Path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_ensure_src_on_sys_path()

from nurbskern.surface import NurbsSurface  # noqa: E402

CUBIC_KNOTS = [0.0, 0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0, 1.0]


@pytest.fixture
def flat_square() -> NurbsSurface:
    """Bilinear unit square in the xy-plane (2x2 control points, unit weights)."""
    control_points = np.zeros((2, 2, 3))
    control_points[0, 1] = [0.0, 1.0, 0.0]
    control_points[1, 0] = [1.0, 0.0, 0.0]
    control_points[1, 1] = [1.0, 1.0, 0.0]
    knots = [0.0, 0.0, 1.0, 1.0]
    return NurbsSurface(1, 1, control_points, np.ones((2, 2)), knots, knots)


@pytest.fixture
def bicubic_plane() -> NurbsSurface:
    """Bicubic flat plane z=0 over the unit square with a 5x5 control net."""
    control_points = np.zeros((5, 5, 3))
    for i in range(5):
        for j in range(5):
            control_points[i, j] = [i / 4.0, j / 4.0, 0.0]
    return NurbsSurface(3, 3, control_points, np.ones((5, 5)), CUBIC_KNOTS, CUBIC_KNOTS)


@pytest.fixture
def wavy_surface() -> NurbsSurface:
    """Bicubic surface with a sinusoidal height field on a 6x6 control net."""
    control_points = np.zeros((6, 6, 3))
    for i in range(6):
        for j in range(6):
            x, y = i / 5.0, j / 5.0
            control_points[i, j] = [x, y, 0.1 * np.sin(2 * np.pi * x) * np.cos(2 * np.pi * y)]
    knots = [0.0, 0.0, 0.0, 0.0, 0.33, 0.67, 1.0, 1.0, 1.0, 1.0]
    return NurbsSurface(3, 3, control_points, np.ones((6, 6)), knots, knots)
