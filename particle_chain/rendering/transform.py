"""
Affine transforms for 2D drawing surfaces.

Matrices are 3x3 numpy arrays acting on column vectors ``(x, y, 1)``.
Composition follows canvas semantics: ``current @ op`` applies ``op``
in the current local frame.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np


def identity() -> np.ndarray:
    return np.eye(3, dtype=np.float64)


def translation(x: float, y: float) -> np.ndarray:
    m = identity()
    m[0, 2] = float(x)
    m[1, 2] = float(y)
    return m


def rotation(radians: float) -> np.ndarray:
    c = math.cos(radians)
    s = math.sin(radians)
    return np.array(
        [
            [c, -s, 0.0],
            [s, c, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def scaling(sx: float, sy: float) -> np.ndarray:
    return np.diag([float(sx), float(sy), 1.0])


def flip_y(height: float) -> np.ndarray:
    """Map top-left origin coordinates to bottom-left origin (pyglet)."""
    m = scaling(1.0, -1.0)
    m[1, 2] = float(height)
    return m


def apply(matrix: np.ndarray, points: Iterable[tuple[float, float]]) -> np.ndarray:
    """
    Transform points.

    Args:
        matrix: 3x3 affine matrix
        points: (x, y) pairs

    Returns:
        (N, 2) array of transformed points
    """
    pts = np.asarray(list(points), dtype=np.float64).reshape(-1, 2)
    homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))])
    return (homogeneous @ matrix.T)[:, :2]
