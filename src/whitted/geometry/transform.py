"""Homogeneous 4x4 transforms for scene construction.

Scene-graph transforms are built and composed on the Python side with
NumPy and uploaded to Taichi fields per primitive. Matrices are row-major
and act on column vectors, so ``translation(p) @ scaling(s)`` scales first
and then translates.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

Matrix4 = npt.NDArray[np.float64]


def identity() -> Matrix4:
    """Return a fresh 4x4 identity matrix."""
    return np.eye(4, dtype=np.float64)


def translation(offset: Sequence[float]) -> Matrix4:
    """Build a translation matrix.

    Args:
        offset: The (x, y, z) translation.

    Returns:
        A 4x4 matrix translating points by ``offset``.
    """
    m = identity()
    m[:3, 3] = np.asarray(offset, dtype=np.float64)
    return m


def scaling(factor: float | Sequence[float]) -> Matrix4:
    """Build a scale matrix.

    Args:
        factor: A uniform scale factor, or per-axis (sx, sy, sz).

    Returns:
        A 4x4 scale matrix.
    """
    m = identity()
    if np.isscalar(factor):
        m[0, 0] = m[1, 1] = m[2, 2] = float(factor)
    else:
        m[0, 0], m[1, 1], m[2, 2] = (float(f) for f in factor)
    return m


def as_matrix(matrix: npt.ArrayLike | None) -> Matrix4:
    """Validate and copy a transform, defaulting to identity.

    Raises:
        ValueError: If the matrix is not 4x4.
    """
    if matrix is None:
        return identity()
    m = np.array(matrix, dtype=np.float64)
    if m.shape != (4, 4):
        raise ValueError(f"Transform must be a 4x4 matrix, got shape {m.shape}")
    m.flags.writeable = False
    return m


def compose(parent: Matrix4, local: Matrix4) -> Matrix4:
    """Compose a parent world matrix with a node's local matrix."""
    return parent @ local


def apply_to_points(matrix: Matrix4, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Transform an (N, 3) array of points.

    Args:
        matrix: The 4x4 transform.
        points: Points of shape (N, 3).

    Returns:
        Transformed points of shape (N, 3).
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))])
    return (homogeneous @ matrix.T)[:, :3]
