"""Loft mesh generation from a profile curve.

Builds a triangulated surface by placing scaled and translated copies of a
closed profile curve in consecutive rows and stitching adjacent rows with
a quad strip. With a circular-ish profile and varying scales this yields a
surface of revolution such as an hourglass or vase.

Layout:
    - Vertices are row-major: row index outer, profile index inner, so the
      vertex of row i and profile point j is at index i * cols + j.
    - The profile is closed: index j always connects to (j + 1) mod cols.
    - The loft is open at both ends; no cap triangles are generated.

Example:
    >>> from whitted.geometry.mesh import generate_mesh
    >>> profile = [(-1, 0, 0), (0, 0, 1), (1, 0, 0), (0, 0, -1)]
    >>> mesh = generate_mesh(profile, [1.0, 0.5], [(0, 0, 0), (0, 1, 0)], 2)
    >>> mesh.vertex_count, mesh.triangle_count
    (8, 8)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from whitted.geometry.transform import apply_to_points, scaling, translation

if TYPE_CHECKING:
    from whitted.scene.graph import Material, Triangle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mesh:
    """A generated triangle mesh.

    Attributes:
        positions: Vertex positions, shape (N, 3), float64, read-only.
        indices: Triangle vertex indices, shape (M, 3), int64, read-only.
    """

    positions: npt.NDArray[np.float64]
    indices: npt.NDArray[np.int64]

    @property
    def vertex_count(self) -> int:
        """Number of vertices in the mesh."""
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        """Number of index triples in the mesh."""
        return int(self.indices.shape[0])


def loft_indices(rows: int, cols: int) -> npt.NDArray[np.int64]:
    """Build the quad-strip index triples joining consecutive rows.

    For rows i, i+1 and profile index j the quad (a, b, d, c) is split into
    triangles (a, b, d) and (a, d, c) where:
        a = i * cols + j
        b = i * cols + (j + 1) mod cols
        c = (i + 1) * cols + j
        d = (i + 1) * cols + (j + 1) mod cols

    Args:
        rows: Number of profile rows.
        cols: Number of points per profile.

    Returns:
        Index array of shape (2 * (rows - 1) * cols, 3).
    """
    triangles: list[tuple[int, int, int]] = []
    for i in range(rows - 1):
        for j in range(cols):
            a = i * cols + j
            b = i * cols + (j + 1) % cols
            c = (i + 1) * cols + j
            d = (i + 1) * cols + (j + 1) % cols
            triangles.append((a, b, d))
            triangles.append((a, d, c))
    return np.array(triangles, dtype=np.int64).reshape(-1, 3)


def generate_mesh(
    profile: Sequence[Sequence[float]],
    scales: Sequence[float],
    positions: Sequence[Sequence[float]],
    rows: int,
) -> Mesh:
    """Generate a lofted triangle mesh from a profile curve.

    Row i is the profile transformed by translation(positions[i]) after a
    uniform scale by scales[i].

    Args:
        profile: Ordered profile points (x, y, z), treated as a closed loop.
        scales: Per-row uniform scale factors.
        positions: Per-row (x, y, z) translations.
        rows: Number of rows; must match len(scales) and len(positions).

    Returns:
        The generated Mesh.

    Raises:
        ValueError: If the profile is empty, rows is negative, or the
            per-row lists do not have exactly ``rows`` entries.
    """
    points = np.asarray(profile, dtype=np.float64).reshape(-1, 3)
    if points.shape[0] == 0:
        raise ValueError("Profile curve must contain at least one point")
    if rows < 0:
        raise ValueError(f"Row count must be non-negative, got {rows}")
    if len(scales) != rows or len(positions) != rows:
        raise ValueError(
            f"Expected {rows} scales and positions, got "
            f"{len(scales)} scales and {len(positions)} positions"
        )

    cols = points.shape[0]
    row_points = [
        apply_to_points(translation(positions[i]) @ scaling(scales[i]), points)
        for i in range(rows)
    ]
    if row_points:
        vertices = np.vstack(row_points)
    else:
        vertices = np.zeros((0, 3), dtype=np.float64)

    indices = loft_indices(rows, cols)

    vertices.flags.writeable = False
    indices.flags.writeable = False

    logger.debug(
        "Generated loft mesh: %d rows x %d cols -> %d vertices, %d triangles",
        rows,
        cols,
        vertices.shape[0],
        indices.shape[0],
    )
    return Mesh(positions=vertices, indices=indices)


def mesh_triangles(
    positions: npt.ArrayLike,
    indices: npt.ArrayLike,
    material: Material,
) -> list[Triangle]:
    """Instantiate Triangle primitives from vertex and index arrays.

    Index triples referring outside the vertex list are skipped rather
    than failing the whole scene.

    Args:
        positions: Vertex positions, shape (N, 3).
        indices: Index triples, shape (M, 3).
        material: Material shared by every triangle.

    Returns:
        The list of triangles, in index order.
    """
    from whitted.scene.graph import Triangle

    verts = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    tris = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    count = verts.shape[0]

    triangles = []
    skipped = 0
    for i0, i1, i2 in tris:
        if not (0 <= i0 < count and 0 <= i1 < count and 0 <= i2 < count):
            skipped += 1
            continue
        triangles.append(Triangle(verts[i0], verts[i1], verts[i2], material))

    if skipped:
        logger.debug("Skipped %d mesh triangles with out-of-range indices", skipped)
    return triangles


def triangles_from_mesh(mesh: Mesh, material: Material) -> list[Triangle]:
    """Instantiate Triangle primitives for every triangle of a Mesh."""
    return mesh_triangles(mesh.positions, mesh.indices, material)
