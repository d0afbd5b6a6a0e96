"""Geometry module for primitives and transforms.

Components:
    sphere: Ray-sphere intersection
    triangle: Ray-triangle intersection with barycentric containment
    transform: 4x4 affine matrix helpers (NumPy, host side)
    mesh: Loft mesh generation from a profile curve
"""

from .mesh import Mesh, generate_mesh, loft_indices, mesh_triangles, triangles_from_mesh
from .sphere import HitRecord, SphereShape, hit_sphere, make_miss, make_sphere
from .transform import compose, identity, scaling, translation
from .triangle import TriangleShape, hit_triangle, make_triangle, triangle_barycentrics

__all__ = [
    "HitRecord",
    "SphereShape",
    "TriangleShape",
    "make_miss",
    "make_sphere",
    "make_triangle",
    "hit_sphere",
    "hit_triangle",
    "triangle_barycentrics",
    "identity",
    "translation",
    "scaling",
    "compose",
    "Mesh",
    "generate_mesh",
    "loft_indices",
    "mesh_triangles",
    "triangles_from_mesh",
]
