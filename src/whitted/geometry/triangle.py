"""Triangle primitive with ray-triangle intersection.

A triangle is defined by three local-space vertices. Counter-clockwise
winding (v0 -> v1 -> v2) gives the geometric normal
normalize((v1 - v0) x (v2 - v0)).

Ray-triangle intersection uses the plane-then-inside test:
1. Find where the ray crosses the plane of the triangle
2. Compute barycentric coordinates of the crossing point
3. Accept the point if all three coordinates are non-negative

The reported normal is always flipped to face the incoming ray, so shading
never sees a back face.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.triangle import TriangleShape, hit_triangle
    >>> tri = TriangleShape(
    ...     v0=ti.math.vec3(0, 0, 0),
    ...     v1=ti.math.vec3(1, 0, 0),
    ...     v2=ti.math.vec3(0, 1, 0),
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import mat4, transform_point

from .sphere import HitRecord, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Below this |N . d| the ray is treated as parallel to the triangle plane
PARALLEL_EPSILON = 1e-6

# Below this |denominator| the barycentric solve is treated as degenerate
DEGENERATE_EPSILON = 1e-10

# Plane hits closer than this are rejected (self-intersection guard and
# near clip for secondary rays)
SURFACE_EPSILON = 0.001


@ti.dataclass
class TriangleShape:
    """A triangle defined by three local-space vertices.

    Attributes:
        v0: First vertex (vec3).
        v1: Second vertex (vec3).
        v2: Third vertex (vec3).
    """

    v0: vec3
    v1: vec3
    v2: vec3


@ti.func
def triangle_barycentrics(p: vec3, v0: vec3, v1: vec3, v2: vec3):
    """Compute barycentric coordinates of a point in the triangle plane.

    Uses the dot-product (Cramer's rule) formulation on the edges
    e1 = v1 - v0 and e2 = v2 - v0.

    Args:
        p: A point in the plane of the triangle.
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.

    Returns:
        A tuple of (alpha, beta, gamma, valid) where alpha, beta and gamma
        weight v0, v2 and v1 respectively, and valid is 0 if the triangle
        is degenerate.
    """
    edge1 = v1 - v0
    edge2 = v2 - v0
    w = p - v0

    dot00 = tm.dot(edge2, edge2)
    dot01 = tm.dot(edge2, edge1)
    dot02 = tm.dot(edge2, w)
    dot11 = tm.dot(edge1, edge1)
    dot12 = tm.dot(edge1, w)

    denom = dot00 * dot11 - dot01 * dot01

    alpha = 0.0
    beta = 0.0
    gamma = 0.0
    valid = 0
    if ti.abs(denom) >= DEGENERATE_EPSILON:
        beta = (dot11 * dot02 - dot01 * dot12) / denom
        gamma = (dot00 * dot12 - dot01 * dot02) / denom
        alpha = 1.0 - beta - gamma
        valid = 1

    return alpha, beta, gamma, valid


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    triangle: TriangleShape,
    world: mat4,
) -> HitRecord:
    """Test for ray-triangle intersection.

    The plane is N . x + D = 0 with D = -N . v0, so the ray parameter is:
        s = -(D + N . origin) / (N . direction)

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        triangle: The triangle in local space.
        world: The triangle's resolved world matrix.

    Returns:
        A HitRecord whose normal faces against ray_direction.
    """
    v0 = transform_point(world, triangle.v0)
    v1 = transform_point(world, triangle.v1)
    v2 = transform_point(world, triangle.v2)

    normal = tm.normalize(tm.cross(v1 - v0, v2 - v0))
    n_dot_d = tm.dot(normal, ray_direction)

    result = make_miss()

    if ti.abs(n_dot_d) >= PARALLEL_EPSILON:
        d = -tm.dot(normal, v0)
        s = -(d + tm.dot(normal, ray_origin)) / n_dot_d

        if s >= SURFACE_EPSILON:
            p = ray_origin + s * ray_direction
            alpha, beta, gamma, valid = triangle_barycentrics(p, v0, v1, v2)

            if valid == 1 and alpha >= 0.0 and beta >= 0.0 and gamma >= 0.0:
                if n_dot_d > 0.0:
                    normal = -normal
                result = HitRecord(hit=1, t=s, point=p, normal=normal)

    return result


@ti.func
def make_triangle(v0: vec3, v1: vec3, v2: vec3) -> TriangleShape:
    """Create a triangle from three vertices."""
    return TriangleShape(v0=v0, v1=v1, v2=v2)
