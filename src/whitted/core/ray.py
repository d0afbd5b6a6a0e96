"""Ray data structure and vector utilities for the Whitted ray tracer.

This module provides the Ray dataclass and the small set of vector
helpers the shading engine needs: point transformation by a 4x4 world
matrix, mirror reflection and Snell refraction. All operations are
designed to run inside Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, -3.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 2.0)  # Point 2 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Type alias for 4x4 homogeneous transforms
mat4 = tm.mat4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Reflection and
            refraction assume it is unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value, in units of the direction vector.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def transform_point(m: mat4, p: vec3) -> vec3:
    """Apply a 4x4 affine transform to a point (w = 1).

    The projective row is ignored; scene transforms are affine.

    Args:
        m: The homogeneous transform matrix (row-major, column vectors).
        p: The point to transform.

    Returns:
        The transformed point.
    """
    return vec3(
        m[0, 0] * p.x + m[0, 1] * p.y + m[0, 2] * p.z + m[0, 3],
        m[1, 0] * p.x + m[1, 1] * p.y + m[1, 2] * p.z + m[1, 3],
        m[2, 0] * p.x + m[2, 1] * p.y + m[2, 2] * p.z + m[2, 3],
    )


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes normalize(V - 2 (V . N) N). The normal should be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The normalized mirror-reflection direction.
    """
    return tm.normalize(incident - 2.0 * tm.dot(incident, normal) * normal)


@ti.func
def refract(incident: vec3, normal: vec3, refraction_index: ti.f32):
    """Refract an incident vector through a surface using Snell's law.

    The side of the surface is decided from the sign of L . N: a negative
    cosine means the ray enters the medium (indices 1 -> refraction_index),
    otherwise it leaves it, so the indices are swapped and the normal is
    negated.

    Args:
        incident: The incoming direction vector.
        normal: The surface normal as reported by the hit record.
        refraction_index: Index of refraction of the medium behind the surface.

    Returns:
        A tuple of (direction, valid) where:
        - direction: The normalized refracted direction (zero on failure).
        - valid: 0 if total internal reflection occurred, 1 otherwise.
    """
    l_dir = tm.normalize(incident)
    n = tm.normalize(normal)
    cos_i = tm.dot(l_dir, n)

    n_i = 1.0
    n_r = refraction_index
    if cos_i < 0.0:
        cos_i = -cos_i
    else:
        n_i = refraction_index
        n_r = 1.0
        n = -n

    eta = n_i / n_r
    cos2_r = 1.0 - eta * eta * (1.0 - cos_i * cos_i)

    direction = vec3(0.0, 0.0, 0.0)
    valid = 0
    if cos2_r >= 0.0:
        cos_r = ti.sqrt(cos2_r)
        direction = tm.normalize(l_dir * eta + n * (eta * cos_i - cos_r))
        valid = 1

    return direction, valid
