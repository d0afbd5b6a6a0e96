"""Sphere primitive with ray-sphere intersection.

This module provides the SphereShape dataclass, the HitRecord shared by all
primitives, and the ray-sphere intersection routine.

The sphere is stored in local space and moved into world space by the
primitive's resolved world matrix at query time. Only the center is
transformed; the radius is taken as given.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.sphere import SphereShape, hit_sphere
    >>> sphere = SphereShape(center=ti.math.vec3(0, 0, 0), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import mat4, transform_point

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SphereShape:
    """A sphere defined by a local-space center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=tm.inf,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: SphereShape,
    world: mat4,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The intersection is found by solving:
        a*t^2 + b*t + c = 0

    where:
        a = dot(direction, direction)
        b = 2 * dot(direction, origin - center)
        c = dot(origin - center, origin - center) - radius^2

    Only the nearer root is considered. A negative nearer root is a miss,
    even if the farther root is positive, so a ray starting inside the
    sphere does not see it.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere in local space.
        world: The sphere's resolved world matrix.

    Returns:
        A HitRecord whose normal is the outward unit normal.
    """
    center = transform_point(world, sphere.center)
    oc = ray_origin - center

    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    result = make_miss()

    if discriminant >= 0.0:
        t = (-b - ti.sqrt(discriminant)) / (2.0 * a)
        if t >= 0.0:
            hit_point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=tm.normalize(hit_point - center),
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> SphereShape:
    """Create a sphere from center and radius."""
    return SphereShape(center=center, radius=radius)
