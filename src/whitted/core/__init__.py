"""Core rendering module.

Components:
    ray: Ray data structure, reflection and refraction
    config: Render configuration and refraction blend modes
    integrator: Whitted-style shading and the row-band render kernel
    sampler: Stratified per-pixel sampling and RGBA8 output

All compute-intensive operations use Taichi kernels.
"""

from .config import RefractionBlend, RenderConfig
from .ray import Ray, make_ray, mat4, ray_at, reflect, refract, transform_point, vec3

# Note: integrator and sampler are NOT imported here to avoid circular imports.
# Import directly from whitted.core.integrator or whitted.core.sampler when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "mat4",
    "transform_point",
    "reflect",
    "refract",
    "RefractionBlend",
    "RenderConfig",
]
