"""Whitted-style recursive ray tracing integrator.

This module implements the shading engine: direct lighting from a single
point light with a hard shadow test, plus mirror reflection and Snell
refraction continued recursively up to a fixed depth.

Per shaded hit:
    1. Shadow ray toward the light from the hit point offset along the
       normal. Occluded strictly before the light: ambient only,
       AMBIENT_SHADOW * color.
    2. Otherwise Lambert with an ambient floor:
       color * (AMBIENT_FLOOR + DIFFUSE_WEIGHT * max(0, N . L)).
    3. reflectivity r > 0: add r * trace(reflected, depth - 1).
    4. transparency k > 0 and no total internal reflection:
       ADDITIVE  color += color * (1 - k) + k * trace(refracted, depth - 1)
       LINEAR    color  = color * (1 - k) + k * trace(refracted, depth - 1)

Taichi functions cannot recurse at runtime, but the result above is linear
in the child colors:

    C(node) = s * local + s * r * C(reflected) + w_t * C(refracted)

with s = 2 - k (ADDITIVE) or 1 - k (LINEAR) when a refracted ray exists,
otherwise s = 1 and w_t = 0. The recursion is therefore evaluated as a sum
over the nodes of the binary ray tree of (product of branch weights along
the path) * s * local. Each node is reached by replaying its branch
choices from the primary ray; levels run from 0 to depth - 1, so a depth
of 0 renders black and the work per primary ray is bounded by
2^depth - 1 shaded nodes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.integrator import trace_ray
    >>> from whitted.scene.cornell_box import create_reference_scene
    >>> scene = create_reference_scene()
    >>> r, g, b = trace_ray(scene, scene.eye, (0.0, 0.0, 1.0), depth=3)
"""

import logging
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from whitted.camera.pinhole import PinholeCamera, get_primary_ray, setup_camera
from whitted.core.config import RefractionBlend
from whitted.core.ray import reflect, refract
from whitted.scene.graph import Scene
from whitted.scene.intersection import (
    HitInfo,
    intersect_scene,
    intersect_scene_any,
    primitive_reflectivity,
    primitive_refraction_index,
    primitive_transparency,
    upload_scene,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Shading Constants
# =============================================================================

# Secondary ray origins are pushed this far off the surface
RAY_OFFSET = 0.01

# Surface color factor for points in shadow
AMBIENT_SHADOW = 0.2

# Ambient floor and diffuse weight for lit points
AMBIENT_FLOOR = 0.3
DIFFUSE_WEIGHT = 0.7

# Branch choices when replaying a path through the ray tree
BRANCH_REFLECT = 0
BRANCH_REFRACT = 1

_BLEND_LINEAR = int(RefractionBlend.LINEAR)

# =============================================================================
# Light Source Configuration
# =============================================================================

_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_light(position: Sequence[float]) -> None:
    """Set the world-space position of the point light."""
    _light_position[None] = [float(c) for c in position]


def get_light_position() -> tuple[float, float, float]:
    """Get the current point light position."""
    p = _light_position[None]
    return (float(p[0]), float(p[1]), float(p[2]))


def setup_scene(scene: Scene) -> int:
    """Upload a scene value: geometry, light and camera.

    Args:
        scene: The scene to render.

    Returns:
        The number of primitives uploaded.
    """
    count = upload_scene(scene)
    setup_light(scene.light)
    setup_camera(PinholeCamera(eye=scene.eye, view_size=scene.view_size))
    return count


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Averaged linear color per pixel, indexed [x, y] with y = 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions exceed maximum supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to black."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade_local(info: HitInfo) -> vec3:
    """Direct lighting at a hit: hard shadow test plus Lambert term.

    Args:
        info: The hit to shade.

    Returns:
        The local (non-recursive) color.
    """
    to_light = _light_position[None] - info.point
    light_distance = tm.length(to_light)
    light_dir = tm.normalize(to_light)

    shadow_origin = info.point + info.normal * RAY_OFFSET
    occluded = intersect_scene_any(shadow_origin, light_dir, light_distance)

    color = info.color * AMBIENT_SHADOW
    if occluded == 0:
        diffuse = tm.max(0.0, tm.dot(info.normal, light_dir))
        color = info.color * (AMBIENT_FLOOR + DIFFUSE_WEIGHT * diffuse)
    return color


@ti.func
def _branch_weights(info: HitInfo, direction: vec3, blend: ti.i32):
    """Compute how a node's color combines with its children.

    Args:
        info: The hit at this node.
        direction: The incoming ray direction.
        blend: RefractionBlend value.

    Returns:
        A tuple of (local_scale, reflect_weight, refract_weight,
        refract_direction). A zero weight means the branch does not exist.
    """
    reflectivity = primitive_reflectivity[info.object_id]
    transparency = primitive_transparency[info.object_id]

    local_scale = 1.0
    refract_weight = 0.0
    refract_direction = vec3(0.0, 0.0, 0.0)

    if transparency > 0.0:
        t_dir, valid = refract(
            direction, info.normal, primitive_refraction_index[info.object_id]
        )
        if valid == 1:
            refract_direction = t_dir
            refract_weight = transparency
            if blend == _BLEND_LINEAR:
                local_scale = 1.0 - transparency
            else:
                local_scale = 2.0 - transparency

    reflect_weight = 0.0
    if reflectivity > 0.0:
        reflect_weight = reflectivity * local_scale

    return local_scale, reflect_weight, refract_weight, refract_direction


@ti.func
def trace_ray_impl(origin: vec3, direction: vec3, depth: ti.i32, blend: ti.i32) -> vec3:
    """Trace a ray through the scene with Whitted-style recursion.

    Must be called from inside a loop of the calling kernel so the tree
    walk runs serially per ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (unit length).
        depth: Remaining recursion depth; <= 0 returns black.
        blend: RefractionBlend value.

    Returns:
        The accumulated, unclamped color.
    """
    # Misses and exhausted depth contribute nothing, so the background is black
    color = vec3(0.0, 0.0, 0.0)

    for level in range(depth):
        for branch in range(1 << level):
            # Replay the branch choices of this node from the primary ray
            ray_origin = origin
            ray_direction = direction
            weight = 1.0
            alive = 1

            for step in range(level):
                if alive == 1:
                    info = intersect_scene(ray_origin, ray_direction)
                    if info.hit == 0:
                        alive = 0
                    else:
                        _, reflect_w, refract_w, refract_dir = _branch_weights(
                            info, ray_direction, blend
                        )
                        choice = (branch >> step) & 1
                        if choice == BRANCH_REFLECT:
                            if reflect_w > 0.0:
                                weight *= reflect_w
                                ray_origin = info.point + info.normal * RAY_OFFSET
                                ray_direction = reflect(ray_direction, info.normal)
                            else:
                                alive = 0
                        else:
                            if refract_w > 0.0:
                                weight *= refract_w
                                ray_origin = info.point + refract_dir * RAY_OFFSET
                                ray_direction = refract_dir
                            else:
                                alive = 0

            if alive == 1:
                info = intersect_scene(ray_origin, ray_direction)
                if info.hit == 1:
                    local_scale, _, _, _unused_dir = _branch_weights(info, ray_direction, blend)
                    color += weight * local_scale * shade_local(info)

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    y_start: ti.i32,
    y_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    grid: ti.i32,
    depth: ti.i32,
    blend: ti.i32,
):
    """Render rows [y_start, y_end) into the color buffer.

    Every pixel averages grid * grid stratified primary rays.
    """
    for x, y in ti.ndrange(width, (y_start, y_end)):
        total = vec3(0.0, 0.0, 0.0)
        for sy in range(grid):
            for sx in range(grid):
                ray = get_primary_ray(x, y, sx, sy, grid, width, height)
                total += trace_ray_impl(ray.origin, ray.direction, depth, blend)
        _color_buffer[x, y] = total / ti.cast(grid * grid, ti.f32)


_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
    blend: ti.i32,
):
    for _ in range(1):
        _trace_result[None] = trace_ray_impl(vec3(ox, oy, oz), vec3(dx, dy, dz), depth, blend)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    scene: Scene,
    origin: Sequence[float],
    direction: Sequence[float],
    depth: int = 3,
    blend: RefractionBlend = RefractionBlend.ADDITIVE,
) -> tuple[float, float, float]:
    """Trace a single ray and return its color.

    This is a Python-callable entry for testing. For production rendering,
    use render_rows() which processes pixels in parallel.

    Args:
        scene: The scene to trace against (uploaded before tracing).
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z); normalized here.
        depth: Recursion depth. 0 returns black.
        blend: Refraction blend formula.

    Returns:
        Tuple of (R, G, B), unclamped.
    """
    d = np.asarray(direction, dtype=np.float64)
    d = d / np.linalg.norm(d)
    setup_scene(scene)
    _trace_single_ray(
        *(float(c) for c in origin), *(float(c) for c in d), int(depth), int(blend)
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_rows(
    y_start: int,
    y_end: int,
    grid: int,
    depth: int,
    blend: RefractionBlend = RefractionBlend.ADDITIVE,
) -> None:
    """Render a band of rows into the render target.

    The scene must already be uploaded with setup_scene().

    Args:
        y_start: First row (inclusive).
        y_end: Last row (exclusive).
        grid: Sub-samples along each pixel axis.
        depth: Recursion depth.
        blend: Refraction blend formula.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    y_end = min(y_end, height)
    if y_start >= y_end:
        return
    _render_rows(y_start, y_end, width, height, grid, depth, int(blend))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered linear image as a NumPy array.

    Values are the unclamped averages of the traced sample colors.

    Returns:
        NumPy array of shape (height, width, 3) with dtype float32.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3); row 0 is already the top
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))
    return np.ascontiguousarray(image, dtype=np.float32)
