"""Fixed pinhole camera with stratified sub-pixel sampling.

The camera sits at the eye position and always looks down +Z with +Y up;
there is no look-at rotation. The view plane lies at unit distance and is
view_size world units wide, its height following the image aspect ratio.

Each pixel is sampled on an n x n grid of sub-pixel positions at the
centers of equal cells, so sampling is fully deterministic:

    offset = (s + 0.5) / n
    u = ((x + offset_x) / width - 0.5) * view_size
    v = (0.5 - (y + offset_y) / height) * view_size / aspect
    direction = normalize((u, v, 1))

Pixel row y = 0 is the top of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.pinhole import PinholeCamera, setup_camera
    >>> setup_camera(PinholeCamera(eye=(0.0, 0.0, -3.0), view_size=2.5))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from whitted.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for the fixed pinhole camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        view_size: Width of the view plane at unit distance, in world units.
    """

    eye: tuple[float, float, float] = (0.0, 0.0, -3.0)
    view_size: float = 2.5


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_view_size = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Copy camera state into the Taichi fields.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If view_size is not positive.
    """
    if camera.view_size <= 0.0:
        raise ValueError(f"View size must be positive, got {camera.view_size}")
    _camera_eye[None] = [float(c) for c in camera.eye]
    _camera_view_size[None] = camera.view_size


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def view_plane_direction(u: ti.f32, v: ti.f32) -> vec3:
    """Direction through view-plane coordinates (u, v) at unit distance."""
    return tm.normalize(vec3(u, v, 1.0))


@ti.func
def get_primary_ray(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    sub_x: ti.i32,
    sub_y: ti.i32,
    grid: ti.i32,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate the primary ray for one stratified sub-sample of a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        sub_x: Sub-sample column in [0, grid).
        sub_y: Sub-sample row in [0, grid).
        grid: Number of sub-samples along each pixel axis.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the eye through the sub-sample position.
    """
    fw = ti.cast(width, ti.f32)
    fh = ti.cast(height, ti.f32)
    fgrid = ti.cast(grid, ti.f32)

    view_w = _camera_view_size[None]
    view_h = view_w / (fw / fh)

    offset_x = (ti.cast(sub_x, ti.f32) + 0.5) / fgrid
    offset_y = (ti.cast(sub_y, ti.f32) + 0.5) / fgrid

    u = ((ti.cast(pixel_x, ti.f32) + offset_x) / fw - 0.5) * view_w
    v = (0.5 - (ti.cast(pixel_y, ti.f32) + offset_y) / fh) * view_h

    return make_ray(_camera_eye[None], view_plane_direction(u, v))


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with the eye position and view size.
    """
    eye = _camera_eye[None]
    return {
        "eye": (float(eye[0]), float(eye[1]), float(eye[2])),
        "view_size": float(_camera_view_size[None]),
    }
