"""Scene-level primitive storage and intersection testing.

The scene graph is resolved root-to-leaf on upload: every primitive is
stored with its local geometry, its composed world matrix and its
material, in depth-first child order. The closest-hit query walks that
list and keeps the smallest t, so the result is the same as asking each
group for its closest child hit and taking the minimum up the tree. Ties
keep the first primitive encountered.

The scene stores primitives in Taichi fields for GPU-efficient access.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.graph import Group, Material, Sphere
    >>> from whitted.scene.intersection import intersect, upload_scene
    >>> root = Group()
    >>> root.add(Sphere((0, 0, 0), 1.0, Material(color=(1, 0, 0))))
    >>> hit = intersect(root, (0, 0, -10), (0, 0, 1))
    >>> round(hit.t, 4)
    9.0
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from whitted.geometry.sphere import HitRecord, SphereShape, hit_sphere, make_miss
from whitted.geometry.triangle import TriangleShape, hit_triangle
from whitted.scene.graph import Group, PrimitiveKind, Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class HitInfo:
    """Record of a ray-scene intersection with surface information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Distance along the ray, +inf for a miss.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal at the intersection point.
        color: The surface color of the hit primitive.
        object_id: Index of the hit primitive in scene storage, used to
            look up its material. -1 for a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    color: vec3
    object_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 4096

# Primitive storage: Structure of Arrays layout for GPU efficiency.
# Spheres use v0 as the center and radius; triangles use v0, v1, v2.
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_radii = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_world = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_PRIMITIVES)

# Material storage, one entry per primitive
primitive_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_reflectivity = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_transparency = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_refraction_index = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)

num_primitives = ti.field(dtype=ti.i32, shape=())

_KIND_SPHERE = int(PrimitiveKind.SPHERE)


def clear_scene() -> None:
    """Clear all primitives from the device scene.

    Resets the primitive count to zero. The field data is overwritten by
    the next upload.
    """
    num_primitives[None] = 0


def upload_scene(scene: Scene | Group) -> int:
    """Resolve a scene graph and copy it into the device fields.

    Args:
        scene: A Scene value or a bare root Group.

    Returns:
        The number of primitives uploaded.

    Raises:
        RuntimeError: If the scene has more than MAX_PRIMITIVES primitives.
    """
    root = scene.root if isinstance(scene, Scene) else scene
    entries = list(root.iter_primitives())
    count = len(entries)
    if count > MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")

    kinds = np.zeros(MAX_PRIMITIVES, dtype=np.int32)
    v0 = np.zeros((MAX_PRIMITIVES, 3), dtype=np.float32)
    v1 = np.zeros((MAX_PRIMITIVES, 3), dtype=np.float32)
    v2 = np.zeros((MAX_PRIMITIVES, 3), dtype=np.float32)
    radii = np.zeros(MAX_PRIMITIVES, dtype=np.float32)
    world = np.zeros((MAX_PRIMITIVES, 4, 4), dtype=np.float32)
    colors = np.zeros((MAX_PRIMITIVES, 3), dtype=np.float32)
    reflectivity = np.zeros(MAX_PRIMITIVES, dtype=np.float32)
    transparency = np.zeros(MAX_PRIMITIVES, dtype=np.float32)
    refraction_index = np.ones(MAX_PRIMITIVES, dtype=np.float32)

    for i, (primitive, matrix) in enumerate(entries):
        kinds[i] = int(primitive.kind)
        if primitive.kind == PrimitiveKind.SPHERE:
            v0[i] = primitive.center
            radii[i] = primitive.radius
        else:
            v0[i], v1[i], v2[i] = primitive.vertices
        world[i] = matrix
        material = primitive.material
        colors[i] = material.color
        reflectivity[i] = material.reflectivity
        transparency[i] = material.transparency
        refraction_index[i] = material.refraction_index

    primitive_kinds.from_numpy(kinds)
    primitive_v0.from_numpy(v0)
    primitive_v1.from_numpy(v1)
    primitive_v2.from_numpy(v2)
    primitive_radii.from_numpy(radii)
    primitive_world.from_numpy(world)
    primitive_colors.from_numpy(colors)
    primitive_reflectivity.from_numpy(reflectivity)
    primitive_transparency.from_numpy(transparency)
    primitive_refraction_index.from_numpy(refraction_index)
    num_primitives[None] = count

    logger.debug("Uploaded %d primitives to the device scene", count)
    return count


def get_primitive_count() -> int:
    """Get the number of primitives in the device scene."""
    return int(num_primitives[None])


@ti.func
def _make_miss_info() -> HitInfo:
    """Create a HitInfo indicating no intersection."""
    return HitInfo(
        hit=0,
        t=tm.inf,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        color=vec3(0.0, 0.0, 0.0),
        object_id=-1,
    )


@ti.func
def _intersect_primitive(ray_origin: vec3, ray_direction: vec3, i: ti.i32) -> HitRecord:
    """Dispatch the intersection test on the primitive's kind tag."""
    rec = make_miss()
    if primitive_kinds[i] == _KIND_SPHERE:
        sphere = SphereShape(center=primitive_v0[i], radius=primitive_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, primitive_world[i])
    else:
        triangle = TriangleShape(v0=primitive_v0[i], v1=primitive_v1[i], v2=primitive_v2[i])
        rec = hit_triangle(ray_origin, ray_direction, triangle, primitive_world[i])
    return rec


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> HitInfo:
    """Find the closest intersection of a ray with the scene.

    Must be called from inside a loop of the calling kernel so the
    primitive loop here runs serially per ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A HitInfo for the closest hit, or a miss record.
    """
    closest_t = tm.inf
    result = _make_miss_info()

    for i in range(num_primitives[None]):
        rec = _intersect_primitive(ray_origin, ray_direction, i)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = HitInfo(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                color=primitive_colors[i],
                object_id=i,
            )

    return result


@ti.func
def intersect_scene_any(ray_origin: vec3, ray_direction: vec3, t_max: ti.f32) -> ti.i32:
    """Test if any primitive is hit strictly closer than t_max (shadow query).

    Since the closest hit is below t_max exactly when some hit is, this
    answers the shadow question without tracking the minimum.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_max: Exclusive upper bound on the hit distance.

    Returns:
        1 if any primitive was hit before t_max, 0 otherwise.
    """
    hit_any = 0
    for i in range(num_primitives[None]):
        if hit_any == 0:
            rec = _intersect_primitive(ray_origin, ray_direction, i)
            if rec.hit == 1 and rec.t < t_max:
                hit_any = 1
    return hit_any


# =============================================================================
# Python-callable queries
# =============================================================================


@dataclass(frozen=True)
class Hit:
    """Host-side copy of a HitInfo.

    Attributes:
        t: Distance along the ray.
        point: Hit point.
        normal: Unit surface normal.
        color: Surface color.
        object_id: Index of the primitive in depth-first scene order.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    color: tuple[float, float, float]
    object_id: int


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_object = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _intersect_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    for _ in range(1):
        info = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz))
        _query_hit[None] = info.hit
        _query_t[None] = info.t
        _query_point[None] = info.point
        _query_normal[None] = info.normal
        _query_color[None] = info.color
        _query_object[None] = info.object_id


def _as_tuple(v) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def intersect(
    scene: Scene | Group,
    origin: Sequence[float],
    direction: Sequence[float],
) -> Hit | None:
    """Find the closest hit of a single ray against a scene graph.

    Uploads the scene and runs a one-ray kernel. Intended for tests and
    picking; rendering uses intersect_scene inside the render kernel.

    Args:
        scene: A Scene value or a bare root Group.
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z).

    Returns:
        The closest Hit, or None on a miss.
    """
    upload_scene(scene)
    _intersect_kernel(*(float(c) for c in origin), *(float(c) for c in direction))
    if _query_hit[None] == 0:
        return None
    return Hit(
        t=float(_query_t[None]),
        point=_as_tuple(_query_point[None]),
        normal=_as_tuple(_query_normal[None]),
        color=_as_tuple(_query_color[None]),
        object_id=int(_query_object[None]),
    )
