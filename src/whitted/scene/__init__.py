"""Scene module: scene graph, device storage and the reference scene.

Components:
    graph: Materials, primitives, groups and the immutable Scene value
    intersection: Taichi field storage and closest-hit / shadow queries
    cornell_box: The reference room with a sphere, pyramid and hourglass

Scene data is uploaded to the device in Structure-of-Arrays layout, one
entry per primitive with its composed world matrix and material.
"""

from .cornell_box import create_reference_scene
from .graph import Group, Material, PrimitiveKind, Scene, SceneGraphError, Sphere, Triangle
from .intersection import (
    MAX_PRIMITIVES,
    Hit,
    HitInfo,
    clear_scene,
    get_primitive_count,
    intersect,
    intersect_scene,
    intersect_scene_any,
    upload_scene,
)

__all__ = [
    "Group",
    "Material",
    "PrimitiveKind",
    "Scene",
    "SceneGraphError",
    "Sphere",
    "Triangle",
    "create_reference_scene",
    "Hit",
    "HitInfo",
    "MAX_PRIMITIVES",
    "clear_scene",
    "get_primitive_count",
    "intersect",
    "intersect_scene",
    "intersect_scene_any",
    "upload_scene",
]
