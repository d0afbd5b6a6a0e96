"""Reference Cornell-style room scene.

This module builds the standard test scene of the renderer: a closed room
six units on a side made of triangles, lit by a point light just below the
ceiling, containing three objects that exercise each shading path.

The room spans [-3, 3] on every axis:
- Ceiling (y = 3), back wall (z = 3) and floor (y = -3): white
- Left wall (x = -3): red
- Right wall (x = 3): green
- The front wall (z = -3) is omitted; the eye sits on that plane.

Objects:
- A blue diffuse sphere resting on the floor, front left.
- A fully mirrored square pyramid, back left.
- A transparent lofted hourglass (index 1.3), right.

The root group lists its children in the order ceiling, left wall, right
wall, back wall, floor, pyramid, sphere, hourglass.

Example:
    >>> from whitted.scene.cornell_box import create_reference_scene
    >>> scene = create_reference_scene()
    >>> scene.root.primitive_count()
    81
"""

from whitted.geometry.mesh import generate_mesh, triangles_from_mesh
from whitted.scene.graph import Group, Material, Scene, Sphere, Triangle

# =============================================================================
# Scene Constants
# =============================================================================

LIGHT_POSITION = (0.0, 2.8, 0.0)
EYE_POSITION = (0.0, 0.0, -3.0)
VIEW_SIZE = 2.5

# Wall colors
RED = (1.0, 0.0, 0.0)
GREEN = (0.0, 1.0, 0.0)
WHITE = (1.0, 1.0, 1.0)

# Object materials
SPHERE_COLOR = (0.2, 0.2, 1.0)
SPHERE_CENTER = (-1.5, -2.5, -0.5)
SPHERE_RADIUS = 0.5

PYRAMID_COLOR = (131 / 256, 105 / 256, 83 / 256)
PYRAMID_REFLECTIVITY = 1.0

HOURGLASS_COLOR = (135 / 255, 206 / 255, 235 / 255)
HOURGLASS_TRANSPARENCY = 0.9
HOURGLASS_REFRACTION_INDEX = 1.3

# Hourglass loft: an octagonal profile in the XZ plane, shrunk towards the
# middle row and stacked downwards from y = -1 to the floor
HOURGLASS_PROFILE = (
    (-1.5, 0.0, 0.0),
    (-1.0, 0.0, 1.0),
    (0.0, 0.0, 1.5),
    (1.0, 0.0, 1.0),
    (1.5, 0.0, 0.0),
    (1.0, 0.0, -1.0),
    (0.0, 0.0, -1.5),
    (-1.0, 0.0, -1.0),
)
HOURGLASS_SCALES = (0.5, 0.25, 0.13, 0.25, 0.5)
HOURGLASS_POSITIONS = (
    (1.0, -1.0, 0.0),
    (1.0, -1.5, 0.0),
    (1.0, -2.0, 0.0),
    (1.0, -2.5, 0.0),
    (1.0, -3.0, 0.0),
)

# Triangle vertices for each wall, two triangles per wall
_CEILING = (
    ((-3, 3, -3), (3, 3, -3), (3, 3, 3)),
    ((-3, 3, -3), (3, 3, 3), (-3, 3, 3)),
)
_LEFT_WALL = (
    ((-3, -3, -3), (-3, 3, -3), (-3, 3, 3)),
    ((-3, -3, -3), (-3, 3, 3), (-3, -3, 3)),
)
_RIGHT_WALL = (
    ((3, -3, -3), (3, 3, 3), (3, 3, -3)),
    ((3, -3, -3), (3, -3, 3), (3, 3, 3)),
)
_BACK_WALL = (
    ((-3, -3, 3), (-3, 3, 3), (3, 3, 3)),
    ((-3, -3, 3), (3, 3, 3), (3, -3, 3)),
)
_FLOOR = (
    ((-3, -3, -3), (3, -3, 3), (3, -3, -3)),
    ((-3, -3, -3), (-3, -3, 3), (3, -3, 3)),
)

# Two base triangles followed by the four sides meeting at the apex (-1, -1, 1)
_PYRAMID = (
    ((-2, -3, 1), (0, -3, 1), (0, -3, 3)),
    ((-2, -3, 0), (0, -3, 2), (-2, -3, 2)),
    ((-1, -1, 1), (0, -3, 0), (-2, -3, 0)),
    ((-1, -1, 1), (0, -3, 2), (0, -3, 0)),
    ((-1, -1, 1), (-2, -3, 2), (0, -3, 2)),
    ((-1, -1, 1), (-2, -3, 0), (-2, -3, 2)),
)


# =============================================================================
# Scene Builders
# =============================================================================


def _triangle_group(triangles, material: Material) -> Group:
    group = Group()
    for v0, v1, v2 in triangles:
        group.add(Triangle(v0, v1, v2, material))
    return group


def create_room() -> list[Group]:
    """Create the five wall groups in root order.

    Returns:
        Groups for the ceiling, left wall, right wall, back wall and floor.
    """
    white = Material(color=WHITE)
    return [
        _triangle_group(_CEILING, white),
        _triangle_group(_LEFT_WALL, Material(color=RED)),
        _triangle_group(_RIGHT_WALL, Material(color=GREEN)),
        _triangle_group(_BACK_WALL, white),
        _triangle_group(_FLOOR, white),
    ]


def create_pyramid() -> Group:
    """Create the mirrored pyramid group."""
    material = Material(color=PYRAMID_COLOR, reflectivity=PYRAMID_REFLECTIVITY)
    return _triangle_group(_PYRAMID, material)


def create_sphere() -> Sphere:
    """Create the blue diffuse sphere."""
    return Sphere(SPHERE_CENTER, SPHERE_RADIUS, Material(color=SPHERE_COLOR))


def create_hourglass() -> Group:
    """Create the transparent hourglass from the lofted profile."""
    material = Material(
        color=HOURGLASS_COLOR,
        transparency=HOURGLASS_TRANSPARENCY,
        refraction_index=HOURGLASS_REFRACTION_INDEX,
    )
    mesh = generate_mesh(
        HOURGLASS_PROFILE,
        HOURGLASS_SCALES,
        HOURGLASS_POSITIONS,
        len(HOURGLASS_SCALES),
    )
    group = Group()
    for triangle in triangles_from_mesh(mesh, material):
        group.add(triangle)
    return group


def create_reference_scene(include_objects: bool = True) -> Scene:
    """Create the reference room scene.

    Args:
        include_objects: If False, only the five walls are built. The
            empty room is cheap to render and exercises direct lighting
            and shadows from the walls alone.

    Returns:
        The Scene with the light at (0, 2.8, 0) and the eye at (0, 0, -3).

    Example:
        >>> scene = create_reference_scene(include_objects=False)
        >>> len(scene.root)
        5
    """
    root = Group()
    for wall in create_room():
        root.add(wall)

    if include_objects:
        root.add(create_pyramid())
        root.add(create_sphere())
        root.add(create_hourglass())

    name = "reference" if include_objects else "empty-room"
    return Scene(
        root=root,
        light=LIGHT_POSITION,
        eye=EYE_POSITION,
        view_size=VIEW_SIZE,
        name=name,
    )
