"""Scene graph: materials, primitives and transform groups.

The scene is a strictly owned tree. Inner nodes are Groups carrying a local
transform and an ordered list of children; leaves are primitives (Sphere
or Triangle) carrying local-space geometry, their own local transform and
a Material. The world transform of any node is its parent's world
transform times its local transform, composed from the root down.

The set of primitive kinds is closed (see PrimitiveKind); the device-side
intersection loop dispatches on the kind tag explicitly.

Example:
    >>> from whitted.scene.graph import Group, Material, Sphere, Triangle
    >>> root = Group()
    >>> walls = root.add(Group())
    >>> white = Material(color=(1.0, 1.0, 1.0))
    >>> walls.add(Triangle((-3, -3, 3), (3, 3, 3), (3, -3, 3), white))
    >>> root.add(Sphere((0, 0, 0), 0.5, Material(color=(0.2, 0.2, 1.0))))
    >>> len(list(root.iter_primitives()))
    2
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

import numpy as np
import numpy.typing as npt

from whitted.geometry.transform import Matrix4, as_matrix, compose, identity

Vec3 = tuple[float, float, float]


class SceneGraphError(ValueError):
    """Raised when a scene-graph edit would break strict tree ownership."""


class PrimitiveKind(IntEnum):
    """Enumeration of primitive kinds.

    Stored per primitive on the device for intersection dispatch.
    """

    SPHERE = 0
    TRIANGLE = 1


def _vec3(values: Sequence[float] | npt.ArrayLike, name: str) -> Vec3:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got {arr.shape[0]}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


@dataclass(frozen=True)
class Material:
    """Surface properties of a primitive.

    Attributes:
        color: Surface reflectance (R, G, B), each component in [0, 1].
        reflectivity: Weight of the mirror-reflection term, in [0, 1].
        transparency: Weight of the refraction term, in [0, 1].
        refraction_index: Index of refraction of the medium behind the
            surface. Must be positive.

    Raises:
        ValueError: If any value is outside its range.
    """

    color: Vec3
    reflectivity: float = 0.0
    transparency: float = 0.0
    refraction_index: float = 1.0

    def __post_init__(self) -> None:
        color = _vec3(self.color, "color")
        if any(c < 0.0 or c > 1.0 for c in color):
            raise ValueError(f"Color components must be in [0, 1], got {color}")
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"Reflectivity must be in [0, 1], got {self.reflectivity}")
        if not 0.0 <= self.transparency <= 1.0:
            raise ValueError(f"Transparency must be in [0, 1], got {self.transparency}")
        if self.refraction_index <= 0.0:
            raise ValueError(
                f"Refraction index must be positive, got {self.refraction_index}"
            )
        object.__setattr__(self, "color", color)


class _Node:
    """Common bookkeeping for scene-graph nodes."""

    def __init__(self, transform: npt.ArrayLike | None = None) -> None:
        self._transform = as_matrix(transform)
        self._parent: Group | None = None

    @property
    def transform(self) -> Matrix4:
        """The node's local transform (read-only 4x4 array)."""
        return self._transform

    @property
    def parent(self) -> Group | None:
        """The owning group, or None for an unattached node."""
        return self._parent

    def world_matrix(self, parent_matrix: Matrix4 | None = None) -> Matrix4:
        """Compose the parent's world matrix with this node's local matrix."""
        if parent_matrix is None:
            parent_matrix = identity()
        return compose(parent_matrix, self._transform)


class Sphere(_Node):
    """A sphere primitive.

    Args:
        center: Local-space center (x, y, z).
        radius: Sphere radius (positive).
        material: Surface material.
        transform: Optional local 4x4 transform (default identity).
    """

    kind = PrimitiveKind.SPHERE

    def __init__(
        self,
        center: Sequence[float],
        radius: float,
        material: Material,
        transform: npt.ArrayLike | None = None,
    ) -> None:
        super().__init__(transform)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center = _vec3(center, "center")
        self.radius = float(radius)
        self.material = material

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Triangle(_Node):
    """A triangle primitive.

    Counter-clockwise winding v0 -> v1 -> v2 defines the geometric normal.

    Args:
        v0: First local-space vertex.
        v1: Second local-space vertex.
        v2: Third local-space vertex.
        material: Surface material.
        transform: Optional local 4x4 transform (default identity).
    """

    kind = PrimitiveKind.TRIANGLE

    def __init__(
        self,
        v0: Sequence[float],
        v1: Sequence[float],
        v2: Sequence[float],
        material: Material,
        transform: npt.ArrayLike | None = None,
    ) -> None:
        super().__init__(transform)
        self.v0 = _vec3(v0, "v0")
        self.v1 = _vec3(v1, "v1")
        self.v2 = _vec3(v2, "v2")
        self.material = material

    @property
    def vertices(self) -> tuple[Vec3, Vec3, Vec3]:
        """The three local-space vertices."""
        return self.v0, self.v1, self.v2

    def __repr__(self) -> str:
        return f"Triangle(v0={self.v0}, v1={self.v1}, v2={self.v2})"


Primitive = Union[Sphere, Triangle]
Node = Union["Group", Sphere, Triangle]


class Group(_Node):
    """A transform node owning an ordered list of children.

    Children are primitives or nested groups. Each child belongs to
    exactly one group; cycles are rejected.

    Args:
        transform: Optional local 4x4 transform (default identity).
    """

    def __init__(self, transform: npt.ArrayLike | None = None) -> None:
        super().__init__(transform)
        self._children: list[Node] = []

    @property
    def children(self) -> tuple[Node, ...]:
        """The children in insertion order."""
        return tuple(self._children)

    def add(self, child: Node) -> Node:
        """Append a child and return it, for chaining during construction.

        Args:
            child: A Sphere, Triangle or Group.

        Returns:
            The same child.

        Raises:
            SceneGraphError: If the child already has a parent, or adding
                it would create a cycle.
            TypeError: If the child is not a scene-graph node.
        """
        if not isinstance(child, (Group, Sphere, Triangle)):
            raise TypeError(f"Cannot add {type(child).__name__} to a Group")
        if child.parent is not None:
            raise SceneGraphError(f"{child!r} already belongs to another group")
        if isinstance(child, Group):
            ancestor: Group | None = self
            while ancestor is not None:
                if ancestor is child:
                    raise SceneGraphError("Adding this group would create a cycle")
                ancestor = ancestor.parent
        child._parent = self
        self._children.append(child)
        return child

    def iter_primitives(
        self, parent_matrix: Matrix4 | None = None
    ) -> Iterator[tuple[Primitive, Matrix4]]:
        """Walk the subtree depth-first in child order.

        Args:
            parent_matrix: The parent's world matrix (identity for the root).

        Yields:
            Tuples of (primitive, world_matrix) where world_matrix already
            includes the primitive's own local transform.
        """
        world = self.world_matrix(parent_matrix)
        for child in self._children:
            if isinstance(child, Group):
                yield from child.iter_primitives(world)
            else:
                yield child, child.world_matrix(world)

    def primitive_count(self) -> int:
        """Total number of primitives in the subtree."""
        return sum(1 for _ in self.iter_primitives())

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"Group(children={len(self._children)})"


@dataclass(frozen=True)
class Scene:
    """An immutable scene description passed to the renderer.

    Attributes:
        root: The root group of the scene graph.
        light: World-space position of the point light.
        eye: World-space camera position.
        view_size: Width of the view plane at unit distance, in world units.
    """

    root: Group
    light: Vec3 = (0.0, 2.8, 0.0)
    eye: Vec3 = (0.0, 0.0, -3.0)
    view_size: float = 2.5
    name: str = field(default="scene", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "light", _vec3(self.light, "light"))
        object.__setattr__(self, "eye", _vec3(self.eye, "eye"))
        if self.view_size <= 0.0:
            raise ValueError(f"View size must be positive, got {self.view_size}")
