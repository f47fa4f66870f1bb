"""In-memory scene graph: named nodes with bounds, materials and visibility.

Nodes are addressed by name only. Bounds are stored per node in world space
(already transformed by the loader); a node's full extent is the union over
its subtree.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from analysis.colors import Color


@dataclass(eq=False)
class Texture:
    """An image bound to a material. Compared by identity."""

    name: str
    image: Image.Image | None = None


@dataclass
class Material:
    color: Color
    opacity: float = 1.0
    transparent: bool = False
    metalness: float = 0.0
    roughness: float = 1.0
    map: Texture | None = None
    double_sided: bool = False
    wireframe: bool = False


class SceneNode:
    """A named node. Owned by whoever loaded the scene; the engine only mutates
    ``visible`` and ``material`` and attaches auxiliary children."""

    # Engine-owned helpers (labels, overlays) set this so scene passes skip them.
    auxiliary: bool = False

    def __init__(
        self,
        name: str,
        is_mesh: bool = False,
        bounds: NDArray[np.float64] | None = None,
        material: Material | None = None,
        user_data: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.is_mesh = is_mesh
        self.bounds = None if bounds is None else np.asarray(bounds, dtype=np.float64).reshape(2, 3)
        self.material = material
        self.user_data: dict[str, Any] = user_data if user_data is not None else {"name": name}
        self.visible = True
        self.parent: SceneNode | None = None
        self.children: list[SceneNode] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def add(self, child: "SceneNode") -> None:
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self.children.append(child)

    def remove(self, child: "SceneNode") -> None:
        if child in self.children:
            self.children.remove(child)
            child.parent = None

    def traverse(self) -> Iterator["SceneNode"]:
        """Depth-first, parent before children."""
        stack: list[SceneNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def get_object_by_name(self, name: str) -> "SceneNode | None":
        for node in self.traverse():
            if node.name == name:
                return node
        return None


class Scene(SceneNode):
    """Root of a loaded building model."""

    def __init__(self, name: str = "Scene") -> None:
        super().__init__(name)


def world_bounds(node: SceneNode) -> NDArray[np.float64] | None:
    """Axis-aligned box enclosing the node and all its (non-auxiliary) descendants."""
    boxes = [n.bounds for n in node.traverse() if n.bounds is not None and not n.auxiliary]
    if not boxes:
        return None
    stacked = np.stack(boxes)
    return np.stack([stacked[:, 0].min(axis=0), stacked[:, 1].max(axis=0)])


def bounds_center(node: SceneNode) -> NDArray[np.float64] | None:
    box = world_bounds(node)
    if box is None:
        return None
    return (box[0] + box[1]) / 2.0
