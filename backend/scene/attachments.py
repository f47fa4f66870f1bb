"""Engine-owned scene objects: room labels and heatmap overlays."""

import math
from collections.abc import Iterator, Sequence

import numpy as np
from numpy.typing import NDArray

from analysis.colors import Color
from core.config import OverlaySize
from scene.graph import Material, SceneNode, Texture


class Label(SceneNode):
    """Floating numeric label above a room."""

    auxiliary = True

    def __init__(
        self,
        room_id: str,
        text: str,
        position: NDArray[np.float64],
        font_size: float,
        color: str,
        font_weight: int,
    ) -> None:
        super().__init__(f"label:{room_id}")
        self.room_id = room_id
        self.text = text
        self.position = np.asarray(position, dtype=np.float64)
        self.font_size = font_size
        self.color = color
        self.font_weight = font_weight


class HeatmapOverlay(SceneNode):
    """Semi-transparent textured box lying on a room's floor."""

    auxiliary = True

    def __init__(
        self,
        room_id: str,
        value: float,
        intensity: float,
        texture: Texture,
        size: OverlaySize,
        position: NDArray[np.float64],
        opacity: float,
    ) -> None:
        super().__init__(
            f"heatmap:{room_id}",
            is_mesh=True,
            material=Material(
                color=Color.named("white"),
                opacity=opacity,
                transparent=True,
                map=texture,
                double_sided=True,
            ),
        )
        self.room_id = room_id
        self.value = value
        self.intensity = intensity
        self.size = size
        self.position = np.asarray(position, dtype=np.float64)
        self.texture = texture
        # Lay the box flat on the floor.
        self.rotation = np.array([-math.pi / 2, 0.0, 0.0])


class AttachmentSet[T: SceneNode]:
    """The currently attached generation of labels or overlays.

    ``replace`` attaches the fresh objects before detaching the stale ones, so
    the scene never sits empty between two generations and the stale set never
    survives the call.
    """

    def __init__(self) -> None:
        self.items: list[T] = []

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def replace(self, parent: SceneNode, fresh: Sequence[T]) -> None:
        stale = self.items
        for node in fresh:
            parent.add(node)
        for node in stale:
            if node.parent is not None and node not in fresh:
                node.parent.remove(node)
        self.items = list(fresh)

    def clear(self) -> None:
        for node in self.items:
            if node.parent is not None:
                node.parent.remove(node)
        self.items = []

    def by_room(self) -> dict[str, T]:
        return {getattr(node, "room_id", node.name): node for node in self.items}
