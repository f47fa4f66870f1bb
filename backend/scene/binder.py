"""Spatial binding of logical rooms to scene nodes.

Rooms are bound through an explicit table (logical room id -> label node and
floor-area node). A room whose nodes are missing from the scene simply gets
no label and no overlay.
"""

import logging
from collections.abc import Iterable, Mapping

import numpy as np
from numpy.typing import NDArray

from analysis.colors import heatmap_texture, normalize
from core.config import DEFAULT, OverlaySize, VisualizationConfig
from core.models import KpiName
from scene.attachments import HeatmapOverlay, Label
from scene.graph import SceneNode, Texture, bounds_center

logger = logging.getLogger(__name__)


def resolve_anchor(scene: SceneNode, node_name: str, margin: float = 0.0) -> NDArray[np.float64] | None:
    """Bounding-box centre of a named node, raised by ``margin`` on the Y axis.

    Returns None when no node has that name. A node without geometry anchors
    at the origin.
    """
    node = scene.get_object_by_name(node_name)
    if node is None:
        return None
    center = bounds_center(node)
    if center is None:
        center = np.zeros(3)
    return center + np.array([0.0, margin, 0.0])


class SpatialBinder:
    """Resolves rooms to anchors and builds labels and heatmap overlays."""

    def __init__(self, config: VisualizationConfig = DEFAULT) -> None:
        self.config = config
        self._scene: SceneNode | None = None
        self._resolvable: frozenset[str] = frozenset()
        self._anchors: dict[str, NDArray[np.float64]] = {}
        # Bumped whenever the cached anchors are recomputed.
        self.generation = 0

    def overlay_size(self, room_id: str) -> OverlaySize:
        """Footprint of a room's overlay. Override for custom per-room sizing."""
        return self.config.size_for(room_id)

    def _resolvable_rooms(self, scene: SceneNode, room_ids: Iterable[str]) -> frozenset[str]:
        found: set[str] = set()
        for room_id in room_ids:
            binding = self.config.room_bindings.get(room_id)
            if binding is None:
                logger.debug("No scene binding configured for %s", room_id)
                continue
            if scene.get_object_by_name(binding.label_node) is None:
                logger.debug("Scene has no node %s for %s", binding.label_node, room_id)
                continue
            found.add(room_id)
        return frozenset(found)

    def label_anchors(self, scene: SceneNode, room_ids: Iterable[str]) -> dict[str, NDArray[np.float64]]:
        """Label anchors per room, cached until the scene or the resolvable room set changes."""
        resolvable = self._resolvable_rooms(scene, room_ids)
        if scene is self._scene and resolvable == self._resolvable:
            return self._anchors

        anchors: dict[str, NDArray[np.float64]] = {}
        for room_id in sorted(resolvable):
            anchor = resolve_anchor(scene, self.config.room_bindings[room_id].label_node, self.config.label_offset)
            if anchor is not None:
                anchors[room_id] = anchor

        self._scene = scene
        self._resolvable = resolvable
        self._anchors = anchors
        self.generation += 1
        logger.debug("Resolved %d room anchors", len(anchors))
        return anchors

    def invalidate(self) -> None:
        self._scene = None
        self._resolvable = frozenset()
        self._anchors = {}

    def build_labels(self, anchors: Mapping[str, NDArray[np.float64]], per_room: Mapping[str, float]) -> list[Label]:
        cfg = self.config
        labels: list[Label] = []
        for room_id, anchor in anchors.items():
            value = per_room.get(room_id)
            if value is None:
                continue
            labels.append(
                Label(
                    room_id=room_id,
                    text=f"{value:.2f}",
                    position=anchor.copy(),
                    font_size=cfg.label_font_size,
                    color=cfg.label_color,
                    font_weight=cfg.label_font_weight,
                )
            )
        return labels

    def build_overlays(
        self,
        scene: SceneNode,
        anchors: Mapping[str, NDArray[np.float64]],
        per_room: Mapping[str, float],
        kpi: KpiName,
    ) -> list[HeatmapOverlay]:
        """One heatmap overlay per room that has a floor node, an anchor and a value."""
        cfg = self.config
        domain = cfg.heatmap_domain(kpi)
        overlays: list[HeatmapOverlay] = []

        for room_id, anchor in anchors.items():
            value = per_room.get(room_id)
            floor_node = cfg.room_bindings[room_id].floor_node
            if value is None or floor_node is None or scene.get_object_by_name(floor_node) is None:
                continue

            image = heatmap_texture(
                value,
                domain,
                width=cfg.texture_width,
                height=cfg.texture_height,
                cutoff=cfg.heatmap_cutoff,
                low=cfg.heatmap_low_rgba,
                high=cfg.heatmap_high_rgba,
            )
            overlays.append(
                HeatmapOverlay(
                    room_id=room_id,
                    value=value,
                    intensity=normalize(value, domain),
                    texture=Texture(name=f"heatmap:{room_id}", image=image),
                    size=self.overlay_size(room_id),
                    position=anchor + np.array([0.0, cfg.overlay_offset, 0.0]),
                    opacity=cfg.overlay_opacity,
                )
            )
        return overlays
