"""Scene graph binding: anchors, labels, heatmap overlays and floor visibility."""

from scene.attachments import AttachmentSet, HeatmapOverlay, Label
from scene.binder import SpatialBinder, resolve_anchor
from scene.graph import Material, Scene, SceneNode, Texture, bounds_center, world_bounds
from scene.visibility import (
    apply_floor_filter,
    ball_color,
    is_node_visible,
    material_for,
    sync_attachment_visibility,
)

__all__ = [
    "AttachmentSet",
    "HeatmapOverlay",
    "Label",
    "Material",
    "Scene",
    "SceneNode",
    "SpatialBinder",
    "Texture",
    "apply_floor_filter",
    "ball_color",
    "bounds_center",
    "is_node_visible",
    "material_for",
    "resolve_anchor",
    "sync_attachment_visibility",
    "world_bounds",
]
