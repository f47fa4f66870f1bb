"""Floor visibility and material assignment for every mesh in the scene.

Floor membership is inferred from names: a mesh belongs to a floor when its
own name, or its direct parent's name, contains the floor keyword. Only one
ancestor level is checked, so meshes nested deeper under a floor group are
not matched.

Engine-owned labels and overlays are not matched by name. They follow the
visibility of the room node they are bound to.
"""

from collections.abc import Iterable, Mapping

from analysis.colors import Color, color_for, normalize
from core.config import DEFAULT, VisualizationConfig
from core.models import FloorSelector, KpiName
from scene.graph import Material, SceneNode, Texture


def _associated_name(node: SceneNode) -> str:
    return str(node.user_data.get("name") or node.name)


def is_node_visible(node: SceneNode, selector: FloorSelector, keywords: Mapping[FloorSelector, str]) -> bool:
    if selector == FloorSelector.ALL:
        return True
    keyword = keywords.get(selector)
    if keyword is None:
        return True
    keyword = keyword.lower()
    if keyword in node.name.lower():
        return True
    return node.parent is not None and keyword in _associated_name(node.parent).lower()


def ball_color(kpi: KpiName, value: float, config: VisualizationConfig = DEFAULT) -> Color:
    """Indicator colour for the scalar KPI value, using the model's heatmap domain."""
    t = normalize(value, config.heatmap_domain(kpi))
    return color_for(t, Color.named(config.low_color), Color.named(config.high_color))


def material_for(
    node: SceneNode,
    ball: Color,
    config: VisualizationConfig = DEFAULT,
    texture: Texture | None = None,
) -> Material:
    name = node.name.lower()
    if any(k in name for k in config.flat_keywords):
        color = Color.named(config.flat_color)
        surface = None
    else:
        color = ball if config.ball_keyword in name else Color.named(config.neutral_color)
        surface = texture

    return Material(
        color=color,
        opacity=config.material_opacity,
        transparent=True,
        metalness=config.metalness,
        roughness=config.roughness,
        map=surface,
    )


def apply_floor_filter(
    scene: SceneNode,
    selector: FloorSelector,
    ball: Color,
    config: VisualizationConfig = DEFAULT,
    texture: Texture | None = None,
) -> int:
    """Set visibility and material on every loaded mesh.

    Engine-owned helpers are left alone. Targets for every mesh are computed
    before any node is touched, so a failure leaves the scene unchanged. A
    material is only replaced when it differs from the target, so repeated
    calls are no-ops. Returns the number of materials replaced.
    """
    plan = [
        (node, is_node_visible(node, selector, config.floor_keywords), material_for(node, ball, config, texture))
        for node in scene.traverse()
        if node.is_mesh and not node.auxiliary
    ]

    replaced = 0
    for node, visible, target in plan:
        node.visible = visible
        if node.material != target:
            node.material = target
            replaced += 1
    return replaced


def sync_attachment_visibility(
    scene: SceneNode,
    attachments: Iterable[SceneNode],
    config: VisualizationConfig = DEFAULT,
) -> None:
    """Show each label or overlay only while its bound room node is visible."""
    for node in attachments:
        binding = config.room_bindings.get(getattr(node, "room_id", ""))
        target = scene.get_object_by_name(binding.label_node) if binding else None
        node.visible = target.visible if target is not None else True
