"""Tests for the floor filter and material assignment."""

import numpy as np
import pytest

from analysis.colors import Color
from core.config import DEFAULT, VisualizationConfig
from core.models import FloorSelector, KpiName
from data import create_sample_scene
from scene import (
    HeatmapOverlay,
    Label,
    Texture,
    apply_floor_filter,
    ball_color,
    is_node_visible,
    material_for,
    sync_attachment_visibility,
    visibility,
)
from scene.graph import SceneNode

KEYWORDS = DEFAULT.floor_keywords
RED = Color.named("red")


def _node(scene: SceneNode, name: str) -> SceneNode:
    node = scene.get_object_by_name(name)
    assert node is not None
    return node


def _state(scene: SceneNode) -> list[tuple[str, bool, object]]:
    return [(n.name, n.visible, n.material) for n in scene.traverse() if n.is_mesh]


def test_all_floors_visible() -> None:
    scene = create_sample_scene()
    assert all(is_node_visible(n, FloorSelector.ALL, KEYWORDS) for n in scene.traverse())


def test_own_name_or_parent_name_selects_floor() -> None:
    scene = create_sample_scene()
    assert is_node_visible(_node(scene, "FirstFloorSlab"), FloorSelector.FIRST, KEYWORDS)
    assert is_node_visible(_node(scene, "Furniture_Desk"), FloorSelector.FIRST, KEYWORDS)
    assert not is_node_visible(_node(scene, "Furniture_Desk"), FloorSelector.SECOND, KEYWORDS)
    assert is_node_visible(_node(scene, "SecondFloorRoom1"), FloorSelector.SECOND, KEYWORDS)
    assert not is_node_visible(_node(scene, "SecondFloorRoom1"), FloorSelector.FIRST, KEYWORDS)


def test_parent_match_uses_associated_name() -> None:
    parent = SceneNode("Level_02", user_data={"name": "Second Level"})
    child = SceneNode("Mesh_17", is_mesh=True)
    parent.add(child)
    assert is_node_visible(child, FloorSelector.SECOND, KEYWORDS)


def test_only_one_ancestor_level_is_checked() -> None:
    scene = create_sample_scene()
    lamp = _node(scene, "AnnexLamp")
    assert not is_node_visible(lamp, FloorSelector.SECOND, KEYWORDS)
    assert not is_node_visible(lamp, FloorSelector.FIRST, KEYWORDS)


def test_material_for_node_kinds() -> None:
    scene = create_sample_scene()
    texture = Texture("Texture7.jpg")

    ball = material_for(_node(scene, "KpiBall"), RED, DEFAULT, texture)
    assert ball.color == RED
    assert ball.map is texture

    chair = material_for(_node(scene, "Furniture_Chair"), RED, DEFAULT, texture)
    assert chair.color == Color.named("white")
    assert chair.map is None

    room = material_for(_node(scene, "SecondFloorRoom1"), RED, DEFAULT, texture)
    assert room.color == Color.named("white")
    assert room.map is None

    walls = material_for(_node(scene, "FirstFloorWalls"), RED, DEFAULT, texture)
    assert walls.color == Color.named("lightgray")
    assert walls.map is texture
    assert (walls.opacity, walls.metalness, walls.roughness, walls.transparent) == (0.7, 0.6, 0.5, True)


def test_apply_floor_filter_is_idempotent() -> None:
    scene = create_sample_scene()
    texture = Texture("Texture7.jpg")

    apply_floor_filter(scene, FloorSelector.SECOND, RED, DEFAULT, texture)
    first = _state(scene)
    replaced = apply_floor_filter(scene, FloorSelector.SECOND, RED, DEFAULT, texture)

    assert replaced == 0
    assert _state(scene) == first
    assert all(n.material.opacity == 0.7 for n in scene.traverse() if n.is_mesh and n.material)


def test_floor_change_only_touches_visibility() -> None:
    scene = create_sample_scene()
    apply_floor_filter(scene, FloorSelector.ALL, RED)
    materials = [n.material for n in scene.traverse() if n.is_mesh]

    replaced = apply_floor_filter(scene, FloorSelector.FIRST, RED)

    assert replaced == 0
    assert [n.material for n in scene.traverse() if n.is_mesh] == materials
    assert _node(scene, "FirstFloorWalls").visible
    assert not _node(scene, "SecondFloorWalls").visible


def test_ball_color_change_replaces_only_ball_material() -> None:
    scene = create_sample_scene()
    apply_floor_filter(scene, FloorSelector.ALL, Color.named("green"))
    replaced = apply_floor_filter(scene, FloorSelector.ALL, RED)
    assert replaced == 1
    assert _node(scene, "KpiBall").material.color == RED


def test_engine_owned_nodes_are_left_alone() -> None:
    scene = create_sample_scene()
    overlay = HeatmapOverlay(
        room_id="Room 1",
        value=900.0,
        intensity=0.85,
        texture=Texture("heatmap:Room 1"),
        size=DEFAULT.overlay_size,
        position=np.zeros(3),
        opacity=0.3,
    )
    label = Label("Room 1", "900.00", np.zeros(3), 0.7, "#0f3257", 500)
    scene.add(overlay)
    scene.add(label)
    material = overlay.material

    apply_floor_filter(scene, FloorSelector.FIRST, RED)

    assert overlay.material is material
    assert overlay.visible and label.visible


def test_ball_color_uses_heatmap_domain() -> None:
    assert ball_color(KpiName.CO2, 350.0) == Color.named("green")
    assert ball_color(KpiName.CO2, 1000.0) == RED
    # 0-1000 gauge domain would put 675 at 0.675; the model domain puts it at 0.5.
    assert ball_color(KpiName.CO2, 675.0).r == 0.5


def test_custom_floor_keywords() -> None:
    config = VisualizationConfig(floor_keywords={FloorSelector.FIRST: "ground", FloorSelector.SECOND: "upper"})
    node = SceneNode("GroundSlab", is_mesh=True)
    assert is_node_visible(node, FloorSelector.FIRST, config.floor_keywords)
    assert not is_node_visible(node, FloorSelector.SECOND, config.floor_keywords)


def test_failed_material_leaves_scene_untouched(monkeypatch) -> None:
    scene = create_sample_scene()
    apply_floor_filter(scene, FloorSelector.ALL, RED)
    before = _state(scene)

    def failing(node: SceneNode, *args: object) -> object:
        if node.name == "KpiBall":
            raise RuntimeError("material build failed")
        return material_for(node, *args)

    monkeypatch.setattr(visibility, "material_for", failing)
    with pytest.raises(RuntimeError):
        apply_floor_filter(scene, FloorSelector.FIRST, Color.named("green"))

    assert _state(scene) == before


def test_attachments_follow_their_bound_room() -> None:
    scene = create_sample_scene()
    overlay = HeatmapOverlay(
        room_id="Room 1",
        value=900.0,
        intensity=0.85,
        texture=Texture("heatmap:Room 1"),
        size=DEFAULT.overlay_size,
        position=np.zeros(3),
        opacity=0.3,
    )
    label = Label("Room 1", "900.00", np.zeros(3), 0.7, "#0f3257", 500)
    stray = Label("Lobby", "1.00", np.zeros(3), 0.7, "#0f3257", 500)
    for node in (overlay, label, stray):
        scene.add(node)

    apply_floor_filter(scene, FloorSelector.FIRST, RED)
    sync_attachment_visibility(scene, [overlay, label, stray])
    assert not overlay.visible and not label.visible
    # No binding, nothing to follow.
    assert stray.visible

    apply_floor_filter(scene, FloorSelector.SECOND, RED)
    sync_attachment_visibility(scene, [overlay, label, stray])
    assert overlay.visible and label.visible
