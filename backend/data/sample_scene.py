"""Sample building model for testing and demos.

Mirrors the node naming of the dashboard's glTF asset: floor groups, room
volumes named ``SecondFloorRoomN``, floor slabs named ``SecondFloorRNFloor``,
an indicator ball and some furniture.
"""

import numpy as np

from analysis.colors import Color
from scene.graph import Material, Scene, SceneNode

_ROOM_WIDTH = 6.0
_STOREY = 4.0


def _box(x0: float, y0: float, z0: float, x1: float, y1: float, z1: float) -> np.ndarray:
    return np.array([[x0, y0, z0], [x1, y1, z1]], dtype=np.float64)


def _mesh(name: str, bounds: np.ndarray) -> SceneNode:
    return SceneNode(name, is_mesh=True, bounds=bounds, material=Material(color=Color.named("white")))


def _group(name: str, *children: SceneNode) -> SceneNode:
    group = SceneNode(name)
    for child in children:
        group.add(child)
    return group


def _first_floor() -> SceneNode:
    """Ground-level storey: slab, walls and a desk."""
    return _group(
        "FirstFloor",
        _mesh("FirstFloorSlab", _box(0, 0, 0, 24, 0.3, 5)),
        _mesh("FirstFloorWalls", _box(0, 0, 0, 24, _STOREY, 5)),
        _mesh("Furniture_Desk", _box(1, 0.3, 1, 2, 1.1, 2)),
        _mesh("Entrance", _box(10, 0, -1, 14, 3, 0)),
    )


def _second_floor() -> SceneNode:
    """Upper storey: four monitored rooms, their floor slabs and an annex."""
    rooms = []
    for i in range(1, 5):
        x0 = (i - 1) * _ROOM_WIDTH
        rooms.append(_mesh(f"SecondFloorRoom{i}", _box(x0, 10, 0, x0 + _ROOM_WIDTH, 14, 5)))
        rooms.append(_mesh(f"SecondFloorR{i}Floor", _box(x0, 10, 0, x0 + _ROOM_WIDTH, 10.2, 5)))

    # Nested two levels below the floor group, so the floor filter cannot see it.
    annex = _group("Annex", _mesh("AnnexLamp", _box(20, 13, 4, 21, 14, 5)))

    return _group(
        "SecondFloor",
        *rooms,
        _mesh("SecondFloorWalls", _box(0, 10, 0, 24, 14, 5)),
        _mesh("KpiBall", _box(11, 15, 2, 13, 17, 4)),
        _mesh("Furniture_Chair", _box(2, 10.2, 2, 3, 11, 3)),
        annex,
    )


def create_sample_scene() -> Scene:
    scene = Scene("SampleBuilding")
    scene.add(_first_floor())
    scene.add(_second_floor())
    return scene
