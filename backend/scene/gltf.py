"""Loading the building model and its decorative texture."""

import asyncio
import logging
import re
from pathlib import Path

import numpy as np
import trimesh
from PIL import Image

from analysis.colors import Color
from scene.graph import Material, Scene, SceneNode, Texture

logger = logging.getLogger(__name__)

_RESERVED = re.compile(r"[\[\]\.:/]")
_WHITESPACE = re.compile(r"\s")


def sanitize_node_name(name: str) -> str:
    """Node names as the renderer addresses them: whitespace to "_", path
    characters stripped. The raw name is kept in ``user_data["name"]``."""
    return _RESERVED.sub("", _WHITESPACE.sub("_", name))


def _world_bounds(source: trimesh.Scene, node_name: str) -> tuple[np.ndarray | None, bool]:
    matrix, geometry_name = source.graph.get(node_name)
    if geometry_name is None or geometry_name not in source.geometry:
        return None, False
    geometry = source.geometry[geometry_name]
    is_mesh = isinstance(geometry, trimesh.Trimesh)
    if geometry.bounds is None:
        return None, is_mesh
    corners = trimesh.bounds.corners(geometry.bounds)
    world = trimesh.transform_points(corners, matrix)
    return np.stack([world.min(axis=0), world.max(axis=0)]), is_mesh


def scene_from_trimesh(source: trimesh.Scene, name: str = "Scene") -> Scene:
    """Convert a trimesh scene graph into the engine's node tree."""
    graph = source.graph
    base = graph.base_frame
    parents = graph.transforms.parents

    nodes: dict[str, SceneNode] = {}
    for node_name in sorted(graph.nodes):
        if node_name == base:
            continue
        bounds, is_mesh = _world_bounds(source, node_name)
        nodes[node_name] = SceneNode(
            sanitize_node_name(str(node_name)),
            is_mesh=is_mesh,
            bounds=bounds,
            material=Material(color=Color.named("white")) if is_mesh else None,
            user_data={"name": str(node_name)},
        )

    root = Scene(name)
    for node_name, node in nodes.items():
        parent = nodes.get(parents.get(node_name), root)
        parent.add(node)
    return root


def load_scene(path: Path | str) -> Scene:
    source = trimesh.load(str(path), force="scene")
    scene = scene_from_trimesh(source, name=Path(path).stem)
    logger.info("Loaded scene %s with %d nodes", path, sum(1 for _ in scene.traverse()) - 1)
    return scene


async def load_scene_async(path: Path | str) -> Scene:
    return await asyncio.to_thread(load_scene, path)


def load_texture(path: Path | str) -> Texture:
    """Decorative surface texture applied to structural meshes."""
    with Image.open(path) as image:
        rgb = image.convert("RGB")
    return Texture(name=Path(path).name, image=rgb)


async def load_texture_async(path: Path | str) -> Texture:
    return await asyncio.to_thread(load_texture, path)
