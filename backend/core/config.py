"""Centralised visualization tunables.

Every constant that shapes how KPI values land on the building model lives
here. Create a custom ``VisualizationConfig`` to tweak values for testing::

    cfg = VisualizationConfig(heatmap_cutoff=0.6)
    service = DashboardService(config=cfg)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from PIL import ImageColor

from core.models import FloorSelector, KpiDomain, KpiName


@dataclass(frozen=True)
class RoomBinding:
    """Scene node names a logical room id is bound to."""

    label_node: str
    floor_node: str | None = None


@dataclass(frozen=True)
class OverlaySize:
    width: float
    height: float
    depth: float


def _gauge_domains() -> dict[KpiName, KpiDomain]:
    return {
        KpiName.CO2: KpiDomain(0.0, 1000.0),
        KpiName.HUMIDITY: KpiDomain(30.0, 60.0),
        KpiName.TEMPERATURE: KpiDomain(17.0, 23.0),
        KpiName.OCCUPANCY: KpiDomain(0.0, 50.0),
        KpiName.SPACE_UTIL: KpiDomain(0.0, 30.0),
    }


def _heatmap_domains() -> dict[KpiName, KpiDomain]:
    return {
        KpiName.CO2: KpiDomain(350.0, 1000.0),
        KpiName.HUMIDITY: KpiDomain(20.0, 70.0),
        KpiName.TEMPERATURE: KpiDomain(0.0, 22.0),
        KpiName.OCCUPANCY: KpiDomain(0.0, 20.0),
        KpiName.SPACE_UTIL: KpiDomain(0.0, 46.0),
    }


def _room_bindings() -> dict[str, RoomBinding]:
    return {
        "Room 1": RoomBinding("SecondFloorRoom1", "SecondFloorR1Floor"),
        "Room 2": RoomBinding("SecondFloorRoom2", "SecondFloorR2Floor"),
        "Room 3": RoomBinding("SecondFloorRoom3", "SecondFloorR3Floor"),
        "Room 4": RoomBinding("SecondFloorRoom4", "SecondFloorR4Floor"),
        "Room 5": RoomBinding("SecondFloorRoom5"),
    }


_TABLE_FIELDS = (
    "gauge_domains",
    "heatmap_domains",
    "room_bindings",
    "overlay_size_overrides",
    "floor_keywords",
)
_COLOR_FIELDS = ("low_color", "high_color", "neutral_color", "flat_color", "label_color")


@dataclass(frozen=True)
class VisualizationConfig:
    """All visualization tunables, grouped by category."""

    # --- KPI domains (kept separate: gauge vs. building model) ---
    gauge_domains: Mapping[KpiName, KpiDomain] = field(default_factory=_gauge_domains)
    heatmap_domains: Mapping[KpiName, KpiDomain] = field(default_factory=_heatmap_domains)
    fallback_domain: KpiDomain = KpiDomain(0.0, 100.0)

    # --- Heatmap texture ---
    heatmap_cutoff: float = 0.7
    texture_width: int = 512
    texture_height: int = 512
    heatmap_low_rgba: tuple[int, int, int, float] = (5, 255, 10, 1.0)
    heatmap_high_rgba: tuple[int, int, int, float] = (255, 0, 0, 0.97)

    # --- Anchors (vertical margins from the bounding-box centre) ---
    label_offset: float = 1.0
    overlay_offset: float = -2.0  # applied to the label anchor

    # --- Room bindings: logical room id -> scene node names ---
    room_bindings: Mapping[str, RoomBinding] = field(default_factory=_room_bindings)

    # --- Overlay geometry ---
    overlay_size: OverlaySize = OverlaySize(5.2, 5.0, 2.0)
    overlay_size_overrides: Mapping[str, OverlaySize] = field(
        default_factory=lambda: {"Room 4": OverlaySize(5.2, 5.0, 1.4)}
    )
    overlay_opacity: float = 0.3

    # --- Floor visibility ---
    floor_keywords: Mapping[FloorSelector, str] = field(
        default_factory=lambda: {FloorSelector.FIRST: "first", FloorSelector.SECOND: "second"}
    )

    # --- Scene materials ---
    low_color: str = "green"
    high_color: str = "red"
    neutral_color: str = "lightgray"
    flat_color: str = "white"
    material_opacity: float = 0.7
    metalness: float = 0.6
    roughness: float = 0.5
    ball_keyword: str = "ball"
    flat_keywords: tuple[str, ...] = ("furniture", "room")

    # --- Labels ---
    label_font_size: float = 0.7
    label_color: str = "#0f3257"
    label_font_weight: int = 500

    # --- Time series ---
    moving_average_window: int = 30

    def __post_init__(self) -> None:
        # Tables become read-only views over private copies; colours must parse.
        for name in _TABLE_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        for name in _COLOR_FIELDS:
            ImageColor.getrgb(getattr(self, name))

    def gauge_domain(self, kpi: KpiName) -> KpiDomain:
        return self.gauge_domains.get(kpi, self.fallback_domain)

    def heatmap_domain(self, kpi: KpiName) -> KpiDomain:
        return self.heatmap_domains.get(kpi, self.fallback_domain)

    def size_for(self, room_id: str) -> OverlaySize:
        return self.overlay_size_overrides.get(room_id, self.overlay_size)


DEFAULT = VisualizationConfig()


@dataclass(frozen=True)
class AssetPaths:
    """Locations of the external inputs the dashboard loads at startup."""

    sensor_feed: Path = Path("public/kpis_data.csv")
    forecast_feed: Path = Path("public/forecast_data.csv")
    scene: Path = Path("public/SampleBuilding.gltf")
    texture: Path = Path("public/Texture7.jpg")

    @classmethod
    def from_env(cls) -> "AssetPaths":
        """Read overrides from ``BUILDINGVIZ_*`` environment variables."""
        defaults = cls()
        return cls(
            sensor_feed=Path(os.environ.get("BUILDINGVIZ_SENSOR_FEED", defaults.sensor_feed)),
            forecast_feed=Path(os.environ.get("BUILDINGVIZ_FORECAST_FEED", defaults.forecast_feed)),
            scene=Path(os.environ.get("BUILDINGVIZ_SCENE", defaults.scene)),
            texture=Path(os.environ.get("BUILDINGVIZ_TEXTURE", defaults.texture)),
        )
