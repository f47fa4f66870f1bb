"""Tests for the event-driven dashboard service."""

import asyncio
import math

import pandas as pd
import pytest

from core.config import AssetPaths, VisualizationConfig
from core.models import FloorSelector, KpiName, Mode, SensorRecord
from data import SAMPLE_ROWS, create_sample_records, create_sample_scene
from scene import HeatmapOverlay, Label, SpatialBinder, Texture
from scene.graph import SceneNode
from services.dashboard import DashboardService

SAMPLE_CO2_MEAN = (800 + 1000 + 200 + 0 + 650 + 1200 + 500) / 7


def _attached(scene: SceneNode, kind: type) -> list[SceneNode]:
    return [n for n in scene.children if isinstance(n, kind)]


def _ready_service() -> DashboardService:
    service = DashboardService()
    service.set_records(create_sample_records())
    service.set_scene(create_sample_scene())
    return service


def test_nothing_computed_without_records() -> None:
    service = DashboardService()
    assert service.refresh() is False
    snap = service.snapshot()
    assert snap.pending
    assert snap.kpi_value == 0.0
    assert snap.per_room == {}


def test_scene_stages_deferred_until_scene_arrives() -> None:
    service = DashboardService()
    assert service.set_records(create_sample_records()) is False

    assert service.kpi_value == pytest.approx(SAMPLE_CO2_MEAN)
    assert service.snapshot().pending
    assert len(service.labels) == 0

    scene = create_sample_scene()
    assert service.set_scene(scene) is True
    assert not service.snapshot().pending
    assert len(_attached(scene, Label)) == 4
    assert len(_attached(scene, HeatmapOverlay)) == 4


def test_per_room_table_and_labels() -> None:
    service = _ready_service()
    snap = service.snapshot()

    assert snap.per_room == {"Room 1": 900.0, "Room 2": 100.0, "Room 3": 650.0, "Room 4": 1200.0, "Room 5": 500.0}
    # Room 5 has no node in the model, so it gets no label.
    assert snap.labels == {"Room 1": "900.00", "Room 2": "100.00", "Room 3": "650.00", "Room 4": "1200.00"}


def test_month_change_reuses_overlays_and_anchors() -> None:
    service = _ready_service()
    overlays = list(service.overlays)
    generation = service.binder.generation

    service.select(month="January")

    assert service.kpi_value == pytest.approx((800 + 200 + 650) / 3)
    assert list(service.overlays) == overlays
    assert service.binder.generation == generation


def test_kpi_change_replaces_overlays() -> None:
    service = _ready_service()
    scene = service.scene
    assert scene is not None
    old = list(service.overlays)

    service.select(kpi=KpiName.HUMIDITY)

    fresh = list(service.overlays)
    assert all(o not in fresh for o in old)
    assert all(o.parent is None for o in old)
    assert _attached(scene, HeatmapOverlay) == fresh
    assert service.snapshot().per_room["Room 2"] == 17.5


def test_floor_selection_hides_other_floor() -> None:
    service = _ready_service()
    service.select(floor="1st")

    scene = service.scene
    assert scene is not None
    assert service.selection.floor == FloorSelector.FIRST
    assert scene.get_object_by_name("FirstFloorWalls").visible
    assert not scene.get_object_by_name("SecondFloorRoom1").visible
    # Every bound room sits on the second floor, so its label and overlay go too.
    assert not any(o.visible for o in service.overlays)
    assert not any(label.visible for label in service.labels)


def test_attachments_reappear_with_their_floor() -> None:
    service = _ready_service()
    overlays = list(service.overlays)

    service.select(floor="1st")
    service.select(floor="2nd")

    assert list(service.overlays) == overlays
    assert all(o.visible for o in service.overlays)
    assert all(label.visible for label in service.labels)

    service.select(floor="all")
    assert all(o.visible for o in service.overlays)


def test_attachments_built_while_floor_hidden_start_hidden() -> None:
    service = _ready_service()
    service.select(floor="1st")
    service.select(kpi=KpiName.HUMIDITY)

    assert len(service.overlays) == 4
    assert not any(o.visible for o in service.overlays)


def test_custom_css_colours_drive_the_scene() -> None:
    config = VisualizationConfig(neutral_color="darkgray", low_color="lime", flat_color="ivory")
    service = DashboardService(config=config)
    service.set_records(create_sample_records())

    assert service.set_scene(create_sample_scene()) is True
    scene = service.scene
    assert scene is not None
    assert scene.get_object_by_name("FirstFloorWalls").material.color.hex == "#a9a9a9"
    assert scene.get_object_by_name("Furniture_Chair").material.color.hex == "#fffff0"


def test_forecast_mode_uses_forecast_feed() -> None:
    service = _ready_service()
    forecast = [
        SensorRecord(None, 400.0, 40.0, 20.0, 0.0, 0.0, "May", "2025-05-01"),
        SensorRecord(None, 600.0, 50.0, 22.0, 0.0, 0.0, "May", "2025-05-02"),
    ]
    service.set_forecast(forecast)
    service.select(mode=Mode.FORECAST)

    assert service.kpi_value == pytest.approx(500.0)
    assert [p.value for p in service.series()] == pytest.approx([400.0, 500.0])
    assert service.snapshot().per_room["Room 1"] == 900.0


def test_invalid_selection_raises() -> None:
    service = _ready_service()
    with pytest.raises(ValueError):
        service.select(kpi="Noise")
    with pytest.raises(ValueError):
        service.select(floor="3rd")


def test_failed_cycle_keeps_previous_state() -> None:
    class FlakyBinder(SpatialBinder):
        broken = False

        def build_overlays(self, scene, anchors, per_room, kpi):  # type: ignore[no-untyped-def]
            if self.broken:
                raise RuntimeError("texture synthesis failed")
            return super().build_overlays(scene, anchors, per_room, kpi)

    binder = FlakyBinder()
    service = DashboardService(binder=binder)
    service.set_records(create_sample_records())
    service.set_scene(create_sample_scene())
    overlays = list(service.overlays)
    per_room = dict(service.snapshot().per_room)

    binder.broken = True
    assert service.select(kpi=KpiName.TEMPERATURE) is False

    assert list(service.overlays) == overlays
    assert service.snapshot().per_room == per_room


def test_scene_swap_detaches_old_attachments() -> None:
    service = _ready_service()
    old_scene = service.scene
    assert old_scene is not None

    new_scene = create_sample_scene()
    service.set_scene(new_scene)

    assert not _attached(old_scene, HeatmapOverlay)
    assert not _attached(old_scene, Label)
    assert len(_attached(new_scene, HeatmapOverlay)) == 4


def test_texture_applied_to_structural_meshes() -> None:
    service = _ready_service()
    texture = Texture("Texture7.jpg")
    service.set_texture(texture)

    scene = service.scene
    assert scene is not None
    assert scene.get_object_by_name("FirstFloorWalls").material.map is texture
    assert scene.get_object_by_name("Furniture_Chair").material.map is None


def test_gauge_uses_dashboard_domain() -> None:
    service = _ready_service()
    gauge = service.gauge()
    assert gauge.percent == pytest.approx(SAMPLE_CO2_MEAN / 1000)
    assert gauge.text == f"{SAMPLE_CO2_MEAN:.1f} CO2"


def test_room_shares_and_overlay_texture() -> None:
    service = _ready_service()
    shares = {s.name: s.value for s in service.room_shares()}
    assert shares["Room 1"] == 1800.0
    assert shares["Room 2"] == 200.0

    image = service.overlay_texture("Room 4")
    assert image is not None and image.getpixel((0, 0)) == (255, 0, 0, 247)
    assert service.overlay_texture("Room 5") is None


def test_load_assets_tolerates_missing_files(tmp_path) -> None:
    feed = tmp_path / "kpis_data.csv"
    pd.DataFrame(SAMPLE_ROWS).to_csv(feed, index=False)
    paths = AssetPaths(
        sensor_feed=feed,
        forecast_feed=tmp_path / "missing_forecast.csv",
        scene=tmp_path / "missing.gltf",
        texture=tmp_path / "missing.jpg",
    )
    service = DashboardService()

    asyncio.run(service.load_assets(paths))

    assert len(service.records) == len(SAMPLE_ROWS)
    assert service.scene is None
    assert service.snapshot().pending
    assert math.isclose(service.kpi_value, SAMPLE_CO2_MEAN)
