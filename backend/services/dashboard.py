"""Dashboard service - event-driven recomputation of KPI values and scene state.

Every event (data loaded, selection changed, scene loaded) runs one recompute
cycle to completion:

1. Aggregate the selected KPI (scalar value + per-room table)
2. Apply the floor filter and materials to the scene
3. Rebuild room labels and heatmap overlays, if anchors or values changed
4. Show labels and overlays only where their bound room is visible

Stages that need the scene are deferred until a scene has been set. A cycle
that fails is logged and leaves the last committed state in place.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from PIL import Image

from analysis.aggregation import (
    aggregate,
    filter_by_month,
    forecast_average,
    gauge_reading,
    room_totals,
    time_series,
)
from core.config import DEFAULT, AssetPaths, VisualizationConfig
from core.models import (
    SELECT_ALL,
    AggregateResult,
    FloorSelector,
    GaugeReading,
    KpiName,
    Mode,
    RoomShare,
    SensorRecord,
    SeriesPoint,
)
from ingest.feed import load_feed
from ingest.normalizer import FORECAST_FEED, KPIS_FEED
from scene.attachments import AttachmentSet, HeatmapOverlay, Label
from scene.binder import SpatialBinder
from scene.gltf import load_scene_async, load_texture_async
from scene.graph import Scene, Texture
from scene.visibility import apply_floor_filter, ball_color, sync_attachment_visibility

logger = logging.getLogger(__name__)


@dataclass
class Selection:
    kpi: KpiName = KpiName.CO2
    month: str = SELECT_ALL
    mode: Mode = Mode.HISTORICAL
    floor: FloorSelector = FloorSelector.ALL


@dataclass
class DashboardSnapshot:
    """Committed state, as exposed to the UI."""

    selection: Selection
    kpi_value: float
    per_room: dict[str, float]
    gauge: GaugeReading
    scene_ready: bool
    pending: bool
    labels: dict[str, str] = field(default_factory=dict)


class DashboardService:
    """Owns the dashboard state and the engine-owned scene attachments."""

    def __init__(self, config: VisualizationConfig = DEFAULT, binder: SpatialBinder | None = None) -> None:
        self.config = config
        self.binder = binder or SpatialBinder(config)
        self.selection = Selection()

        self.records: list[SensorRecord] = []
        self.forecast: list[SensorRecord] = []
        self.scene: Scene | None = None
        self.texture: Texture | None = None

        self.result: AggregateResult | None = None
        self.filtered: list[SensorRecord] = []
        self.labels: AttachmentSet[Label] = AttachmentSet()
        self.overlays: AttachmentSet[HeatmapOverlay] = AttachmentSet()
        self._attachment_key: tuple[object, ...] | None = None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def set_records(self, records: list[SensorRecord]) -> bool:
        self.records = list(records)
        return self.refresh()

    def set_forecast(self, forecast: list[SensorRecord]) -> bool:
        self.forecast = list(forecast)
        return self.refresh()

    def set_scene(self, scene: Scene | None) -> bool:
        self._swap_scene(scene)
        return self.refresh()

    def _swap_scene(self, scene: Scene | None) -> None:
        """Attachments on the old scene are detached and anchors forgotten."""
        if scene is not self.scene:
            self.labels.clear()
            self.overlays.clear()
            self.binder.invalidate()
            self._attachment_key = None
        self.scene = scene

    def set_texture(self, texture: Texture | None) -> bool:
        self.texture = texture
        return self.refresh()

    def select(
        self,
        kpi: KpiName | str | None = None,
        month: str | None = None,
        mode: Mode | str | None = None,
        floor: FloorSelector | str | None = None,
    ) -> bool:
        """Change any part of the selection, then recompute."""
        current = self.selection
        self.selection = Selection(
            kpi=KpiName(kpi) if kpi is not None else current.kpi,
            month=month if month is not None else current.month,
            mode=Mode(mode) if mode is not None else current.mode,
            floor=FloorSelector(floor) if floor is not None else current.floor,
        )
        return self.refresh()

    # ------------------------------------------------------------------
    # Recompute cycle
    # ------------------------------------------------------------------

    @property
    def pending(self) -> bool:
        """True while a collaborator is missing and part of the cycle is deferred."""
        return not self.records or self.scene is None

    def _aggregate(self) -> tuple[AggregateResult, list[SensorRecord]]:
        sel = self.selection
        result = aggregate(self.records, sel.kpi, sel.month)
        if sel.mode == Mode.FORECAST:
            result.scalar_average = forecast_average(self.forecast, sel.kpi)
            return result, list(self.forecast)
        return result, filter_by_month(self.records, sel.month)

    def refresh(self) -> bool:
        """Run one recompute cycle. Returns True if the scene stages ran."""
        if not self.records:
            logger.debug("No sensor records yet, deferring recompute")
            return False

        try:
            result, filtered = self._aggregate()
            scene = self.scene
            if scene is None:
                self.result, self.filtered = result, filtered
                logger.debug("Scene not loaded, deferring scene stages")
                return False

            anchors = self.binder.label_anchors(scene, self.config.room_bindings.keys())
            key = (self.binder.generation, id(scene), self.selection.kpi, tuple(sorted(result.per_room.items())))
            fresh: tuple[list[Label], list[HeatmapOverlay]] | None = None
            if key != self._attachment_key:
                fresh = (
                    self.binder.build_labels(anchors, result.per_room),
                    self.binder.build_overlays(scene, anchors, result.per_room, self.selection.kpi),
                )

            apply_floor_filter(
                scene,
                self.selection.floor,
                ball_color(self.selection.kpi, result.scalar_average, self.config),
                self.config,
                self.texture,
            )
            if fresh is not None:
                self.labels.replace(scene, fresh[0])
                self.overlays.replace(scene, fresh[1])
                self._attachment_key = key
                logger.info("Rebuilt %d labels and %d overlays", len(fresh[0]), len(fresh[1]))
            sync_attachment_visibility(scene, [*self.labels, *self.overlays], self.config)
        except Exception:
            logger.exception("Recompute failed, keeping previous state")
            return False

        self.result, self.filtered = result, filtered
        return True

    # ------------------------------------------------------------------
    # Async asset loading
    # ------------------------------------------------------------------

    async def load_assets(self, paths: AssetPaths) -> None:
        """Load feeds, scene and texture concurrently. Failures are logged, not retried."""
        records, forecast, scene, texture = await asyncio.gather(
            load_feed(paths.sensor_feed, KPIS_FEED),
            load_feed(paths.forecast_feed, FORECAST_FEED),
            load_scene_async(paths.scene),
            load_texture_async(paths.texture),
            return_exceptions=True,
        )
        for what, outcome in (
            ("sensor feed", records),
            ("forecast feed", forecast),
            ("scene", scene),
            ("texture", texture),
        ):
            if isinstance(outcome, BaseException):
                logger.warning("Failed to load %s: %s", what, outcome)

        if not isinstance(texture, BaseException):
            self.texture = texture
        if not isinstance(forecast, BaseException):
            self.forecast = forecast
        if not isinstance(scene, BaseException):
            self._swap_scene(scene)
        if not isinstance(records, BaseException):
            self.records = records
        self.refresh()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def kpi_value(self) -> float:
        return self.result.scalar_average if self.result else 0.0

    def gauge(self) -> GaugeReading:
        kpi = self.selection.kpi
        return gauge_reading(kpi, self.kpi_value, self.config.gauge_domain(kpi))

    def series(self) -> list[SeriesPoint]:
        return time_series(self.filtered, self.selection.kpi, self.config.moving_average_window)

    def room_shares(self) -> list[RoomShare]:
        return room_totals(self.records, self.selection.kpi)

    def overlay_texture(self, room_id: str) -> Image.Image | None:
        overlay = self.overlays.by_room().get(room_id)
        return overlay.texture.image if overlay else None

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            selection=self.selection,
            kpi_value=self.kpi_value,
            per_room=dict(self.result.per_room) if self.result else {},
            gauge=self.gauge(),
            scene_ready=self.scene is not None,
            pending=self.pending,
            labels={label.room_id: label.text for label in self.labels},
        )
