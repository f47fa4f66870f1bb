"""Core domain models and configuration."""

from core.config import DEFAULT, AssetPaths, OverlaySize, RoomBinding, VisualizationConfig
from core.models import (
    MONTHS,
    SELECT_ALL,
    AggregateResult,
    FloorSelector,
    GaugeReading,
    KpiDomain,
    KpiName,
    Mode,
    RoomAggregate,
    RoomShare,
    SensorRecord,
    SeriesPoint,
)

__all__ = [
    "DEFAULT",
    "MONTHS",
    "SELECT_ALL",
    "AggregateResult",
    "AssetPaths",
    "FloorSelector",
    "GaugeReading",
    "KpiDomain",
    "KpiName",
    "Mode",
    "OverlaySize",
    "RoomAggregate",
    "RoomBinding",
    "RoomShare",
    "SensorRecord",
    "SeriesPoint",
    "VisualizationConfig",
]
