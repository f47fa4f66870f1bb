"""KPI aggregation over sensor records.

The scalar KPI value respects the month filter, while the per-room table is
always computed over the full record set. Invalid readings count as zero but
still count towards the denominator.
"""

import numpy as np

from analysis.colors import normalize
from core.models import (
    SELECT_ALL,
    AggregateResult,
    GaugeReading,
    KpiDomain,
    KpiName,
    RoomAggregate,
    RoomShare,
    SensorRecord,
    SeriesPoint,
)


def filter_by_month(records: list[SensorRecord], month: str | None) -> list[SensorRecord]:
    """Keep records of one calendar month. ``None`` or "Select All" keeps everything."""
    if month is None or month == SELECT_ALL:
        return list(records)
    return [r for r in records if r.month == month]


def scalar_average(records: list[SensorRecord], kpi: KpiName) -> float:
    """Mean of one KPI, invalid values summed as zero. Empty input gives 0.0."""
    if not records:
        return 0.0
    return sum(r.value_or_zero(kpi) for r in records) / len(records)


def group_by_room(records: list[SensorRecord]) -> dict[str, RoomAggregate]:
    """Per-room running sums. Records without a room are ignored."""
    groups: dict[str, RoomAggregate] = {}
    for record in records:
        if record.room_id is None:
            continue
        groups.setdefault(record.room_id, RoomAggregate(room_id=record.room_id)).add(record)
    return groups


def room_averages(records: list[SensorRecord], kpi: KpiName) -> dict[str, float]:
    """Two-decimal average of one KPI per room."""
    return {room_id: agg.average(kpi) for room_id, agg in group_by_room(records).items() if agg.count > 0}


def aggregate(records: list[SensorRecord], kpi: KpiName, month: str | None = None) -> AggregateResult:
    """Scalar KPI value for the month filter plus the unfiltered per-room table."""
    return AggregateResult(
        scalar_average=scalar_average(filter_by_month(records, month), kpi),
        per_room=room_averages(records, kpi),
    )


def forecast_average(forecast: list[SensorRecord], kpi: KpiName) -> float:
    """Scalar KPI value in forecast mode (no room dimension)."""
    return scalar_average(forecast, kpi)


# ---------------------------------------------------------------------------
# Chart feeds
# ---------------------------------------------------------------------------


def room_totals(records: list[SensorRecord], kpi: KpiName) -> list[RoomShare]:
    """Summed KPI per room, in first-seen order."""
    totals: dict[str, float] = {}
    for record in records:
        if record.room_id is None:
            continue
        totals[record.room_id] = totals.get(record.room_id, 0.0) + record.value_or_zero(kpi)
    return [RoomShare(name=room_id, value=value) for room_id, value in totals.items()]


def moving_average(values: list[float], window: int) -> list[float]:
    """Trailing moving average; the first points average over what is available."""
    if not values:
        return []
    window = max(window, 1)
    arr = np.asarray(values, dtype=np.float64)
    csum = np.concatenate(([0.0], np.cumsum(arr)))
    idx = np.arange(1, len(arr) + 1)
    start = np.maximum(idx - window, 0)
    return ((csum[idx] - csum[start]) / (idx - start)).tolist()


def time_series(records: list[SensorRecord], kpi: KpiName, window: int = 30) -> list[SeriesPoint]:
    """Smoothed KPI values labelled by month, in record order."""
    smoothed = moving_average([r.value_or_zero(kpi) for r in records], window)
    return [SeriesPoint(time=r.month, value=v) for r, v in zip(records, smoothed, strict=True)]


def gauge_reading(kpi: KpiName, value: float, domain: KpiDomain) -> GaugeReading:
    """Gauge position for a scalar KPI value plus its display text."""
    return GaugeReading(
        kpi=kpi,
        value=value,
        percent=normalize(value, domain),
        text=f"{value:.1f} {kpi}",
    )
