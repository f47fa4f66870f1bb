"""Row normalizer: parsed CSV rows -> SensorRecord.

Feeds come in a few shapes (column names and scaling differ), described by a
``FeedVariant``. Malformed KPI cells never drop a row; they become NaN and
count as zero during aggregation.
"""

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import pandas as pd

from core.models import MONTHS, SELECT_ALL, KpiName, SensorRecord

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class FeedVariant:
    """Column layout and value parsing for one source feed."""

    name: str
    room_columns: tuple[str, ...] = ("RoomID", "room")
    timestamp_columns: tuple[str, ...] = ("Timestamp", "start_time")
    kpi_columns: dict[KpiName, str] = field(default_factory=lambda: {kpi: kpi.value for kpi in KpiName})
    spaceutil_scale: float = 1.0
    integer_values: bool = True
    has_room: bool = True


KPIS_FEED = FeedVariant(name="kpis")
SPACE_FEED = FeedVariant(name="space", spaceutil_scale=100.0, integer_values=False)
FORECAST_FEED = FeedVariant(name="forecast", integer_values=False, has_room=False)


def parse_kpi(raw: object, integer: bool = True) -> float:
    """Parse one KPI cell. Blank or non-numeric cells give NaN.

    With ``integer`` set, only the leading integer part is read, so "23.7"
    parses as 23 and "41ppm" as 41.
    """
    if raw is None:
        return math.nan
    if isinstance(raw, (int, float)):
        value = float(raw)
        if integer and math.isfinite(value):
            return float(math.trunc(value))
        return value

    text = str(raw)
    if integer:
        match = _INT_PREFIX.match(text)
        return float(match.group(1)) if match else math.nan
    try:
        return float(text.strip())
    except ValueError:
        return math.nan


def month_label(timestamp: str | None) -> str:
    """Calendar month name for a timestamp, or "" if it cannot be parsed."""
    if not timestamp:
        return ""
    parsed = pd.to_datetime(timestamp, errors="coerce")
    if pd.isna(parsed):
        return ""
    return MONTHS[parsed.month - 1]


def month_options() -> list[str]:
    """Month filter choices, sentinel first."""
    return [SELECT_ALL, *MONTHS]


def _first_present(row: Mapping[str, object], columns: tuple[str, ...]) -> str | None:
    for column in columns:
        value = row.get(column)
        if value is not None and value != "":
            return str(value)
    return None


def normalize_row(row: Mapping[str, object], variant: FeedVariant = KPIS_FEED, month: str | None = None) -> SensorRecord:
    """Convert one parsed row into a SensorRecord."""
    timestamp = _first_present(row, variant.timestamp_columns) or ""
    values = {
        kpi: parse_kpi(row.get(column), integer=variant.integer_values) for kpi, column in variant.kpi_columns.items()
    }
    values[KpiName.SPACE_UTIL] = values.get(KpiName.SPACE_UTIL, math.nan) * variant.spaceutil_scale

    return SensorRecord(
        room_id=_first_present(row, variant.room_columns) if variant.has_room else None,
        co2=values.get(KpiName.CO2, math.nan),
        humidity=values.get(KpiName.HUMIDITY, math.nan),
        temperature=values.get(KpiName.TEMPERATURE, math.nan),
        occupancy=values.get(KpiName.OCCUPANCY, math.nan),
        spaceutil=values[KpiName.SPACE_UTIL],
        month=month if month is not None else month_label(timestamp),
        timestamp=timestamp,
    )


def normalize_rows(rows: Iterable[Mapping[str, object]], variant: FeedVariant = KPIS_FEED) -> list[SensorRecord]:
    """Normalize every row; the month labels are parsed in one vectorised pass."""
    rows = list(rows)
    if not rows:
        return []

    timestamps = [_first_present(row, variant.timestamp_columns) or "" for row in rows]
    try:
        parsed = pd.to_datetime(pd.Series(timestamps, dtype="object"), errors="coerce", format="mixed")
        months = ["" if pd.isna(ts) else MONTHS[ts.month - 1] for ts in parsed]
    except (ValueError, TypeError):
        # Mixed UTC offsets cannot share one column; fall back to row by row.
        months = [month_label(ts) for ts in timestamps]

    return [normalize_row(row, variant, month=month) for row, month in zip(rows, months, strict=True)]
