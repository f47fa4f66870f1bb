"""Core data models for the building KPI dashboard."""

import math
from dataclasses import dataclass, field
from enum import StrEnum

SELECT_ALL = "Select All"

MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class KpiName(StrEnum):
    CO2 = "CO2"
    HUMIDITY = "Humidity"
    TEMPERATURE = "Temperature"
    OCCUPANCY = "Occupancy"
    SPACE_UTIL = "SpaceUtil"

    @property
    def field(self) -> str:
        """Attribute name of this KPI on a SensorRecord."""
        return self.value.lower()


class Mode(StrEnum):
    HISTORICAL = "Historical"
    FORECAST = "Forecast"


class FloorSelector(StrEnum):
    ALL = "all"
    FIRST = "1st"
    SECOND = "2nd"


@dataclass
class SensorRecord:
    """One sensor sample. Invalid KPI values are kept as NaN, not dropped."""

    room_id: str | None
    co2: float
    humidity: float
    temperature: float
    occupancy: float
    spaceutil: float
    month: str
    timestamp: str

    def value(self, kpi: KpiName) -> float:
        return getattr(self, kpi.field)

    def value_or_zero(self, kpi: KpiName) -> float:
        v = self.value(kpi)
        return v if math.isfinite(v) else 0.0


@dataclass
class RoomAggregate:
    """Running per-room sums. Only ever exposed as averages."""

    room_id: str
    count: int = 0
    sums: dict[KpiName, float] = field(default_factory=lambda: dict.fromkeys(KpiName, 0.0))

    def add(self, record: SensorRecord) -> None:
        self.count += 1
        for kpi in KpiName:
            self.sums[kpi] += record.value_or_zero(kpi)

    def average(self, kpi: KpiName) -> float:
        return round(self.sums[kpi] / self.count, 2)

    def averages(self) -> dict[KpiName, float]:
        return {kpi: self.average(kpi) for kpi in KpiName}


@dataclass(frozen=True)
class KpiDomain:
    min: float
    max: float


@dataclass
class AggregateResult:
    scalar_average: float
    per_room: dict[str, float]


@dataclass
class RoomShare:
    """Summed KPI value for one room (room-wise share chart)."""

    name: str
    value: float


@dataclass
class SeriesPoint:
    time: str
    value: float


@dataclass
class GaugeReading:
    kpi: KpiName
    value: float
    percent: float
    text: str
