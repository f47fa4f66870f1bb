"""Sample sensor rows, shaped like the KPI CSV feed."""

from core.models import SensorRecord
from ingest.normalizer import KPIS_FEED, normalize_rows

SAMPLE_ROWS: list[dict[str, str]] = [
    {"RoomID": "Room 1", "Timestamp": "2024-01-10T09:00:00", "CO2": "800", "Humidity": "40", "Temperature": "21", "Occupancy": "12", "SpaceUtil": "20"},
    {"RoomID": "Room 1", "Timestamp": "2024-02-10T09:00:00", "CO2": "1000", "Humidity": "44", "Temperature": "22", "Occupancy": "16", "SpaceUtil": "28"},
    {"RoomID": "Room 2", "Timestamp": "2024-01-10T09:00:00", "CO2": "200", "Humidity": "35", "Temperature": "19", "Occupancy": "2", "SpaceUtil": "5"},
    {"RoomID": "Room 2", "Timestamp": "2024-02-10T09:00:00", "CO2": "", "Humidity": "n/a", "Temperature": "20", "Occupancy": "4", "SpaceUtil": "9"},
    {"RoomID": "Room 3", "Timestamp": "2024-01-11T14:00:00", "CO2": "650", "Humidity": "50", "Temperature": "23", "Occupancy": "9", "SpaceUtil": "15"},
    {"RoomID": "Room 4", "Timestamp": "2024-03-02T11:30:00", "CO2": "1200", "Humidity": "61", "Temperature": "24", "Occupancy": "18", "SpaceUtil": "40"},
    {"RoomID": "Room 5", "Timestamp": "2024-03-02T11:30:00", "CO2": "500", "Humidity": "45", "Temperature": "21", "Occupancy": "5", "SpaceUtil": "10"},
]


def create_sample_records() -> list[SensorRecord]:
    return normalize_rows(SAMPLE_ROWS, KPIS_FEED)
