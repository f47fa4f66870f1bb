"""Sensor feed ingestion - raw tabular rows to typed records."""

from ingest.feed import load_feed, read_feed
from ingest.normalizer import (
    FORECAST_FEED,
    KPIS_FEED,
    SPACE_FEED,
    FeedVariant,
    month_label,
    month_options,
    normalize_row,
    normalize_rows,
    parse_kpi,
)

__all__ = [
    "FORECAST_FEED",
    "KPIS_FEED",
    "SPACE_FEED",
    "FeedVariant",
    "load_feed",
    "month_label",
    "month_options",
    "normalize_row",
    "normalize_rows",
    "parse_kpi",
    "read_feed",
]
