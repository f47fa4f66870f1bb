"""Analysis utilities - pure functions over sensor records and KPI values."""

from analysis.aggregation import (
    aggregate,
    filter_by_month,
    forecast_average,
    gauge_reading,
    group_by_room,
    moving_average,
    room_averages,
    room_totals,
    scalar_average,
    time_series,
)
from analysis.colors import Color, color_for, heatmap_texture, lerp_color, linear_gradient, normalize

__all__ = [
    "Color",
    "aggregate",
    "color_for",
    "filter_by_month",
    "forecast_average",
    "gauge_reading",
    "group_by_room",
    "heatmap_texture",
    "lerp_color",
    "linear_gradient",
    "moving_average",
    "normalize",
    "room_averages",
    "room_totals",
    "scalar_average",
    "time_series",
]
