"""Sample data and fixtures."""

from data.sample_records import SAMPLE_ROWS, create_sample_records
from data.sample_scene import create_sample_scene

__all__ = ["SAMPLE_ROWS", "create_sample_records", "create_sample_scene"]
