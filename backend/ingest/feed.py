"""CSV feed reading."""

import asyncio
import logging
from pathlib import Path

import pandas as pd

from core.models import SensorRecord
from ingest.normalizer import KPIS_FEED, FeedVariant, normalize_rows

logger = logging.getLogger(__name__)


def read_feed(path: Path | str, variant: FeedVariant = KPIS_FEED) -> list[SensorRecord]:
    """Read a sensor CSV with a header row into normalized records.

    Every cell is read as text so that blank or malformed KPI values reach the
    normalizer untouched.
    """
    frame = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    records = normalize_rows(frame.to_dict(orient="records"), variant)
    logger.info("Read %d %s rows from %s", len(records), variant.name, path)
    return records


async def load_feed(path: Path | str, variant: FeedVariant = KPIS_FEED) -> list[SensorRecord]:
    """Read a feed off the event loop. Not cancellable once started."""
    return await asyncio.to_thread(read_feed, path, variant)
