"""Shared utilities for schema validation."""

from datetime import datetime
from typing import Any

from livecast.shared.utils.timeutil import ensure_utc


def parse_mongo_datetime(v: Any) -> Any:
    """Parse MongoDB Extended JSON datetime format or normalize a datetime to UTC.

    MongoDB Extended JSON format: {'$date': '2024-11-01T08:00:00Z'}
    This can occur when data is inserted via mongoimport or other tools.
    Naive datetimes read back from the driver are UTC.
    """
    if isinstance(v, datetime):
        return ensure_utc(v)
    if isinstance(v, dict) and "$date" in v:
        return datetime.fromisoformat(v["$date"].replace("Z", "+00:00"))
    # Return as-is and let Pydantic handle validation
    return v
