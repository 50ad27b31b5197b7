"""
Standardized Date/Time Handling Utilities

CRITICAL RULES:
- All ledger timestamps are UTC
- Day boundaries for streaks and daily rewards are UTC calendar days
- Never mix naive and aware datetimes (naive values are treated as UTC)
"""

import logging
from datetime import datetime, date, timedelta
from typing import Union
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC

    Args:
        dt: Aware datetime, or naive datetime assumed to already be UTC

    Returns:
        Timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_day_key(value: Union[datetime, date]) -> str:
    """
    Bucket a timestamp into its UTC calendar day

    Args:
        value: datetime (converted to UTC first) or date

    Returns:
        'YYYY-MM-DD'
    """
    if isinstance(value, datetime):
        value = to_utc(value).date()
    return value.isoformat()


def utc_day_bounds(day: date) -> tuple[datetime, datetime]:
    """
    Get the half-open UTC interval [start, end) covering a calendar day
    """
    start = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return start, start + timedelta(days=1)
