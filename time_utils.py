from __future__ import annotations

import logging
from datetime import datetime, tzinfo as TzInfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

Timestamp = Union[datetime, float, int]


def resolve_timezone(name: Optional[str]) -> Optional[TzInfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except Exception as exc:  # pragma: no cover - environment-dependent
        logger.warning("Failed to load timezone %s via zoneinfo (%s)", name, exc)
    local_tz = datetime.now().astimezone().tzinfo
    logger.warning("Using system local timezone instead: %s", getattr(local_tz, "key", local_tz))
    return local_tz


def now_in_tz(tzinfo: Optional[TzInfo]) -> datetime:
    if tzinfo:
        return datetime.now(tzinfo)
    return datetime.now().astimezone()


def to_datetime(value: Timestamp, tzinfo: Optional[TzInfo] = None) -> datetime:
    if isinstance(value, datetime):
        if tzinfo and value.tzinfo:
            return value.astimezone(tzinfo)
        return value
    if tzinfo:
        return datetime.fromtimestamp(value, tzinfo)
    return datetime.fromtimestamp(value)


def normalize_seconds_of_day(seconds: int) -> int:
    """Wrap a (possibly negative) number of seconds into [0, 86399]."""
    while seconds < 0:
        seconds += SECONDS_PER_DAY
    return seconds % SECONDS_PER_DAY


def seconds_of_day(value: Timestamp, tzinfo: Optional[TzInfo] = None) -> int:
    """Seconds since local midnight; the calendar date is discarded."""
    dt = to_datetime(value, tzinfo)
    return dt.hour * 3600 + dt.minute * 60 + dt.second


def format_clock(value: Timestamp, tzinfo: Optional[TzInfo] = None) -> str:
    dt = to_datetime(value, tzinfo)
    return f"{dt.hour:2d}:{dt.minute:02d}:{dt.second:02d}"


def format_tz_offset(tzinfo: Optional[TzInfo]) -> str:
    sample = now_in_tz(tzinfo)
    offset = sample.utcoffset()
    if offset is None:
        return ""
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"
