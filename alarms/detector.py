from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo as TzInfo
from typing import Iterator, Optional, Sequence, Tuple

from time_utils import Timestamp, normalize_seconds_of_day, seconds_of_day

from .storage import Alarm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RingMatch:
    matched: bool
    name: str = ""


NO_MATCH = RingMatch(matched=False)


def trigger_in_window(trigger: int, start: int, end: int) -> bool:
    """True if ``trigger`` lies in [start, end] on the 24h circle (all seconds-of-day)."""
    duration = normalize_seconds_of_day(end - start)
    offset = normalize_seconds_of_day(trigger - start)
    return 0 <= offset <= duration


def matching_alarms(
    alarms: Sequence[Alarm],
    previous_time: Timestamp,
    current_time: Timestamp,
    tzinfo: Optional[TzInfo] = None,
) -> Iterator[Tuple[int, Alarm]]:
    start = seconds_of_day(previous_time, tzinfo)
    end = seconds_of_day(current_time, tzinfo)
    for index, alarm in enumerate(alarms):
        if trigger_in_window(alarm.trigger_seconds, start, end):
            yield index, alarm


def find_ringing(
    alarms: Sequence[Alarm],
    previous_time: Timestamp,
    current_time: Timestamp,
    tzinfo: Optional[TzInfo] = None,
) -> RingMatch:
    """Check whether any alarm fires between two wall-clock readings.

    Both readings are reduced to seconds since local midnight, so alarms
    repeat daily and an interval that crosses midnight wraps around. When
    several alarms match, the last one in list order wins.
    """
    result = NO_MATCH
    for index, alarm in matching_alarms(alarms, previous_time, current_time, tzinfo):
        if result.matched:
            logger.info("Alarm %r superseded by #%s %r in the same interval", result.name, index, alarm.name)
        result = RingMatch(matched=True, name=alarm.name)
    return result
