"""Pure operations over the ordered alarm list.

None of these mutate their input; callers own persistence.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .errors import AlarmIndexError
from .storage import Alarm


def add_alarm(alarms: Sequence[Alarm], new_alarm: Alarm) -> List[Alarm]:
    # hour/minute are stored as given, out-of-range values included
    return [*alarms, new_alarm]


def remove_alarm(alarms: Sequence[Alarm], index: int) -> List[Alarm]:
    if index < 0 or index >= len(alarms):
        raise AlarmIndexError(index, len(alarms))
    return [alarm for position, alarm in enumerate(alarms) if position != index]


def list_alarms(alarms: Sequence[Alarm]) -> List[Tuple[int, Alarm]]:
    return list(enumerate(alarms))
