from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo as TzInfo
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from time_utils import normalize_seconds_of_day, now_in_tz, seconds_of_day

from .detector import find_ringing
from .sounds import AlarmSoundPlayer
from .storage import Alarm, load_alarms, save_alarms
from .store import add_alarm, list_alarms, remove_alarm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RingState:
    checkpoint: datetime
    is_ringing: bool = False
    name: str = ""
    # seconds-of-day of the checkpoint when a match last moved it
    signalled_second: Optional[int] = None
    occurrences: int = 0


def advance_ring_state(
    state: RingState,
    alarms: Sequence[Alarm],
    now: datetime,
    tzinfo: Optional[TzInfo] = None,
) -> RingState:
    """One tick of the ring state machine.

    A match moves the checkpoint to ``now`` so the same occurrence is not
    reported again; without a match the state is returned unchanged.

    Alarms whose trigger equals a checkpoint set by a match closed the
    previous window and were already signalled. Re-matching only them moves
    the checkpoint on without ringing again or undoing a dismissal.
    """
    start = seconds_of_day(state.checkpoint, tzinfo)
    fresh = alarms
    if state.signalled_second == start:
        fresh = [a for a in alarms if normalize_seconds_of_day(a.trigger_seconds) != start]

    match = find_ringing(fresh, state.checkpoint, now, tzinfo)
    if match.matched:
        return RingState(
            checkpoint=now,
            is_ringing=True,
            name=match.name,
            signalled_second=seconds_of_day(now, tzinfo),
            occurrences=state.occurrences + 1,
        )
    if len(fresh) != len(alarms) and find_ringing(alarms, state.checkpoint, now, tzinfo).matched:
        return replace(state, checkpoint=now)
    return state


def dismiss(state: RingState) -> RingState:
    return replace(state, is_ringing=False)


class AlarmManager:
    def __init__(
        self,
        storage_path: Path,
        sound_player: Optional[AlarmSoundPlayer] = None,
        on_alarm_triggered: Optional[Callable[[str], None]] = None,
        timezone: Optional[TzInfo] = None,
    ):
        self.storage_path = storage_path
        self.sound_player = sound_player
        self.on_alarm_triggered = on_alarm_triggered
        self.tzinfo = timezone

        self._alarms: List[Alarm] = []
        self._state: Optional[RingState] = None

    def start(self, now: Optional[datetime] = None) -> None:
        self._alarms = load_alarms(self.storage_path)
        logger.info("Loaded %s alarms from %s", len(self._alarms), self.storage_path)
        # Alarms that passed before start-up are never signalled.
        self._state = RingState(checkpoint=now or now_in_tz(self.tzinfo))

    def shutdown(self) -> None:
        if self.sound_player:
            self.sound_player.stop_loop()

    @property
    def state(self) -> RingState:
        if self._state is None:
            raise RuntimeError("AlarmManager.start() has not been called")
        return self._state

    @property
    def is_ringing(self) -> bool:
        return self._state is not None and self._state.is_ringing

    @property
    def ringing_name(self) -> str:
        return self.state.name if self.is_ringing else ""

    def list_alarms(self):
        return list_alarms(self._alarms)

    def add_alarm(self, hour: int, minute: int, name: str) -> Alarm:
        alarm = Alarm(hour=hour, minute=minute, name=name)
        self._alarms = add_alarm(self._alarms, alarm)
        logger.info("Alarm added at %02d:%02d (name=%s)", hour, minute, name)
        save_alarms(self.storage_path, self._alarms)
        return alarm

    def remove_alarm_by_index(self, index: int) -> Alarm:
        remaining = remove_alarm(self._alarms, index)
        removed = self._alarms[index]
        self._alarms = remaining
        logger.info("Removed alarm %r (index=%s)", removed.name, index)
        save_alarms(self.storage_path, self._alarms)
        return removed

    def tick(self, now: Optional[datetime] = None) -> Optional[str]:
        """Run the detector for the interval since the checkpoint.

        Returns the alarm name when a new match starts (or replaces) the
        ringing, otherwise None.
        """
        now = now or now_in_tz(self.tzinfo)
        previous = self.state
        current = advance_ring_state(previous, self._alarms, now, self.tzinfo)
        self._state = current
        if current.occurrences == previous.occurrences:
            return None
        self._trigger_alarm(current.name, replaced=previous.is_ringing)
        return current.name

    def stop_ringing(self) -> Optional[str]:
        if not self.is_ringing:
            return None
        name = self.state.name
        self._state = dismiss(self.state)
        if self.sound_player:
            self.sound_player.stop_loop()
        logger.info("Alarm dismissed (name=%s)", name)
        return name

    def _trigger_alarm(self, name: str, replaced: bool) -> None:
        if replaced:
            logger.info("Alarm ringing replaced by %s", name)
        else:
            logger.info("Alarm triggered (name=%s)", name)
        if self.sound_player:
            self.sound_player.start_loop()
        if self.on_alarm_triggered:
            try:
                self.on_alarm_triggered(name)
            except Exception:  # pragma: no cover - callback safety
                logger.error("on_alarm_triggered callback failed", exc_info=True)
