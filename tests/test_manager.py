from datetime import datetime

import pytest

from alarms.errors import AlarmIndexError
from alarms.manager import AlarmManager, RingState, advance_ring_state, dismiss
from alarms.storage import Alarm, load_alarms, save_alarms


def _at(hour: int, minute: int, second: int = 0, day: int = 1, micro: int = 0) -> datetime:
    return datetime(2025, 1, day, hour, minute, second, micro)


class FakeSoundPlayer:
    def __init__(self):
        self.started = 0
        self.stopped = 0

    def start_loop(self) -> None:
        self.started += 1

    def stop_loop(self) -> None:
        self.stopped += 1


def _manager(tmp_path, alarms=None, start=None):
    path = tmp_path / "alarms.json"
    if alarms is not None:
        save_alarms(path, alarms)
    triggered = []
    manager = AlarmManager(path, sound_player=FakeSoundPlayer(), on_alarm_triggered=triggered.append)
    manager.start(now=start or _at(6, 59, 59))
    return manager, triggered


def test_advance_without_match_keeps_checkpoint():
    state = RingState(checkpoint=_at(6, 0))
    assert advance_ring_state(state, [Alarm(7, 0, "Wake")], _at(6, 30)) is state


def test_advance_with_match_moves_checkpoint():
    state = RingState(checkpoint=_at(6, 0))
    new_state = advance_ring_state(state, [Alarm(6, 15, "Tea")], _at(6, 30))
    assert new_state == RingState(
        checkpoint=_at(6, 30), is_ringing=True, name="Tea", signalled_second=6 * 3600 + 30 * 60, occurrences=1
    )


def test_dismiss_returns_to_idle_and_keeps_checkpoint():
    state = RingState(checkpoint=_at(7, 0), is_ringing=True, name="Wake")
    assert dismiss(state) == RingState(checkpoint=_at(7, 0), is_ringing=False, name="Wake")


def test_start_loads_alarms_and_is_idle(tmp_path):
    manager, _ = _manager(tmp_path, [Alarm(7, 0, "Wake")])
    assert manager.list_alarms() == [(0, Alarm(7, 0, "Wake"))]
    assert not manager.is_ringing
    assert manager.ringing_name == ""


def test_tick_before_start_is_an_error(tmp_path):
    manager = AlarmManager(tmp_path / "alarms.json")
    with pytest.raises(RuntimeError):
        manager.tick(_at(7, 0))


def test_wake_snooze_scenario(tmp_path):
    manager, triggered = _manager(tmp_path, [Alarm(7, 0, "Wake"), Alarm(7, 30, "Snooze")])

    assert manager.tick(_at(7, 0, 5)) == "Wake"
    assert manager.is_ringing
    assert manager.state.checkpoint == _at(7, 0, 5)

    assert manager.tick(_at(7, 0, 6)) is None
    assert manager.ringing_name == "Wake"
    assert triggered == ["Wake"]
    assert manager.sound_player.started == 1


def test_alarm_before_start_is_not_signalled(tmp_path):
    manager, triggered = _manager(tmp_path, [Alarm(6, 0, "Early")], start=_at(6, 30))
    assert manager.tick(_at(6, 30, 1)) is None
    assert triggered == []


def test_new_match_supersedes_ringing_alarm(tmp_path):
    manager, triggered = _manager(tmp_path, [Alarm(7, 0, "Wake"), Alarm(7, 30, "Snooze")])
    manager.tick(_at(7, 0, 1))
    assert manager.tick(_at(7, 30, 0)) == "Snooze"
    assert manager.ringing_name == "Snooze"
    assert triggered == ["Wake", "Snooze"]


def test_dismiss_stops_sound_and_goes_idle(tmp_path):
    manager, _ = _manager(tmp_path, [Alarm(7, 0, "Wake")])
    manager.tick(_at(7, 0, 1))
    assert manager.stop_ringing() == "Wake"
    assert not manager.is_ringing
    assert manager.sound_player.stopped == 1
    assert manager.stop_ringing() is None


def test_checkpoint_stays_while_nothing_matches(tmp_path):
    manager, _ = _manager(tmp_path, [Alarm(7, 0, "Wake")], start=_at(6, 0))
    manager.tick(_at(6, 30))
    manager.tick(_at(6, 45))
    assert manager.state.checkpoint == _at(6, 0)


def test_add_persists_immediately(tmp_path):
    manager, _ = _manager(tmp_path)
    manager.add_alarm(25, 61, "Odd")
    assert load_alarms(manager.storage_path) == [Alarm(25, 61, "Odd")]


def test_remove_persists_and_returns_removed(tmp_path):
    manager, _ = _manager(tmp_path, [Alarm(7, 0, "Wake"), Alarm(8, 0, "Work")])
    assert manager.remove_alarm_by_index(0) == Alarm(7, 0, "Wake")
    assert load_alarms(manager.storage_path) == [Alarm(8, 0, "Work")]


def test_invalid_remove_leaves_list_and_file_unchanged(tmp_path):
    manager, _ = _manager(tmp_path, [Alarm(7, 0, "Wake")])
    with pytest.raises(AlarmIndexError):
        manager.remove_alarm_by_index(1)
    assert manager.list_alarms() == [(0, Alarm(7, 0, "Wake"))]
    assert load_alarms(manager.storage_path) == [Alarm(7, 0, "Wake")]


def test_alarm_added_during_run_rings_on_next_tick(tmp_path):
    manager, _ = _manager(tmp_path, start=_at(7, 0))
    manager.add_alarm(7, 5, "Tea")
    assert manager.tick(_at(7, 5, 0)) == "Tea"


def test_shutdown_stops_sound(tmp_path):
    manager, _ = _manager(tmp_path)
    manager.shutdown()
    assert manager.sound_player.stopped == 1


def test_occurrence_rings_once_while_ticking_through_its_second(tmp_path):
    manager, triggered = _manager(tmp_path, [Alarm(7, 0, "Wake")], start=_at(6, 59, 59, micro=950000))
    for tenth in range(10):
        manager.tick(_at(7, 0, 0, micro=tenth * 100000))
        if tenth == 5:
            manager.stop_ringing()
    manager.tick(_at(7, 0, 0, micro=999000))
    manager.tick(_at(7, 0, 1))
    assert triggered == ["Wake"]
    assert manager.sound_player.started == 1
    assert not manager.is_ringing


def test_checkpoint_leaves_the_signalled_second(tmp_path):
    manager, _ = _manager(tmp_path, [Alarm(7, 0, "Wake")], start=_at(6, 59, 59))
    manager.tick(_at(7, 0, 0))
    manager.tick(_at(7, 0, 0, micro=500000))
    assert manager.state.checkpoint == _at(7, 0, 0, micro=500000)
    manager.tick(_at(7, 0, 1))
    assert manager.state.checkpoint == _at(7, 0, 1)


def test_same_alarm_rings_again_the_next_day(tmp_path):
    manager, triggered = _manager(tmp_path, [Alarm(7, 0, "Wake")], start=_at(6, 59, 59))
    manager.tick(_at(7, 0, 0))
    manager.tick(_at(7, 0, 1))
    manager.tick(_at(12, 0))
    manager.tick(_at(6, 59, 59, day=2))
    assert triggered == ["Wake"]
    assert manager.tick(_at(7, 0, 0, day=2)) == "Wake"
    assert triggered == ["Wake", "Wake"]


def test_other_alarm_in_the_signalled_second_window_still_rings(tmp_path):
    manager, triggered = _manager(tmp_path, [Alarm(7, 0, "Wake"), Alarm(7, 1, "Tea")], start=_at(6, 59, 59))
    manager.tick(_at(7, 0, 0))
    manager.stop_ringing()
    assert manager.tick(_at(7, 1, 0)) == "Tea"
    assert triggered == ["Wake", "Tea"]


def test_zero_length_window_at_start_still_rings():
    state = RingState(checkpoint=_at(7, 0, 0))
    assert advance_ring_state(state, [Alarm(7, 0, "Wake")], _at(7, 0, 0, micro=100000)).is_ringing
