"""Alarm subsystem for the terminal alarm clock."""

from .detector import RingMatch, find_ringing
from .errors import AlarmError, AlarmIndexError, AlarmInputError, AlarmStorageError
from .manager import AlarmManager, RingState
from .storage import Alarm
