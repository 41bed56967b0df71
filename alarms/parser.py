from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import AlarmInputError


class KeyAction(Enum):
    ADD = "add"
    DELETE = "delete"
    LIST = "list"
    HELP = "help"
    DISMISS = "dismiss"
    QUIT = "quit"
    UNKNOWN = "unknown"


KEY_BINDINGS = {
    "a": KeyAction.ADD,
    "d": KeyAction.DELETE,
    "l": KeyAction.LIST,
    "?": KeyAction.HELP,
    "h": KeyAction.HELP,
    " ": KeyAction.DISMISS,
    "q": KeyAction.QUIT,
}

HELP_LINES = (
    "Key  Action",
    " A   Add alarm",
    " D   Delete alarm",
    " L   List alarms",
    " ?   Show this help screen",
    "SPACE  Silence an active alarm",
    " Q   Quit",
)

_INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass
class AlarmEntry:
    hour: int
    minute: int
    name: str


def parse_key(key: Union[str, int, None]) -> Optional[KeyAction]:
    """Map a pressed key to an action; None means nothing was pressed."""
    if key is None or key == -1:
        return None
    if isinstance(key, int):
        if key < 0 or key > 0x10FFFF:
            return KeyAction.UNKNOWN
        key = chr(key)
    if not key:
        return None
    return KEY_BINDINGS.get(key[0].lower(), KeyAction.UNKNOWN)


def parse_int(text: str, field: str) -> int:
    cleaned = (text or "").strip()
    if not _INT_RE.match(cleaned):
        raise AlarmInputError(f"{field} must be a whole number, got {cleaned!r}")
    return int(cleaned)


def parse_alarm_entry(hour_text: str, minute_text: str, name_text: str) -> AlarmEntry:
    """Parse the three answers of the add prompt.

    Hour and minute are not range-checked: 25:70 is stored as typed.
    """
    return AlarmEntry(
        hour=parse_int(hour_text, "Hour"),
        minute=parse_int(minute_text, "Minute"),
        name=(name_text or "").strip(),
    )


def parse_alarm_index(text: str) -> int:
    return parse_int(text, "Alarm #")
