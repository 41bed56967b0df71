from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Tuple, Union

from .errors import AlarmIndexError, AlarmInputError, AlarmStorageError
from .manager import AlarmManager
from .parser import KeyAction, parse_alarm_entry, parse_alarm_index, parse_key
from .storage import Alarm

logger = logging.getLogger(__name__)

HELP_HINT = "Press ? for help."


class View(Enum):
    CLOCK = "clock"
    LIST = "list"
    HELP = "help"


class AlarmPrompter(Protocol):
    def prompt_new_alarm(self) -> Optional[Tuple[str, str, str]]:
        ...

    def prompt_delete_index(self, alarms: List[Tuple[int, Alarm]]) -> Optional[str]:
        ...


@dataclass
class CommandResult:
    handled: bool
    action: Optional[KeyAction] = None
    response_text: Optional[str] = None
    view: Optional[View] = None
    quit: bool = False


class CommandRouter:
    def __init__(self, alarm_manager: AlarmManager, prompter: AlarmPrompter):
        self.alarm_manager = alarm_manager
        self.prompter = prompter
        self.view = View.CLOCK

    def handle_key(self, key: Union[str, int, None]) -> CommandResult:
        action = parse_key(key)
        if action is None:
            return CommandResult(handled=False)
        logger.debug("Key %r -> %s", key, action.value)

        if action == KeyAction.ADD:
            return self._handle_add()

        if action == KeyAction.DELETE:
            return self._handle_delete()

        if action == KeyAction.LIST:
            return self._switch(action, View.LIST)

        if action == KeyAction.HELP:
            return self._switch(action, View.CLOCK if self.view == View.HELP else View.HELP)

        if action == KeyAction.DISMISS:
            name = self.alarm_manager.stop_ringing()
            return CommandResult(handled=name is not None, action=action)

        if action == KeyAction.QUIT:
            logger.info("Quit requested")
            return CommandResult(handled=True, action=action, quit=True)

        return self._switch(action, View.CLOCK, response_text=HELP_HINT)

    def _switch(self, action: KeyAction, view: View, response_text: Optional[str] = None) -> CommandResult:
        self.view = view
        return CommandResult(handled=True, action=action, response_text=response_text, view=view)

    def _handle_add(self) -> CommandResult:
        answers = self.prompter.prompt_new_alarm()
        if answers is None:
            return CommandResult(handled=True, action=KeyAction.ADD, response_text="Add cancelled.")
        try:
            entry = parse_alarm_entry(*answers)
        except AlarmInputError as exc:
            logger.warning("Rejected alarm input: %s", exc)
            return CommandResult(handled=True, action=KeyAction.ADD, response_text=str(exc))
        try:
            alarm = self.alarm_manager.add_alarm(entry.hour, entry.minute, entry.name)
        except AlarmStorageError as exc:
            return CommandResult(handled=True, action=KeyAction.ADD, response_text=str(exc))
        return CommandResult(
            handled=True,
            action=KeyAction.ADD,
            response_text=f"Added {alarm.hour:2d}:{alarm.minute:02d}  {alarm.name}",
        )

    def _handle_delete(self) -> CommandResult:
        answer = self.prompter.prompt_delete_index(self.alarm_manager.list_alarms())
        if answer is None:
            return CommandResult(handled=True, action=KeyAction.DELETE, response_text="Delete cancelled.")
        try:
            index = parse_alarm_index(answer)
            alarm = self.alarm_manager.remove_alarm_by_index(index)
        except (AlarmInputError, AlarmIndexError) as exc:
            logger.warning("Delete aborted: %s", exc)
            return CommandResult(handled=True, action=KeyAction.DELETE, response_text=str(exc))
        except AlarmStorageError as exc:
            return CommandResult(handled=True, action=KeyAction.DELETE, response_text=str(exc))
        return CommandResult(
            handled=True,
            action=KeyAction.DELETE,
            response_text=f"Deleted {alarm.hour:2d}:{alarm.minute:02d}  {alarm.name}",
        )
