import curses
import logging
import os
import sys
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from alarms.command_router import View
from alarms.parser import HELP_LINES
from alarms.storage import Alarm

try:
    import msvcrt
except ImportError:  # pragma: no cover - POSIX
    msvcrt = None  # type: ignore
    import select
else:  # pragma: no cover - Windows
    select = None  # type: ignore

logger = logging.getLogger(__name__)

CLOCK_ROW = 2
ALARM_ROW = 3
MESSAGE_ROW = 4
BODY_ROW = 5
LEFT = 10


@dataclass
class Frame:
    clock: str
    ringing_name: Optional[str] = None
    message: Optional[str] = None
    view: View = View.CLOCK
    alarms: List[Tuple[int, Alarm]] = field(default_factory=list)


def format_alarm_row(index: int, alarm: Alarm) -> str:
    return f"{index}  {alarm.hour:2d}:{alarm.minute:02d}  {alarm.name}"


def alarm_table(alarms: List[Tuple[int, Alarm]]) -> List[str]:
    return ["#  HH:MM  Name"] + [format_alarm_row(index, alarm) for index, alarm in alarms]


def body_lines(frame: Frame) -> List[str]:
    if frame.view == View.LIST:
        return alarm_table(frame.alarms)
    if frame.view == View.HELP:
        return list(HELP_LINES)
    return []


def _ask(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


def _ask_new_alarm() -> Optional[Tuple[str, str, str]]:
    print("\nPlease enter an alarm (hour, minute, name)")
    hour = _ask("Hour: ")
    if hour is None:
        return None
    minute = _ask("Minute: ")
    if minute is None:
        return None
    name = _ask("Name: ")
    if name is None:
        return None
    return hour, minute, name


def _ask_delete_index(alarms: List[Tuple[int, Alarm]]) -> Optional[str]:
    print("Which alarm # do you want to delete?")
    for line in alarm_table(alarms):
        print(f"{'':{LEFT}}{line}")
    return _ask("# ")


class CursesScreen:
    interactive = True

    def __init__(self, poll_interval_ms: int = 100):
        self.poll_interval_ms = poll_interval_ms
        self.stdscr = None
        self._ring_attr = curses.A_BOLD

    def start(self) -> None:
        self.stdscr = curses.initscr()
        curses.noecho()
        curses.cbreak()
        self.stdscr.keypad(True)
        self.stdscr.timeout(self.poll_interval_ms)
        self._init_colors()
        self.stdscr.clear()

    def stop(self) -> None:
        if self.stdscr is None:
            return
        self.stdscr.clear()
        self.stdscr.refresh()
        self.stdscr.keypad(False)
        curses.nocbreak()
        curses.echo()
        curses.endwin()
        self.stdscr = None

    def _init_colors(self) -> None:
        try:
            if curses.has_colors():
                curses.start_color()
                curses.init_pair(1, curses.COLOR_WHITE, curses.COLOR_RED)
                self._ring_attr = curses.color_pair(1) | curses.A_BOLD
        except curses.error:
            logger.debug("Terminal colours unavailable")

    def _write(self, row: int, text: str, attr: int = 0) -> None:
        try:
            self.stdscr.addstr(row, LEFT, text, attr)
        except curses.error:
            # writing past the bottom-right corner of a small terminal
            pass

    def draw(self, frame: Frame) -> None:
        self.stdscr.erase()
        self._write(CLOCK_ROW, frame.clock)
        if frame.ringing_name is not None:
            self._write(ALARM_ROW, f'ALARM!  name="{frame.ringing_name}"', self._ring_attr)
        if frame.message:
            self._write(MESSAGE_ROW, frame.message)
        for offset, line in enumerate(body_lines(frame)):
            self._write(BODY_ROW + offset, line)
        self.stdscr.refresh()

    def read_key(self):
        ch = self.stdscr.getch()
        if ch == -1 or ch == curses.KEY_RESIZE:
            return None
        return ch

    def prompt_new_alarm(self) -> Optional[Tuple[str, str, str]]:
        self.stop()
        try:
            return _ask_new_alarm()
        finally:
            self.start()

    def prompt_delete_index(self, alarms: List[Tuple[int, Alarm]]) -> Optional[str]:
        self.stop()
        try:
            return _ask_delete_index(alarms)
        finally:
            self.start()


class PlainScreen:
    """Line-oriented fallback when no interactive terminal is available."""

    interactive = False

    def __init__(self, poll_interval_ms: int = 100, stream=None):
        self.poll_interval = poll_interval_ms / 1000.0
        self.stream = stream or sys.stdout
        self._last_clock: Optional[str] = None
        self._last_extra: Optional[tuple] = None
        self._stdin_open = True

    def start(self) -> None:
        print("Type a command letter and press Enter (? for help).", file=self.stream)

    def stop(self) -> None:
        self.stream.flush()

    def draw(self, frame: Frame) -> None:
        if frame.clock != self._last_clock:
            line = frame.clock
            if frame.ringing_name is not None:
                line += f'  ALARM!  name="{frame.ringing_name}"'
            print(line, file=self.stream)
            self._last_clock = frame.clock
        extra = (frame.message, frame.view, tuple(frame.alarms))
        if extra != self._last_extra:
            if frame.message:
                print(frame.message, file=self.stream)
            for line in body_lines(frame):
                print(line, file=self.stream)
            self._last_extra = extra
        self.stream.flush()

    def read_key(self) -> Optional[str]:
        if not self._stdin_open:
            time.sleep(self.poll_interval)
            return None
        if msvcrt:  # pragma: no cover - Windows console
            deadline = time.monotonic() + self.poll_interval
            while time.monotonic() < deadline:
                if msvcrt.kbhit():
                    return msvcrt.getwch()
                time.sleep(0.01)
            return None
        ready, _, _ = select.select([sys.stdin], [], [], self.poll_interval)
        if not ready:
            return None
        line = sys.stdin.readline()
        if line == "":
            logger.info("stdin closed, commands disabled")
            self._stdin_open = False
            return None
        line = line.rstrip("\r\n")
        return line or None

    def prompt_new_alarm(self) -> Optional[Tuple[str, str, str]]:
        return _ask_new_alarm()

    def prompt_delete_index(self, alarms: List[Tuple[int, Alarm]]) -> Optional[str]:
        return _ask_delete_index(alarms)


def has_interactive_terminal() -> bool:
    return bool(os.getenv("TERM")) and sys.stdin.isatty() and sys.stdout.isatty()


def create_screen(poll_interval_ms: int):
    if has_interactive_terminal():
        return CursesScreen(poll_interval_ms)
    return PlainScreen(poll_interval_ms)
