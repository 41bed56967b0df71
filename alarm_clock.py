import logging
import signal
from typing import Optional

from alarms.command_router import CommandRouter, View
from alarms.manager import AlarmManager
from alarms.sounds import AlarmSoundPlayer, LocalSpeaker
from config import Config, load_config, setup_logging
from terminal_ui import Frame, create_screen, has_interactive_terminal
from time_utils import format_clock, format_tz_offset, now_in_tz, resolve_timezone

logger = logging.getLogger("alarm_clock")


def graceful_exit(signum, frame) -> None:  # pragma: no cover - signal handler
    logger.info("Shutting down (signal %s)", signum)
    raise KeyboardInterrupt()


class ClockRuntime:
    """Single-threaded polling loop: tick, draw, wait for a key, act."""

    def __init__(self, config: Config, alarm_manager: AlarmManager, screen, local_speaker: Optional[LocalSpeaker] = None):
        self.config = config
        self.alarm_manager = alarm_manager
        self.screen = screen
        self.local_speaker = local_speaker
        self.router = CommandRouter(alarm_manager, screen)
        self.message: Optional[str] = None
        self.done = False

    def step(self) -> None:
        now = now_in_tz(self.alarm_manager.tzinfo)
        self.alarm_manager.tick(now)
        self.screen.draw(self._frame(now))

        key = self.screen.read_key()
        result = self.router.handle_key(key)
        if result.action is None:
            return
        self.message = result.response_text
        if result.quit:
            self.done = True

    def run(self) -> None:
        self.screen.start()
        try:
            while not self.done:
                self.step()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self.screen.stop()
            self.alarm_manager.shutdown()

    def on_alarm_triggered(self, name: str) -> None:
        if self.local_speaker and self.local_speaker.available:
            self.local_speaker.announce(name)

    def _frame(self, now) -> Frame:
        view = self.router.view
        return Frame(
            clock=format_clock(now),
            ringing_name=self.alarm_manager.ringing_name if self.alarm_manager.is_ringing else None,
            message=self.message,
            view=view,
            alarms=self.alarm_manager.list_alarms() if view == View.LIST else [],
        )


def build_runtime(config: Config, screen=None, local_speaker: Optional[LocalSpeaker] = None) -> ClockRuntime:
    tzinfo = resolve_timezone(config.timezone_name)
    screen = screen or create_screen(config.poll_interval_ms)
    sound_player = AlarmSoundPlayer(config.alarm_sound_path, enabled=config.alarm_sound_enabled)
    if local_speaker is None and config.speak_alarm_name:
        local_speaker = LocalSpeaker()
    manager = AlarmManager(
        storage_path=config.alarms_path,
        sound_player=sound_player,
        timezone=tzinfo,
    )
    runtime = ClockRuntime(config, manager, screen, local_speaker)
    manager.on_alarm_triggered = runtime.on_alarm_triggered
    return runtime


def main() -> None:
    config = load_config()
    setup_logging(config.log_level, config.log_dir, console=not has_interactive_terminal())
    signal.signal(signal.SIGINT, graceful_exit)
    logger.info("Starting alarm clock (storage=%s)", config.alarms_path)
    runtime = build_runtime(config)
    offset = format_tz_offset(runtime.alarm_manager.tzinfo)
    logger.info("Clock timezone %s (UTC%s)", config.timezone_name or "local", offset)
    runtime.alarm_manager.start()
    runtime.run()


if __name__ == "__main__":
    main()
