import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _get_env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    return val.strip() in {"1", "true", "True", "yes", "YES", "y"}


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


@dataclass
class Config:
    alarms_path: Path
    alarm_sound_path: Path
    alarm_sound_enabled: bool
    speak_alarm_name: bool
    timezone_name: Optional[str]
    poll_interval_ms: int
    debug: bool
    log_level: str
    log_dir: Path

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000.0


def load_config(env_path: Optional[Path] = None) -> Config:
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    alarms_path = Path(os.getenv("ALARM_STORAGE_PATH", "alarms.json"))
    alarm_sound_path = Path(os.getenv("ALARM_SOUND_PATH", "data/alarm.wav"))
    alarm_sound_enabled = _get_env_bool("ALARM_SOUND", True)
    speak_alarm_name = _get_env_bool("ALARM_SPEAK_NAME", False)
    timezone_name = os.getenv("ALARM_TIMEZONE") or None
    poll_interval_ms = max(20, _get_env_int("POLL_INTERVAL_MS", 100))
    debug = _get_env_bool("DEBUG", False)
    log_level = "DEBUG" if debug else os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir = Path(os.getenv("LOG_DIR", "logs"))

    return Config(
        alarms_path=alarms_path,
        alarm_sound_path=alarm_sound_path,
        alarm_sound_enabled=alarm_sound_enabled,
        speak_alarm_name=speak_alarm_name,
        timezone_name=timezone_name,
        poll_interval_ms=poll_interval_ms,
        debug=debug,
        log_level=log_level,
        log_dir=log_dir,
    )


def setup_logging(log_level: str = "INFO", log_dir: Path = Path("logs"), console: bool = True) -> None:
    """File logging always; console only when curses does not own the screen."""
    log_dir.mkdir(parents=True, exist_ok=True)

    log_path = log_dir / "alarm_clock.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    handlers: list = [file_handler]

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=handlers,
    )
