from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .errors import AlarmStorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alarm:
    hour: int
    minute: int
    name: str

    @property
    def trigger_seconds(self) -> int:
        return self.hour * 3600 + self.minute * 60

    def to_dict(self) -> dict:
        return {
            "hour": self.hour,
            "minute": self.minute,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Alarm":
        if "hour" not in data or "minute" not in data:
            raise ValueError("Alarm payload missing hour/minute fields")
        return cls(
            hour=int(data["hour"]),
            minute=int(data["minute"]),
            name=str(data.get("name") or ""),
        )


def load_alarms(path: Path) -> List[Alarm]:
    if not path.exists():
        return []
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as exc:
        logger.error("Failed to load alarms from %s: %s", path, exc)
        return []
    if not isinstance(payload, list):
        logger.error("Alarm file %s does not hold a list, ignoring it", path)
        return []
    alarms: List[Alarm] = []
    for item in payload:
        try:
            alarms.append(Alarm.from_dict(item))
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping alarm item due to parse error: %s", exc)
    return alarms


def save_alarms(path: Path, alarms: List[Alarm]) -> None:
    serializable = [a.to_dict() for a in alarms]
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(serializable, f, ensure_ascii=False, indent=2)
    except OSError as exc:
        logger.error("Failed to save %s alarms to %s: %s", len(alarms), path, exc)
        raise AlarmStorageError(f"Could not save alarms to {path}: {exc}") from exc
