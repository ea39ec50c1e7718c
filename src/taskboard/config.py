"""Settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from taskboard.persistence import DEFAULT_DB_FILE
from taskboard.reminders import REMINDER_WINDOW_DAYS

ENV_PREFIX = "TASKBOARD"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass
class Settings:
    db_path: Path = Path(DEFAULT_DB_FILE)
    reminder_days: int = REMINDER_WINDOW_DAYS
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            db_path=_env_path(_k("DB"), Path(DEFAULT_DB_FILE)),
            reminder_days=_env_int(_k("REMINDER_DAYS"), REMINDER_WINDOW_DAYS),
            log_level=(os.getenv(_k("LOG_LEVEL")) or "WARNING").strip().upper(),
        )
