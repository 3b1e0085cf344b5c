# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (Firestore is optional).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    # ---- Reminders ----
    reminder_interval_seconds: float
    notifications_enabled: bool
    notify_sound: bool

    # ---- Cloud sync (Firestore) ----
    sync_default: bool
    firestore_project: str | None
    firestore_credentials: Path | None
    firestore_todos_collection: str
    firestore_categories_collection: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "taskboard.sqlite3")

        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0)
        notifications_enabled = _env_bool(_k("NOTIFICATIONS_ENABLED"), True)
        notify_sound = _env_bool(_k("NOTIFY_SOUND"), True)

        sync_default = _env_bool(_k("SYNC_DEFAULT"), False)

        # Accept the standard Google env names as fallbacks.
        firestore_project = _first_env(_k("FIRESTORE_PROJECT"), "GOOGLE_CLOUD_PROJECT", default=None)
        creds_raw = _first_env(
            _k("FIRESTORE_CREDENTIALS"), "GOOGLE_APPLICATION_CREDENTIALS", default=None
        )
        firestore_credentials = Path(creds_raw).expanduser() if creds_raw else None

        firestore_todos_collection = _env(_k("FIRESTORE_TODOS_COLLECTION"), "todos")
        firestore_categories_collection = _env(_k("FIRESTORE_CATEGORIES_COLLECTION"), "categories")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            reminder_interval_seconds=reminder_interval_seconds,
            notifications_enabled=notifications_enabled,
            notify_sound=notify_sound,
            sync_default=sync_default,
            firestore_project=firestore_project,
            firestore_credentials=firestore_credentials,
            firestore_todos_collection=firestore_todos_collection,
            firestore_categories_collection=firestore_categories_collection,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
