# src/taskmanagerx/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is required at import time; every value has a local default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKMANAGERX"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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

    # ---- Front-end ----
    console_enabled: bool
    locale: str

    # ---- Notifications ----
    notifications_allowed: bool
    overdue_check_interval: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "TaskManagerX") or "TaskManagerX"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        locale = _env(_k("LOCALE"), "pt-BR") or "pt-BR"

        # Stands in for the OS-level "allow notifications" prompt.
        notifications_allowed = _env_bool(_k("NOTIFICATIONS_ALLOWED"), True)
        overdue_check_interval = _env_float(_k("OVERDUE_CHECK_INTERVAL"), 60.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskmanagerx"))
        store_path = _env_path(_k("STORE_PATH"), data_dir / "store.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            locale=locale,
            notifications_allowed=notifications_allowed,
            overdue_check_interval=overdue_check_interval,
            data_dir=data_dir,
            store_path=store_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
