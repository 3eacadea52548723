# src/taskmanagerx/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store/platform/scheduler/manager).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..notifications.platform import ApschedulerPlatform, NotificationSink
from ..notifications.scheduler import NotificationScheduler
from ..storage.kv_store import KeyValueStore
from ..storage.repository import StorageService
from ..tasks.manager import TaskManager

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, sink: NotificationSink | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    Nothing is loaded yet: call `await state.manager.load()` inside the event loop.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = KeyValueStore(settings.store_path)
    platform = ApschedulerPlatform(allowed=settings.notifications_allowed, sink=sink)
    scheduler = NotificationScheduler(platform, app_name=settings.app_name)
    manager = TaskManager(StorageService(store), scheduler)

    return AppState(settings=settings, store=store, platform=platform, manager=manager)


async def start_services(state: AppState) -> None:
    """Start the notification platform, load stored data and re-register alerts."""
    state.platform.start()
    await state.manager.scheduler.request_permissions()
    await state.manager.load()
    await state.manager.resync_notifications()
