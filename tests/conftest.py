# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmanagerx.core.state import AppState
from taskmanagerx.notifications.scheduler import NotificationScheduler
from taskmanagerx.storage.repository import StorageService
from taskmanagerx.tasks.manager import TaskManager

from .fakes import FakeClock, FakeNotificationPlatform, MemoryKeyValueStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the console commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="TaskManagerX",
        locale="pt-BR",
        data_dir=tmp_path,
        store_path=tmp_path / "store.sqlite3",
        notifications_allowed=True,
        overdue_check_interval=0.01,
        console_enabled=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    # Local wall-clock time; every deadline in the tests is local too.
    return FakeClock(datetime(2024, 1, 1, 12, 0).astimezone())


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def platform() -> FakeNotificationPlatform:
    return FakeNotificationPlatform()


@pytest.fixture()
def scheduler(platform: FakeNotificationPlatform, clock: FakeClock) -> NotificationScheduler:
    return NotificationScheduler(platform, clock=clock)


@pytest.fixture()
def manager(kv: MemoryKeyValueStore, scheduler: NotificationScheduler, clock: FakeClock) -> TaskManager:
    """
    TaskManager wired with deterministic fakes. Not loaded yet:
    tests call `await manager.load()` themselves.
    """
    return TaskManager(StorageService(kv, clock=clock), scheduler, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, kv, platform, manager: TaskManager) -> AppState:
    return AppState(settings=settings, store=kv, platform=platform, manager=manager)
