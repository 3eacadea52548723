# src/taskmanagerx/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..notifications.platform import ApschedulerPlatform
from ..storage.kv_store import KeyValueStore
from ..tasks.manager import TaskManager


@dataclass
class AppState:
    """
    Everything a front-end needs, built once by cli.bootstrap and passed explicitly.

    There is no module-level instance; tests build their own.
    """

    # Settings object (config.Settings in the app, SimpleNamespace in tests).
    settings: Any

    store: KeyValueStore
    platform: ApschedulerPlatform
    manager: TaskManager

    # Background asyncio tasks owned by the front-end (overdue watcher).
    background: list[Any] = field(default_factory=list)
