# src/taskmanagerx/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage and the notification platform swappable and makes testing easier.
"""

from typing import Any, Awaitable, Iterable, Protocol

from ..notifications.models import NotificationContent, ScheduledNotification, Trigger


class KeyValueRepo(Protocol):
    """
    Durable key-value storage holding one JSON value per key.

    Each call is an independent atomic read or whole-value overwrite.
    There are no multi-key transactions.
    """

    def get(self, key: str, default: Any = None) -> Awaitable[Any]: ...
    def set(self, key: str, value: Any) -> Awaitable[None]: ...
    def remove(self, keys: Iterable[str]) -> Awaitable[None]: ...


class NotificationPlatform(Protocol):
    """
    Device-side alert scheduling.

    The scheduler is a thin adapter over this port; an implementation may
    deny permission, in which case nothing is ever scheduled.
    """

    def request_permission(self) -> Awaitable[bool]: ...

    def schedule(self, content: NotificationContent, trigger: Trigger) -> Awaitable[str]: ...

    def cancel(self, identifier: str) -> Awaitable[None]: ...

    def list_scheduled(self) -> Awaitable[list[ScheduledNotification]]: ...
