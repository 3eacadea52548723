# src/taskmanagerx/notifications/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AlertType(str, Enum):
    DAY_BEFORE = "day_before"
    DEADLINE_DAY = "deadline_day"
    DAILY_SUMMARY = "daily_summary"


@dataclass(slots=True, frozen=True)
class NotificationContent:
    """
    What the user sees, plus routing data.

    `data` carries the tags used for targeted cancellation:
    - "type": an AlertType value
    - "taskId": the owning task (absent for the daily summary)
    """

    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class AtTrigger:
    """Fire once at an exact instant."""

    when: datetime


@dataclass(slots=True, frozen=True)
class DailyTrigger:
    """Fire every day at hour:minute local time, indefinitely."""

    hour: int
    minute: int


Trigger = AtTrigger | DailyTrigger


@dataclass(slots=True, frozen=True)
class ScheduledNotification:
    identifier: str
    content: NotificationContent
    trigger: Trigger
