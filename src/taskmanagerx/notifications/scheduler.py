# src/taskmanagerx/notifications/scheduler.py

from __future__ import annotations

"""
Notification scheduler.

Translates task reminder intent into platform alerts and answers the
"which tasks are overdue?" query for TaskManager.

Reminders are best-effort:
- if permission is denied, every scheduling call is a silent no-op;
- platform errors are logged, never raised.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from ..core.ports import NotificationPlatform
from ..tasks.dates import at_local_time, is_due_today, is_overdue, local_now, parse_time_of_day
from ..tasks.models import Task, TaskStatus, TaskSummary
from .models import AlertType, AtTrigger, DailyTrigger, NotificationContent

logger = logging.getLogger(__name__)

REMINDER_HOUR = 9


class NotificationScheduler:
    def __init__(
        self,
        platform: NotificationPlatform,
        *,
        clock: Callable[[], datetime] = local_now,
        app_name: str = "TaskManagerX",
    ) -> None:
        self._platform = platform
        self._clock = clock
        self._app_name = app_name
        self._permission: bool | None = None

    async def request_permissions(self) -> bool:
        """Ask the platform once; the answer is cached for the process lifetime."""
        if self._permission is None:
            try:
                self._permission = bool(await self._platform.request_permission())
            except Exception:
                logger.exception("request_permission failed; reminders disabled")
                self._permission = False
            logger.info("Notification permission granted=%s", self._permission)
        return self._permission

    # ---- scheduling ----

    async def schedule_task_reminder(self, task: Task) -> None:
        """
        Schedule up to two alerts at 09:00 local time:
        - the day before the deadline ("vence amanhã")
        - on the deadline day ("vence hoje")
        Each one is skipped if its fire time is not in the future.
        """
        if not task.reminder or not await self.request_permissions():
            return

        now = self._clock()
        deadline_day = task.deadline.astimezone().date()

        day_before = at_local_time(deadline_day - timedelta(days=1), REMINDER_HOUR)
        if day_before > now:
            await self._schedule(
                NotificationContent(
                    title="Lembrete de Tarefa",
                    body=f'A tarefa "{task.title}" vence amanhã!',
                    data={"taskId": task.id, "type": AlertType.DAY_BEFORE.value},
                ),
                AtTrigger(day_before),
            )

        on_deadline = at_local_time(deadline_day, REMINDER_HOUR)
        if on_deadline > now:
            await self._schedule(
                NotificationContent(
                    title="Prazo Hoje!",
                    body=f'A tarefa "{task.title}" vence hoje!',
                    data={"taskId": task.id, "type": AlertType.DEADLINE_DAY.value},
                ),
                AtTrigger(on_deadline),
            )

    async def cancel_task_notifications(self, task_id: str) -> None:
        await self._cancel_where(lambda data: data.get("taskId") == task_id)

    async def schedule_daily_summary(self, time_of_day: str) -> None:
        """Replace the (single) daily summary alert with one at `time_of_day` ("HH:MM")."""
        if not await self.request_permissions():
            return

        try:
            hour, minute = parse_time_of_day(time_of_day)
        except ValueError:
            logger.warning("Daily summary not scheduled: invalid time %r", time_of_day)
            return

        await self.cancel_daily_summary()
        await self._schedule(
            NotificationContent(
                title=f"Resumo Diário - {self._app_name}",
                body="Confira suas tarefas de hoje e pendências",
                data={"type": AlertType.DAILY_SUMMARY.value},
            ),
            DailyTrigger(hour=hour, minute=minute),
        )

    async def cancel_daily_summary(self) -> None:
        await self._cancel_where(lambda data: data.get("type") == AlertType.DAILY_SUMMARY.value)

    # ---- queries ----

    def check_overdue_tasks(self, tasks: Iterable[Task]) -> list[Task]:
        """Tasks past their deadline that are neither completed nor already overdue."""
        now = self._clock()
        return [
            t
            for t in tasks
            if is_overdue(t.deadline, now=now) and t.status not in (TaskStatus.COMPLETED, TaskStatus.OVERDUE)
        ]

    def generate_task_summary(self, tasks: Iterable[Task]) -> TaskSummary:
        tasks = list(tasks)
        now = self._clock()
        return TaskSummary(
            due_today=sum(
                1 for t in tasks if is_due_today(t.deadline, now=now) and t.status != TaskStatus.COMPLETED
            ),
            overdue=sum(1 for t in tasks if t.status == TaskStatus.OVERDUE),
            pending=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
        )

    # ---- platform helpers ----

    async def _schedule(self, content: NotificationContent, trigger: AtTrigger | DailyTrigger) -> None:
        try:
            identifier = await self._platform.schedule(content, trigger)
            logger.debug("Scheduled %s id=%s trigger=%s", content.data.get("type"), identifier, trigger)
        except Exception:
            logger.exception("schedule failed type=%s", content.data.get("type"))

    async def _cancel_where(self, match: Callable[[dict], bool]) -> None:
        if not await self.request_permissions():
            return
        try:
            scheduled = await self._platform.list_scheduled()
        except Exception:
            logger.exception("list_scheduled failed")
            return

        for n in scheduled:
            if not match(n.content.data or {}):
                continue
            try:
                await self._platform.cancel(n.identifier)
                logger.debug("Cancelled notification id=%s", n.identifier)
            except Exception:
                logger.exception("cancel failed id=%s", n.identifier)
