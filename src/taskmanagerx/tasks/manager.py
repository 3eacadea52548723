# src/taskmanagerx/tasks/manager.py

from __future__ import annotations

"""
TaskManager: the in-memory state holder for company, people, tasks and
notification settings.

Every mutation:
1. takes the lock of each collection it rewrites (people before tasks),
2. persists through StorageService,
3. mirrors the result in memory,
4. triggers notification side effects.

The overdue sweep runs after load() and after every add/update of a task.
It is idempotent: when no task newly qualifies nothing is written.

Persistence errors propagate to the caller unchanged. In-memory changes made
before a failing write are not rolled back.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.errors import NotFoundError
from ..notifications.scheduler import NotificationScheduler
from ..storage.repository import StorageService
from .dates import local_now
from .models import Company, HistoryEntry, NotificationConfig, Person, Task, TaskStatus, TaskSummary

logger = logging.getLogger(__name__)

AUTO_OVERDUE_ACTION = 'Status alterado automaticamente para "Atrasada"'
AUTO_OVERDUE_NOTE = "Prazo ultrapassado"


class TaskManager:
    def __init__(
        self,
        storage: StorageService,
        scheduler: NotificationScheduler,
        *,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._storage = storage
        self._scheduler = scheduler
        self._clock = clock

        self.company: Company | None = None
        self.people: list[Person] = []
        self.tasks: list[Task] = []
        self.notification_config = NotificationConfig()
        self.is_loading = True

        # One writer per collection at a time.
        self._company_lock = asyncio.Lock()
        self._people_lock = asyncio.Lock()
        self._tasks_lock = asyncio.Lock()
        self._settings_lock = asyncio.Lock()

    @property
    def storage(self) -> StorageService:
        return self._storage

    @property
    def scheduler(self) -> NotificationScheduler:
        return self._scheduler

    def now(self) -> datetime:
        return self._clock()

    # ---- lookups ----

    def get_person(self, person_id: str) -> Person | None:
        return next((p for p in self.people if p.id == person_id), None)

    def get_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def tasks_for_person(self, person_id: str) -> list[Task]:
        return [t for t in self.tasks if t.person_id == person_id]

    def task_summary(self) -> TaskSummary:
        return self._scheduler.generate_task_summary(self.tasks)

    # ---- lifecycle ----

    async def load(self) -> None:
        """Load all four collections concurrently, then run the overdue sweep."""
        self.is_loading = True
        try:
            async with self._company_lock, self._people_lock, self._tasks_lock, self._settings_lock:
                company, people, tasks, config = await asyncio.gather(
                    self._storage.get_company(),
                    self._storage.get_people(),
                    self._storage.get_tasks(),
                    self._storage.get_notification_config(),
                )
                self.company = company
                self.people = people
                self.tasks = tasks
                self.notification_config = config
        except Exception:
            logger.exception("Failed to load stored data")
            raise
        finally:
            self.is_loading = False

        logger.info(
            "Loaded company=%s people=%d tasks=%d",
            self.company.name if self.company else None,
            len(self.people),
            len(self.tasks),
        )
        await self.sweep_overdue()

    async def resync_notifications(self) -> None:
        """
        Re-register every alert from stored state.

        The platform keeps alerts in memory only, so this runs once per process start.
        """
        config = self.notification_config
        if config.enabled and config.daily_summary:
            await self._scheduler.schedule_daily_summary(config.daily_summary_time)

        for task in list(self.tasks):
            if self._should_remind(task):
                await self._scheduler.cancel_task_notifications(task.id)
                await self._scheduler.schedule_task_reminder(task)

    # ---- company ----

    async def save_company(self, company: Company) -> None:
        async with self._company_lock:
            try:
                await self._storage.save_company(company)
            except Exception:
                logger.exception("Error saving company id=%s", company.id)
                raise
            self.company = company

    # ---- people ----

    async def add_person(self, person: Person) -> None:
        async with self._people_lock:
            try:
                await self._storage.add_person(person)
            except Exception:
                logger.exception("Error adding person id=%s", person.id)
                raise
            self.people = [*self.people, person]
        logger.info("Person added id=%s name=%s", person.id, person.name)

    async def update_person(self, person_id: str, **changes: Any) -> Person:
        async with self._people_lock:
            return await self._update_person_locked(person_id, changes)

    async def _update_person_locked(self, person_id: str, changes: dict[str, Any]) -> Person:
        try:
            updated = await self._storage.update_person(person_id, changes)
        except Exception:
            logger.exception("Error updating person id=%s", person_id)
            raise
        if updated is None:
            raise NotFoundError(f"person not found: {person_id}")
        self.people = [updated if p.id == person_id else p for p in self.people]
        return updated

    async def delete_person(self, person_id: str) -> None:
        """
        Remove the person and every task that references it.

        No "person still has tasks" check happens here; callers that want that
        policy use tasks.api.remove_person.
        """
        async with self._people_lock, self._tasks_lock:
            try:
                await self._storage.delete_person(person_id)
                self.people = [p for p in self.people if p.id != person_id]

                removed = [t for t in self.tasks if t.person_id == person_id]
                self.tasks = [t for t in self.tasks if t.person_id != person_id]
                await self._storage.save_tasks(self.tasks)
            except Exception:
                logger.exception("Error deleting person id=%s", person_id)
                raise

        for task in removed:
            await self._scheduler.cancel_task_notifications(task.id)
        logger.info("Person deleted id=%s (cascaded tasks=%d)", person_id, len(removed))

    async def _link_task(self, person_id: str, task_id: str) -> None:
        async with self._people_lock:
            person = self.get_person(person_id)
            if person is None or task_id in person.task_ids:
                return
            await self._update_person_locked(person_id, {"task_ids": [*person.task_ids, task_id]})

    async def _unlink_task(self, person_id: str, task_id: str) -> None:
        async with self._people_lock:
            person = self.get_person(person_id)
            if person is None or task_id not in person.task_ids:
                return
            await self._update_person_locked(
                person_id, {"task_ids": [i for i in person.task_ids if i != task_id]}
            )

    # ---- tasks ----

    def _should_remind(self, task: Task) -> bool:
        return (
            task.reminder
            and task.status != TaskStatus.COMPLETED
            and self.notification_config.reminders_active
        )

    async def add_task(self, task: Task) -> None:
        async with self._tasks_lock:
            try:
                await self._storage.add_task(task)
            except Exception:
                logger.exception("Error adding task id=%s", task.id)
                raise
            self.tasks = [*self.tasks, task]
        logger.info("Task added id=%s person=%s deadline=%s", task.id, task.person_id, task.deadline)

        if self._should_remind(task):
            await self._scheduler.schedule_task_reminder(task)

        await self._link_task(task.person_id, task.id)
        await self.sweep_overdue()

    async def update_task(self, task_id: str, **changes: Any) -> Task:
        """Merge `changes` into the task, persist, then re-plan its reminders."""
        async with self._tasks_lock:
            previous = self.get_task(task_id)
            try:
                updated = await self._storage.update_task(task_id, changes)
            except Exception:
                logger.exception("Error updating task id=%s", task_id)
                raise
            if updated is None:
                raise NotFoundError(f"task not found: {task_id}")
            self.tasks = [updated if t.id == task_id else t for t in self.tasks]

        await self._scheduler.cancel_task_notifications(task_id)
        if self._should_remind(updated):
            await self._scheduler.schedule_task_reminder(updated)

        if previous is not None and previous.person_id != updated.person_id:
            await self._unlink_task(previous.person_id, task_id)
            await self._link_task(updated.person_id, task_id)

        await self.sweep_overdue()
        return updated

    async def delete_task(self, task_id: str) -> None:
        async with self._tasks_lock:
            task = self.get_task(task_id)
            try:
                await self._storage.delete_task(task_id)
            except Exception:
                logger.exception("Error deleting task id=%s", task_id)
                raise
            self.tasks = [t for t in self.tasks if t.id != task_id]

        await self._scheduler.cancel_task_notifications(task_id)
        if task is not None:
            await self._unlink_task(task.person_id, task_id)
        logger.info("Task deleted id=%s", task_id)

    async def sweep_overdue(self) -> list[Task]:
        """
        Move every task whose deadline has passed to OVERDUE.

        Completed and already-overdue tasks are left alone. The whole
        collection is written once, and only if something changed.
        Returns the tasks that changed.
        """
        async with self._tasks_lock:
            flagged = {t.id for t in self._scheduler.check_overdue_tasks(self.tasks)}
            if not flagged:
                return []

            now = self._clock()
            changed: list[Task] = []
            result: list[Task] = []
            for task in self.tasks:
                if task.id in flagged and task.status not in (TaskStatus.OVERDUE, TaskStatus.COMPLETED):
                    task = replace(
                        task,
                        status=TaskStatus.OVERDUE,
                        history=[*task.history, HistoryEntry(now, AUTO_OVERDUE_ACTION, AUTO_OVERDUE_NOTE)],
                        updated_at=now,
                    )
                    changed.append(task)
                result.append(task)

            if not changed:
                return []

            self.tasks = result
            try:
                await self._storage.save_tasks(result)
            except Exception:
                logger.exception("Error saving overdue sweep (%d tasks)", len(changed))
                raise

        logger.info("Overdue sweep: %d task(s) -> atrasada", len(changed))
        return changed

    # ---- notification settings ----

    async def update_notification_config(self, config: NotificationConfig) -> None:
        async with self._settings_lock:
            try:
                await self._storage.save_notification_config(config)
            except Exception:
                logger.exception("Error updating notification config")
                raise
            self.notification_config = config

        if config.enabled and config.daily_summary:
            await self._scheduler.schedule_daily_summary(config.daily_summary_time)
        else:
            await self._scheduler.cancel_daily_summary()
