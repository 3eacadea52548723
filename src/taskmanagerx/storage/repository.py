# src/taskmanagerx/storage/repository.py

from __future__ import annotations

"""
Typed collection layer over the key-value store.

Each collection (people, tasks) lives under one key as a whole JSON array.
Every collection mutation is read-modify-write of the entire array.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.ports import KeyValueRepo
from ..tasks.dates import local_now
from ..tasks.models import Company, NotificationConfig, Person, Task

logger = logging.getLogger(__name__)


class StorageKeys:
    COMPANY = "@taskmanagerx_empresa"
    PEOPLE = "@taskmanagerx_pessoas"
    TASKS = "@taskmanagerx_atividades"
    NOTIFICATIONS = "@taskmanagerx_notifications"
    FIRST_TIME = "@taskmanagerx_first_time"

    ALL = (COMPANY, PEOPLE, TASKS, NOTIFICATIONS, FIRST_TIME)


class StorageService:
    def __init__(self, store: KeyValueRepo, *, clock: Callable[[], datetime] = local_now) -> None:
        self._store = store
        self._clock = clock

    # ---- company ----

    async def save_company(self, company: Company) -> None:
        await self._store.set(StorageKeys.COMPANY, company.to_dict())

    async def get_company(self) -> Company | None:
        raw = await self._store.get(StorageKeys.COMPANY)
        return Company.from_dict(raw) if raw else None

    # ---- people ----

    async def save_people(self, people: list[Person]) -> None:
        await self._store.set(StorageKeys.PEOPLE, [p.to_dict() for p in people])

    async def get_people(self) -> list[Person]:
        raw: list[dict[str, Any]] = await self._store.get(StorageKeys.PEOPLE) or []
        return [Person.from_dict(p) for p in raw]

    async def add_person(self, person: Person) -> None:
        people = await self.get_people()
        people.append(person)
        await self.save_people(people)

    async def update_person(self, person_id: str, changes: dict[str, Any]) -> Person | None:
        """Merge `changes` into the stored person. Unknown id: no write, returns None."""
        people = await self.get_people()
        for i, p in enumerate(people):
            if p.id == person_id:
                people[i] = replace(p, **changes)
                await self.save_people(people)
                return people[i]
        logger.debug("update_person: id=%s not found", person_id)
        return None

    async def delete_person(self, person_id: str) -> None:
        people = await self.get_people()
        await self.save_people([p for p in people if p.id != person_id])

    # ---- tasks ----

    async def save_tasks(self, tasks: list[Task]) -> None:
        await self._store.set(StorageKeys.TASKS, [t.to_dict() for t in tasks])

    async def get_tasks(self) -> list[Task]:
        raw: list[dict[str, Any]] = await self._store.get(StorageKeys.TASKS) or []
        return [Task.from_dict(t) for t in raw]

    async def add_task(self, task: Task) -> None:
        tasks = await self.get_tasks()
        tasks.append(task)
        await self.save_tasks(tasks)

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        """Merge `changes` and stamp updated_at. Unknown id: no write, returns None."""
        tasks = await self.get_tasks()
        for i, t in enumerate(tasks):
            if t.id == task_id:
                tasks[i] = replace(t, **{**changes, "updated_at": self._clock()})
                await self.save_tasks(tasks)
                return tasks[i]
        logger.debug("update_task: id=%s not found", task_id)
        return None

    async def delete_task(self, task_id: str) -> None:
        tasks = await self.get_tasks()
        await self.save_tasks([t for t in tasks if t.id != task_id])

    # ---- notification settings ----

    async def save_notification_config(self, config: NotificationConfig) -> None:
        await self._store.set(StorageKeys.NOTIFICATIONS, config.to_dict())

    async def get_notification_config(self) -> NotificationConfig:
        raw = await self._store.get(StorageKeys.NOTIFICATIONS)
        return NotificationConfig.from_dict(raw) if raw else NotificationConfig()

    # ---- first run ----

    async def set_first_time(self, value: bool) -> None:
        await self._store.set(StorageKeys.FIRST_TIME, bool(value))

    async def is_first_time(self) -> bool:
        raw = await self._store.get(StorageKeys.FIRST_TIME)
        return True if raw is None else bool(raw)

    async def clear_all(self) -> None:
        await self._store.remove(StorageKeys.ALL)
        logger.info("All stored data removed.")
