# src/taskmanagerx/tasks/api.py

from __future__ import annotations

"""
High-level, validated operations used by front-ends.

TaskManager applies changes as given; this module owns the user-facing rules:
- required fields and date ordering are checked before anything is touched,
- a person with assigned tasks cannot be removed,
- every task edit leaves a history entry,
- "atrasada" is never chosen by the user.

Validation failures raise ValidationError with a message meant for the user.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any
from uuid import uuid4

from ..core.errors import NotFoundError, PersonHasTasksError, TaskManagerError, ValidationError
from .dates import DateLike, parse_iso, parse_time_of_day
from .manager import TaskManager
from .models import Company, HistoryEntry, NotificationConfig, Person, Task, TaskStatus

logger = logging.getLogger(__name__)

USER_STATUSES = (TaskStatus.PENDING, TaskStatus.STARTED, TaskStatus.COMPLETED)

PERSON_FIELDS = frozenset({"name", "role", "email", "phone", "photo"})
TASK_FIELDS = frozenset({"title", "description", "person_id", "start_date", "deadline", "reminder", "status"})


def new_id() -> str:
    return uuid4().hex


def _require(value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


# ---- company / onboarding ----


async def needs_onboarding(manager: TaskManager) -> bool:
    return await manager.storage.is_first_time() or manager.company is None


async def register_company(
    manager: TaskManager,
    *,
    name: str,
    cnpj: str,
    email: str,
    address: str = "",
    phone: str = "",
    photo: str | None = None,
) -> Company:
    """Create or overwrite the company profile and mark onboarding as done."""
    name = _require(name, "Nome da empresa é obrigatório")
    cnpj = _require(cnpj, "CNPJ é obrigatório")
    email = _require(email, "Email é obrigatório")

    existing = manager.company
    company = Company(
        id=existing.id if existing else new_id(),
        name=name,
        cnpj=cnpj,
        address=(address or "").strip(),
        email=email,
        phone=(phone or "").strip(),
        created_at=existing.created_at if existing else manager.now(),
        photo=_clean_optional(photo) or (existing.photo if existing else None),
    )
    await manager.save_company(company)
    await manager.storage.set_first_time(False)
    return company


# ---- people ----


async def create_person(
    manager: TaskManager,
    *,
    name: str,
    role: str,
    email: str | None = None,
    phone: str | None = None,
    photo: str | None = None,
) -> Person:
    person = Person(
        id=new_id(),
        name=_require(name, "Nome é obrigatório"),
        role=_require(role, "Cargo é obrigatório"),
        created_at=manager.now(),
        email=_clean_optional(email),
        phone=_clean_optional(phone),
        photo=_clean_optional(photo),
    )
    await manager.add_person(person)
    return person


async def edit_person(manager: TaskManager, person_id: str, **changes: Any) -> Person:
    unknown = set(changes) - PERSON_FIELDS
    if unknown:
        raise ValidationError(f"Campos inválidos: {', '.join(sorted(unknown))}")
    if manager.get_person(person_id) is None:
        raise NotFoundError(f"person not found: {person_id}")

    if "name" in changes:
        changes["name"] = _require(changes["name"], "Nome é obrigatório")
    if "role" in changes:
        changes["role"] = _require(changes["role"], "Cargo é obrigatório")
    for key in ("email", "phone", "photo"):
        if key in changes:
            changes[key] = _clean_optional(changes[key])

    return await manager.update_person(person_id, **changes)


async def remove_person(manager: TaskManager, person_id: str) -> None:
    """Delete a person, refusing while any task still references them."""
    person = manager.get_person(person_id)
    if person is None:
        raise NotFoundError(f"person not found: {person_id}")

    assigned = manager.tasks_for_person(person_id)
    if assigned:
        raise PersonHasTasksError(person.name, len(assigned))

    await manager.delete_person(person_id)


# ---- tasks ----


def _validate_task_fields(
    manager: TaskManager,
    *,
    title: str | None,
    description: str | None,
    person_id: str | None,
    deadline: DateLike | None,
    start_date: DateLike,
) -> tuple[str, str, str, datetime, datetime]:
    title = _require(title, "Título é obrigatório")
    description = _require(description, "Descrição é obrigatória")
    person_id = _require(person_id, "Selecione uma pessoa para atribuir a atividade")
    if deadline is None or (isinstance(deadline, str) and not deadline.strip()):
        raise ValidationError("Prazo final é obrigatório")

    if manager.get_person(person_id) is None:
        raise ValidationError("Pessoa selecionada não existe")

    start_dt = parse_iso(start_date)
    deadline_dt = parse_iso(deadline)
    if deadline_dt <= start_dt:
        raise ValidationError("O prazo final deve ser posterior à data de início")
    return title, description, person_id, start_dt, deadline_dt


async def create_task(
    manager: TaskManager,
    *,
    person_id: str,
    title: str,
    description: str,
    deadline: DateLike,
    start_date: DateLike | None = None,
    reminder: bool = True,
) -> Task:
    if not manager.people:
        raise ValidationError("Você precisa cadastrar pelo menos uma pessoa antes de criar atividades.")

    now = manager.now()
    title, description, person_id, start_dt, deadline_dt = _validate_task_fields(
        manager,
        title=title,
        description=description,
        person_id=person_id,
        deadline=deadline,
        start_date=start_date if start_date is not None else now,
    )

    task = Task(
        id=new_id(),
        title=title,
        description=description,
        person_id=person_id,
        start_date=start_dt,
        deadline=deadline_dt,
        status=TaskStatus.PENDING,
        created_at=now,
        updated_at=now,
        reminder=bool(reminder),
        history=[HistoryEntry(now, "Atividade criada", "Nova atividade cadastrada")],
    )
    await manager.add_task(task)
    return task


async def edit_task(manager: TaskManager, task_id: str, **changes: Any) -> Task:
    """
    Edit a task's fields; the merged record is validated as a whole.

    An overdue task whose deadline moves into the future goes back to pending.
    """
    unknown = set(changes) - TASK_FIELDS
    if unknown:
        raise ValidationError(f"Campos inválidos: {', '.join(sorted(unknown))}")

    current = manager.get_task(task_id)
    if current is None:
        raise NotFoundError(f"task not found: {task_id}")

    merged = {
        "title": current.title,
        "description": current.description,
        "person_id": current.person_id,
        "start_date": current.start_date,
        "deadline": current.deadline,
        **changes,
    }
    title, description, person_id, start_dt, deadline_dt = _validate_task_fields(
        manager,
        title=merged["title"],
        description=merged["description"],
        person_id=merged["person_id"],
        deadline=merged["deadline"],
        start_date=merged["start_date"],
    )

    updates: dict[str, Any] = {
        "title": title,
        "description": description,
        "person_id": person_id,
        "start_date": start_dt,
        "deadline": deadline_dt,
    }
    if "reminder" in changes:
        updates["reminder"] = bool(changes["reminder"])

    if "status" in changes:
        updates["status"] = _user_status(changes["status"])
    elif current.status == TaskStatus.OVERDUE and deadline_dt > manager.now():
        updates["status"] = TaskStatus.PENDING

    updates["history"] = [*current.history, HistoryEntry(manager.now(), "Atividade editada", "Dados atualizados")]
    return await manager.update_task(task_id, **updates)


def _user_status(raw: TaskStatus | str) -> TaskStatus:
    try:
        status = TaskStatus(raw)
    except ValueError:
        raise ValidationError(f"Status inválido: {raw}") from None
    if status not in USER_STATUSES:
        raise ValidationError("O status \"Atrasada\" é definido automaticamente")
    return status


async def change_task_status(manager: TaskManager, task_id: str, status: TaskStatus | str) -> Task:
    new_status = _user_status(status)
    current = manager.get_task(task_id)
    if current is None:
        raise NotFoundError(f"task not found: {task_id}")

    entry = HistoryEntry(manager.now(), f'Status alterado para "{new_status.label}"')
    return await manager.update_task(task_id, status=new_status, history=[*current.history, entry])


async def remove_task(manager: TaskManager, task_id: str) -> None:
    if manager.get_task(task_id) is None:
        raise NotFoundError(f"task not found: {task_id}")
    await manager.delete_task(task_id)


# ---- notification settings ----


async def update_notification_settings(manager: TaskManager, **changes: Any) -> NotificationConfig:
    """Patch the notification config (enabled, daily_summary, daily_summary_time, task_reminders)."""
    if "daily_summary_time" in changes:
        try:
            hour, minute = parse_time_of_day(changes["daily_summary_time"])
        except ValueError:
            raise ValidationError("Horário inválido, use HH:MM") from None
        changes["daily_summary_time"] = f"{hour:02d}:{minute:02d}"

    try:
        config = replace(manager.notification_config, **changes)
    except TypeError:
        raise ValidationError(f"Campos inválidos: {', '.join(sorted(changes))}") from None

    await manager.update_notification_config(config)
    return config


async def set_daily_summary(manager: TaskManager, time_of_day: str) -> NotificationConfig:
    return await update_notification_settings(manager, daily_summary=True, daily_summary_time=time_of_day)


async def toggle_notifications(manager: TaskManager, enabled: bool) -> NotificationConfig:
    """Master switch: off also cancels the daily summary and stops new task reminders."""
    return await update_notification_settings(manager, enabled=bool(enabled))


async def clear_all_data(manager: TaskManager) -> None:
    """Remove every stored key, reload the (now empty) state and re-arm the default alerts."""
    for task in list(manager.tasks):
        await manager.scheduler.cancel_task_notifications(task.id)
    await manager.scheduler.cancel_daily_summary()
    await manager.storage.clear_all()
    await manager.load()
    await manager.resync_notifications()


# ---- dashboard ----


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    pending: int
    started: int
    completed: int
    overdue: int
    reminders: int


def task_stats(tasks: list[Task]) -> TaskStats:
    def count(status: TaskStatus) -> int:
        return sum(1 for t in tasks if t.status == status)

    return TaskStats(
        total=len(tasks),
        pending=count(TaskStatus.PENDING),
        started=count(TaskStatus.STARTED),
        completed=count(TaskStatus.COMPLETED),
        overdue=count(TaskStatus.OVERDUE),
        reminders=sum(1 for t in tasks if t.reminder),
    )


def person_stats(manager: TaskManager, person_id: str) -> TaskStats:
    return task_stats(manager.tasks_for_person(person_id))


def friendly_error_message(exc: BaseException, action: str = "concluir a operação") -> str:
    """Human-readable message for the user. Our own errors carry their text; others are generic."""
    if isinstance(exc, ValidationError):
        return str(exc)
    if isinstance(exc, TaskManagerError):
        logger.debug("Operation failed: %s", exc)
    return f"Não foi possível {action}"
