# src/taskmanagerx/core/errors.py

from __future__ import annotations


class TaskManagerError(Exception):
    """Base class for errors raised by taskmanagerx itself."""


class ValidationError(TaskManagerError, ValueError):
    """Input rejected before any state was touched. The message is user-facing."""


class PersonHasTasksError(ValidationError):
    def __init__(self, person_name: str, task_count: int) -> None:
        plural = "s" if task_count > 1 else ""
        super().__init__(
            f"{person_name} possui {task_count} atividade{plural} atribuída{plural}. "
            "Remova as atividades primeiro."
        )
        self.task_count = task_count


class NotFoundError(TaskManagerError, LookupError):
    pass
