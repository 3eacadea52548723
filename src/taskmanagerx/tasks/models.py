# src/taskmanagerx/tasks/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from .dates import parse_iso, to_iso


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values are the strings stored on disk.
    OVERDUE is only ever set by the automatic sweep.
    """

    PENDING = "pendente"
    STARTED = "iniciada"
    COMPLETED = "concluida"
    OVERDUE = "atrasada"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    TaskStatus.PENDING: "Pendente",
    TaskStatus.STARTED: "Iniciada",
    TaskStatus.COMPLETED: "Concluída",
    TaskStatus.OVERDUE: "Atrasada",
}


def _opt_str(raw: Any) -> str | None:
    return None if raw is None else str(raw)


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    at: datetime
    action: str
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"data": to_iso(self.at), "acao": self.action}
        if self.note is not None:
            out["observacao"] = self.note
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> HistoryEntry:
        return cls(
            at=parse_iso(raw["data"]),
            action=str(raw.get("acao") or ""),
            note=_opt_str(raw.get("observacao")),
        )


@dataclass(slots=True)
class Company:
    id: str
    name: str
    cnpj: str
    address: str
    email: str
    phone: str
    created_at: datetime
    photo: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "nome": self.name,
            "cnpj": self.cnpj,
            "endereco": self.address,
            "email": self.email,
            "telefone": self.phone,
            "criadoEm": to_iso(self.created_at),
        }
        if self.photo is not None:
            out["fotoPerfil"] = self.photo
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Company:
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("nome") or ""),
            cnpj=str(raw.get("cnpj") or ""),
            address=str(raw.get("endereco") or ""),
            email=str(raw.get("email") or ""),
            phone=str(raw.get("telefone") or ""),
            created_at=parse_iso(raw["criadoEm"]),
            photo=_opt_str(raw.get("fotoPerfil")),
        )


@dataclass(slots=True)
class Person:
    id: str
    name: str
    role: str
    created_at: datetime
    email: str | None = None
    phone: str | None = None
    photo: str | None = None
    # Back-references to owned tasks, kept in sync by TaskManager.
    task_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "nome": self.name,
            "cargo": self.role,
            "historicoAtividades": list(self.task_ids),
            "criadoEm": to_iso(self.created_at),
        }
        for key, value in (("email", self.email), ("telefone", self.phone), ("fotoPerfil", self.photo)):
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Person:
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("nome") or ""),
            role=str(raw.get("cargo") or ""),
            created_at=parse_iso(raw["criadoEm"]),
            email=_opt_str(raw.get("email")),
            phone=_opt_str(raw.get("telefone")),
            photo=_opt_str(raw.get("fotoPerfil")),
            task_ids=[str(x) for x in raw.get("historicoAtividades") or []],
        )


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    person_id: str
    start_date: datetime
    deadline: datetime
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    reminder: bool = True
    history: list[HistoryEntry] = field(default_factory=list)
    attachments: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "titulo": self.title,
            "descricao": self.description,
            "pessoaId": self.person_id,
            "dataInicio": to_iso(self.start_date),
            "prazoFinal": to_iso(self.deadline),
            "status": self.status.value,
            "historico": [h.to_dict() for h in self.history],
            "anexos": list(self.attachments),
            "lembreteNotificacao": self.reminder,
            "criadoEm": to_iso(self.created_at),
            "atualizadoEm": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("titulo") or ""),
            description=str(raw.get("descricao") or ""),
            person_id=str(raw["pessoaId"]),
            start_date=parse_iso(raw["dataInicio"]),
            deadline=parse_iso(raw["prazoFinal"]),
            status=TaskStatus.from_db(raw.get("status")),
            created_at=parse_iso(raw["criadoEm"]),
            updated_at=parse_iso(raw.get("atualizadoEm") or raw["criadoEm"]),
            reminder=bool(raw.get("lembreteNotificacao", False)),
            history=[HistoryEntry.from_dict(h) for h in raw.get("historico") or []],
            attachments=[str(x) for x in raw.get("anexos") or []],
        )


@dataclass(slots=True, frozen=True)
class NotificationConfig:
    enabled: bool = True
    daily_summary: bool = True
    daily_summary_time: str = "09:00"
    task_reminders: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "resumoDiario": self.daily_summary,
            "horarioResumoDiario": self.daily_summary_time,
            "lembreteIndividual": self.task_reminders,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> NotificationConfig:
        default = cls()
        return cls(
            enabled=bool(raw.get("enabled", default.enabled)),
            daily_summary=bool(raw.get("resumoDiario", default.daily_summary)),
            daily_summary_time=str(raw.get("horarioResumoDiario") or default.daily_summary_time),
            task_reminders=bool(raw.get("lembreteIndividual", default.task_reminders)),
        )

    @property
    def reminders_active(self) -> bool:
        return self.enabled and self.task_reminders


@dataclass(slots=True, frozen=True)
class TaskSummary:
    due_today: int
    overdue: int
    pending: int
