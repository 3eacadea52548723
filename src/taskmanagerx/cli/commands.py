# src/taskmanagerx/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.errors import ValidationError
from ..core.state import AppState
from ..tasks import api
from ..tasks.dates import days_until, format_date, format_datetime, format_relative
from ..tasks.models import Person, Task, TaskStatus

CommandHandler = Callable[[AppState, list[str]], Awaitable[str] | str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /pessoas, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handler errors propagate; the connector turns them into user messages.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Comando vazio. Use /help para listar os comandos."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Comando desconhecido: /{name}. Use /help para listar os comandos."

        result = handler(state, args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def build_help(self) -> str:
        lines = ["Comandos disponíveis:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _fields(args: list[str]) -> list[str]:
    """Re-join args and split on ';' so values may contain spaces."""
    return [f.strip() for f in " ".join(args).split(";")]


def _pairs(fields: list[str], names: dict[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for item in fields:
        if not item:
            continue
        key, sep, value = item.partition("=")
        key = key.strip().lower()
        if not sep or key not in names:
            raise ValidationError(f"Campo inválido: {item!r}. Use {', '.join(names)}")
        out[names[key]] = value.strip()
    return out


def _on_off(value: str) -> bool:
    v = value.strip().lower()
    if v in ("on", "sim", "1", "true", "yes"):
        return True
    if v in ("off", "nao", "não", "0", "false", "no"):
        return False
    raise ValidationError(f"Valor inválido: {value!r} (use on/off)")


def _resolve(items: list[Any], prefix: str, what: str) -> Any:
    """Find an item by id or unique id prefix (lists show 8-char ids)."""
    prefix = prefix.strip()
    matches = [i for i in items if i.id == prefix] or [i for i in items if prefix and i.id.startswith(prefix)]
    if len(matches) != 1:
        raise ValidationError(f"{what} não encontrada: {prefix!r}")
    return matches[0]


def _short(id_: str) -> str:
    return id_[:8]


def _locale(state: AppState) -> str:
    return str(getattr(state.settings, "locale", "pt-BR"))


def _person_line(state: AppState, p: Person) -> str:
    stats = api.person_stats(state.manager, p.id)
    late = f", {stats.overdue} atrasada(s)" if stats.overdue else ""
    contact = " ".join(x for x in (p.email, p.phone) if x)
    return f"  [{_short(p.id)}] {p.name} ({p.role}) {contact} - {stats.total} atividade(s){late}".rstrip()


def _task_line(state: AppState, t: Task) -> str:
    manager = state.manager
    person = manager.get_person(t.person_id)
    owner = person.name if person else "?"
    due = format_relative(t.deadline, now=manager.now(), locale=_locale(state))
    days = days_until(t.deadline, now=manager.now())
    bell = " (lembrete)" if t.reminder else ""
    return f"  [{_short(t.id)}] {t.status.label:<9} {t.title} - {owner} - prazo {due} ({days:+d}d){bell}"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_company(state: AppState, args: list[str]) -> str:
    """
    /empresa                                   -> show
    /empresa set nome; cnpj; email[; endereco; telefone]
    """
    manager = state.manager
    if args and args[0].lower() == "set":
        f = _fields(args[1:]) + [""] * 5
        company = await api.register_company(
            manager, name=f[0], cnpj=f[1], email=f[2], address=f[3], phone=f[4]
        )
        return f"Empresa salva: {company.name}"

    company = manager.company
    if company is None:
        return "Nenhuma empresa cadastrada. Use /empresa set nome; cnpj; email[; endereco; telefone]"
    return (
        f"Empresa: {company.name}\n"
        f"  CNPJ: {company.cnpj}\n"
        f"  Email: {company.email}\n"
        f"  Endereço: {company.address or '-'}\n"
        f"  Telefone: {company.phone or '-'}\n"
        f"  Desde: {format_date(company.created_at, locale=_locale(state))}"
    )


def cmd_people(state: AppState, args: list[str]) -> str:
    people = state.manager.people
    if not people:
        return "Nenhuma pessoa cadastrada. Use /pessoa add nome; cargo[; email; telefone]"
    return "\n".join(["Pessoas:"] + [_person_line(state, p) for p in people])


_PERSON_NAMES = {"nome": "name", "cargo": "role", "email": "email", "telefone": "phone"}


async def cmd_person(state: AppState, args: list[str]) -> str:
    """
    /pessoa add nome; cargo[; email; telefone]
    /pessoa edit id; campo=valor; ...
    /pessoa rm id
    """
    usage = "Uso: /pessoa add nome; cargo[; email; telefone] | /pessoa edit id; campo=valor | /pessoa rm id"
    if not args:
        return usage

    manager = state.manager
    sub = args[0].lower()
    f = _fields(args[1:])

    if sub == "add":
        f += [""] * 4
        person = await api.create_person(manager, name=f[0], role=f[1], email=f[2], phone=f[3])
        return f"Pessoa cadastrada: [{_short(person.id)}] {person.name}"

    if sub == "edit":
        person = _resolve(manager.people, f[0], "Pessoa")
        updated = await api.edit_person(manager, person.id, **_pairs(f[1:], _PERSON_NAMES))
        return f"Pessoa atualizada: {updated.name}"

    if sub in ("rm", "del"):
        person = _resolve(manager.people, f[0], "Pessoa")
        await api.remove_person(manager, person.id)
        return f"Pessoa excluída: {person.name}"

    return usage


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """/atividades [pendente|iniciada|concluida|atrasada]"""
    tasks = state.manager.tasks
    if args:
        try:
            status = TaskStatus(args[0].lower())
        except ValueError:
            return "Filtro inválido. Use: pendente, iniciada, concluida ou atrasada."
        tasks = [t for t in tasks if t.status == status]
        if not tasks:
            return f'Não há atividades com status "{status.value}" no momento'

    if not tasks:
        return "Nenhuma atividade cadastrada. Use /atividade add pessoa; titulo; descricao; prazo[; inicio]"
    return "\n".join(["Atividades:"] + [_task_line(state, t) for t in tasks])


_TASK_NAMES = {
    "titulo": "title",
    "descricao": "description",
    "pessoa": "person_id",
    "inicio": "start_date",
    "prazo": "deadline",
    "lembrete": "reminder",
    "status": "status",
}


async def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /atividade add pessoa; titulo; descricao; prazo[; inicio]
    /atividade edit id; campo=valor; ...
    /atividade show id
    /atividade rm id
    """
    usage = (
        "Uso: /atividade add pessoa; titulo; descricao; prazo[; inicio] | "
        "/atividade edit id; campo=valor | /atividade show id | /atividade rm id"
    )
    if not args:
        return usage

    manager = state.manager
    sub = args[0].lower()
    f = _fields(args[1:])

    if sub == "add":
        f += [""] * 5
        person = _resolve(manager.people, f[0], "Pessoa")
        task = await api.create_task(
            manager,
            person_id=person.id,
            title=f[1],
            description=f[2],
            deadline=f[3] or None,
            start_date=f[4] or None,
        )
        return f"Atividade criada: [{_short(task.id)}] {task.title}"

    if sub not in ("edit", "show", "rm", "del"):
        return usage
    task = _resolve(manager.tasks, f[0], "Atividade")

    if sub == "edit":
        changes = _pairs(f[1:], _TASK_NAMES)
        if "person_id" in changes:
            changes["person_id"] = _resolve(manager.people, changes["person_id"], "Pessoa").id
        if "reminder" in changes:
            changes["reminder"] = _on_off(changes["reminder"])
        updated = await api.edit_task(manager, task.id, **changes)
        return f"Atividade atualizada: {updated.title} ({updated.status.label})"

    if sub == "show":
        locale = _locale(state)
        lines = [
            f"{task.title} [{task.status.label}]",
            f"  {task.description}",
            f"  Início: {format_date(task.start_date, locale=locale)}  Prazo: {format_date(task.deadline, locale=locale)}",
            "  Histórico:",
        ]
        for h in task.history:
            note = f" - {h.note}" if h.note else ""
            lines.append(f"    {format_datetime(h.at, locale)} {h.action}{note}")
        return "\n".join(lines)

    await api.remove_task(manager, task.id)
    return f"Atividade excluída: {task.title}"


async def cmd_status(state: AppState, args: list[str]) -> str:
    """/status id pendente|iniciada|concluida"""
    if len(args) < 2:
        return "Uso: /status id pendente|iniciada|concluida"
    task = _resolve(state.manager.tasks, args[0], "Atividade")
    updated = await api.change_task_status(state.manager, task.id, args[1].lower())
    return f"{updated.title}: {updated.status.label}"


def cmd_summary(state: AppState, args: list[str]) -> str:
    manager = state.manager
    summary = manager.task_summary()
    stats = api.task_stats(manager.tasks)
    title = manager.company.name if manager.company else "Resumo"
    return (
        f"{title}\n"
        f"  Vencem hoje: {summary.due_today}\n"
        f"  Atrasadas: {summary.overdue}\n"
        f"  Pendentes: {summary.pending}\n"
        f"  Total: {stats.total} | Iniciadas: {stats.started} | Concluídas: {stats.completed}\n"
        f"  Pessoas: {len(manager.people)} | Lembretes ativos: {stats.reminders}"
    )


async def cmd_config(state: AppState, args: list[str]) -> str:
    """
    /config                          -> show
    /config notificacoes on|off
    /config resumo HH:MM | off
    /config lembretes on|off
    """
    manager = state.manager
    if not args:
        c = manager.notification_config
        resumo = c.daily_summary_time if c.daily_summary else "desligado"
        return (
            "Notificações:\n"
            f"  Ativadas: {'sim' if c.enabled else 'não'}\n"
            f"  Resumo diário: {resumo}\n"
            f"  Lembretes por atividade: {'sim' if c.task_reminders else 'não'}"
        )

    if len(args) < 2:
        return "Uso: /config notificacoes on|off | /config resumo HH:MM|off | /config lembretes on|off"

    sub, value = args[0].lower(), args[1]
    if sub in ("notificacoes", "notificações"):
        await api.toggle_notifications(manager, _on_off(value))
    elif sub == "resumo":
        if value.lower() == "off":
            await api.update_notification_settings(manager, daily_summary=False)
        else:
            await api.set_daily_summary(manager, value)
    elif sub == "lembretes":
        await api.update_notification_settings(manager, task_reminders=_on_off(value))
    else:
        return f"Opção desconhecida: {sub}"
    return "Configurações atualizadas."


async def cmd_clear(state: AppState, args: list[str]) -> str:
    """/limpar confirmar -> remove ALL stored data"""
    if not args or args[0].lower() != "confirmar":
        return (
            "Esta ação irá remover TODOS os dados salvos: empresa, pessoas e atividades. "
            "Digite /limpar confirmar para continuar."
        )
    await api.clear_all_data(state.manager)
    logger.info("All data cleared from console.")
    return "Todos os dados foram removidos."


registry.register("help", cmd_help, help_text="Lista os comandos.", aliases=["h", "?", "ajuda"])
registry.register("empresa", cmd_company, help_text="Dados da empresa: /empresa | /empresa set ...")
registry.register("pessoas", cmd_people, help_text="Lista as pessoas cadastradas.")
registry.register("pessoa", cmd_person, help_text="Cadastro: /pessoa add | edit | rm.")
registry.register("atividades", cmd_tasks, help_text="Lista atividades: /atividades [status].")
registry.register("atividade", cmd_task, help_text="Atividade: /atividade add | edit | show | rm.")
registry.register("status", cmd_status, help_text="Muda o status: /status id pendente|iniciada|concluida.")
registry.register("resumo", cmd_summary, help_text="Resumo das atividades.", aliases=["dashboard"])
registry.register("config", cmd_config, help_text="Notificações: /config [notificacoes|resumo|lembretes] valor.")
registry.register("limpar", cmd_clear, help_text="Remove todos os dados: /limpar confirmar.")
