# tests/test_commands.py

from __future__ import annotations

import pytest

from taskmanagerx.cli.commands import CommandRegistry, registry
from taskmanagerx.core.errors import PersonHasTasksError, ValidationError
from taskmanagerx.tasks.models import TaskStatus


@pytest.mark.asyncio
async def test_command_registry_routes_sync_and_async_handlers(state) -> None:
    reg = CommandRegistry()
    called = {"sync": 0, "async": 0}

    def h_sync(state, args):
        called["sync"] += 1
        return f"sync {args}"

    async def h_async(state, args):
        called["async"] += 1
        return "async"

    reg.register("a", h_sync, "a", aliases=["A1"])
    reg.register("b", h_async, "b")

    assert await reg.handle(state, "/a x y") == "sync ['x', 'y']"
    assert await reg.handle(state, "/a1") == "sync []"
    assert await reg.handle(state, "/B") == "async"
    assert called == {"sync": 2, "async": 1}
    assert "/a - a" in reg.build_help()


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "olá") is None
    assert "desconhecido" in (await reg.handle(state, "/nope") or "")
    assert "vazio" in (await reg.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_people_and_task_flow(state) -> None:
    manager = state.manager
    await manager.load()

    assert "Nenhuma pessoa" in await registry.handle(state, "/pessoas")

    reply = await registry.handle(state, "/pessoa add Ana Souza; Gerente; ana@acme.com.br")
    assert "Ana Souza" in reply
    person = manager.people[0]
    assert person.email == "ana@acme.com.br"

    listing = await registry.handle(state, "/pessoas")
    assert person.id[:8] in listing
    assert "0 atividade(s)" in listing

    reply = await registry.handle(
        state, f"/atividade add {person.id[:8]}; Relatório mensal; Fechar o mês; 2024-01-10"
    )
    assert "Relatório mensal" in reply
    task = manager.tasks[0]
    assert manager.get_person(person.id).task_ids == [task.id]

    listing = await registry.handle(state, "/atividades pendente")
    assert "Relatório mensal" in listing
    assert "Ana Souza" in listing

    assert "Não há atividades" in await registry.handle(state, "/atividades concluida")
    assert "Filtro inválido" in await registry.handle(state, "/atividades feitas")

    await registry.handle(state, f"/status {task.id[:8]} concluida")
    assert manager.get_task(task.id).status == TaskStatus.COMPLETED

    shown = await registry.handle(state, f"/atividade show {task.id}")
    assert "Atividade criada" in shown
    assert 'Status alterado para "Concluída"' in shown


@pytest.mark.asyncio
async def test_task_edit_and_remove(state) -> None:
    manager = state.manager
    await manager.load()
    await registry.handle(state, "/pessoa add Ana; Gerente")
    await registry.handle(state, "/pessoa add Bruno; Técnico")
    ana, bruno = manager.people
    await registry.handle(state, f"/atividade add {ana.id}; T; D; 2024-01-10")
    task = manager.tasks[0]

    reply = await registry.handle(
        state, f"/atividade edit {task.id}; titulo=Novo; pessoa={bruno.id[:8]}; lembrete=off"
    )
    assert "Novo" in reply
    edited = manager.get_task(task.id)
    assert (edited.title, edited.person_id, edited.reminder) == ("Novo", bruno.id, False)
    assert manager.get_person(bruno.id).task_ids == [task.id]

    with pytest.raises(PersonHasTasksError):
        await registry.handle(state, f"/pessoa rm {bruno.id}")

    assert "excluída" in await registry.handle(state, f"/atividade rm {task.id}")
    assert "excluída" in await registry.handle(state, f"/pessoa rm {bruno.id}")
    assert [p.id for p in manager.people] == [ana.id]

    assert (await registry.handle(state, f"/atividade nope {task.id}")).startswith("Uso:")


@pytest.mark.asyncio
async def test_validation_errors_propagate_to_the_caller(state) -> None:
    await state.manager.load()

    with pytest.raises(ValidationError):
        await registry.handle(state, "/atividade add x; T; D; 2024-01-10")
    with pytest.raises(ValidationError):
        await registry.handle(state, "/pessoa add ; Gerente")
    with pytest.raises(ValidationError):
        await registry.handle(state, "/config lembretes talvez")


@pytest.mark.asyncio
async def test_company_config_summary_and_clear(state, platform) -> None:
    manager = state.manager
    await manager.load()

    assert "Nenhuma empresa" in await registry.handle(state, "/empresa")
    await registry.handle(state, "/empresa set Acme Ltda; 12.345.678/0001-90; contato@acme.com.br")
    shown = await registry.handle(state, "/empresa")
    assert "Acme Ltda" in shown
    assert "01/01/2024" in shown

    await registry.handle(state, "/config resumo 18:30")
    assert manager.notification_config.daily_summary_time == "18:30"
    await registry.handle(state, "/config resumo off")
    assert manager.notification_config.daily_summary is False
    assert "desligado" in await registry.handle(state, "/config")

    summary = await registry.handle(state, "/resumo")
    assert summary.startswith("Acme Ltda")
    assert "Vencem hoje: 0" in summary
    assert summary == await registry.handle(state, "/dashboard")

    assert "confirmar" in await registry.handle(state, "/limpar")
    assert manager.company is not None
    assert await registry.handle(state, "/limpar confirmar") == "Todos os dados foram removidos."
    assert manager.company is None
    assert [n.content.data["type"] for n in platform.scheduled.values()] == ["daily_summary"]
