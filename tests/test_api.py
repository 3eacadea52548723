# tests/test_api.py

from __future__ import annotations

from datetime import datetime

import pytest

from taskmanagerx.core.errors import NotFoundError, PersonHasTasksError, ValidationError
from taskmanagerx.notifications.models import AlertType, DailyTrigger
from taskmanagerx.storage.repository import StorageKeys
from taskmanagerx.tasks import api
from taskmanagerx.tasks.models import NotificationConfig, TaskStatus


def _local(*args: int) -> datetime:
    return datetime(*args).astimezone()


async def _loaded_with_person(manager):
    await manager.load()
    return await api.create_person(manager, name="Ana", role="Gerente")


@pytest.mark.asyncio
async def test_register_company_finishes_onboarding(manager) -> None:
    await manager.load()
    assert await api.needs_onboarding(manager) is True

    company = await api.register_company(
        manager, name=" Acme ", cnpj="12.345.678/0001-90", email="contato@acme.com.br"
    )
    assert company.name == "Acme"
    assert await api.needs_onboarding(manager) is False

    again = await api.register_company(manager, name="Acme 2", cnpj="1", email="x@acme.com.br")
    assert (again.id, again.created_at) == (company.id, company.created_at)


@pytest.mark.asyncio
async def test_register_company_requires_fields(manager) -> None:
    await manager.load()
    with pytest.raises(ValidationError, match="CNPJ"):
        await api.register_company(manager, name="Acme", cnpj="  ", email="a@b.c")
    assert manager.company is None


@pytest.mark.asyncio
async def test_create_task_needs_at_least_one_person(manager) -> None:
    await manager.load()
    with pytest.raises(ValidationError, match="pelo menos uma pessoa"):
        await api.create_task(manager, person_id="p1", title="T", description="D", deadline="2024-01-10")
    assert manager.tasks == []


@pytest.mark.asyncio
async def test_create_task_validation(manager, kv) -> None:
    person = await _loaded_with_person(manager)
    writes = kv.writes[StorageKeys.TASKS]

    cases = [
        dict(title="", description="D", deadline="2024-01-10"),
        dict(title="T", description=" ", deadline="2024-01-10"),
        dict(title="T", description="D", deadline=""),
        dict(title="T", description="D", deadline="2024-01-01T00:00:00"),
    ]
    for fields in cases:
        with pytest.raises(ValidationError):
            await api.create_task(manager, person_id=person.id, **fields)

    with pytest.raises(ValidationError, match="não existe"):
        await api.create_task(manager, person_id="ghost", title="T", description="D", deadline="2024-01-10")

    assert manager.tasks == []
    assert kv.writes[StorageKeys.TASKS] == writes


@pytest.mark.asyncio
async def test_create_task_links_person_and_records_history(manager, platform, clock) -> None:
    person = await _loaded_with_person(manager)
    task = await api.create_task(
        manager, person_id=person.id, title=" Relatório ", description="Mensal", deadline="2024-01-10"
    )

    assert task.title == "Relatório"
    assert task.status == TaskStatus.PENDING
    assert task.start_date == clock.now
    assert [h.action for h in task.history] == ["Atividade criada"]
    assert manager.get_person(person.id).task_ids == [task.id]
    assert len(platform.for_task(task.id)) == 2


@pytest.mark.asyncio
async def test_remove_person_with_tasks_is_rejected_untouched(manager, kv) -> None:
    person = await _loaded_with_person(manager)
    await api.create_task(manager, person_id=person.id, title="T", description="D", deadline="2024-01-10")
    writes_before = dict(kv.writes)
    people_before = list(manager.people)

    with pytest.raises(PersonHasTasksError) as exc_info:
        await api.remove_person(manager, person.id)

    assert exc_info.value.task_count == 1
    assert "Ana possui 1 atividade" in str(exc_info.value)
    assert manager.people == people_before
    assert dict(kv.writes) == writes_before


@pytest.mark.asyncio
async def test_remove_person_without_tasks(manager) -> None:
    person = await _loaded_with_person(manager)
    await api.remove_person(manager, person.id)
    assert manager.people == []

    with pytest.raises(NotFoundError):
        await api.remove_person(manager, person.id)


@pytest.mark.asyncio
async def test_edit_person_rejects_unknown_fields(manager) -> None:
    person = await _loaded_with_person(manager)
    with pytest.raises(ValidationError):
        await api.edit_person(manager, person.id, salary=10)

    updated = await api.edit_person(manager, person.id, role="Diretora", email="  ")
    assert updated.role == "Diretora"
    assert updated.email is None


@pytest.mark.asyncio
async def test_edit_task_revalidates_and_adds_history(manager) -> None:
    person = await _loaded_with_person(manager)
    task = await api.create_task(manager, person_id=person.id, title="T", description="D", deadline="2024-01-10")

    with pytest.raises(ValidationError):
        await api.edit_task(manager, task.id, deadline="2023-12-01")
    assert manager.get_task(task.id).deadline == task.deadline

    edited = await api.edit_task(manager, task.id, title="T2")
    assert edited.title == "T2"
    assert [h.action for h in edited.history] == ["Atividade criada", "Atividade editada"]


@pytest.mark.asyncio
async def test_edit_overdue_task_with_new_deadline_goes_back_to_pending(manager, clock) -> None:
    person = await _loaded_with_person(manager)
    task = await api.create_task(manager, person_id=person.id, title="T", description="D", deadline="2024-01-10")

    clock.set(_local(2024, 1, 11))
    await manager.sweep_overdue()
    assert manager.get_task(task.id).status == TaskStatus.OVERDUE

    edited = await api.edit_task(manager, task.id, deadline="2024-01-20")
    assert edited.status == TaskStatus.PENDING
    assert len(edited.history) == 3


@pytest.mark.asyncio
async def test_change_task_status(manager) -> None:
    person = await _loaded_with_person(manager)
    task = await api.create_task(manager, person_id=person.id, title="T", description="D", deadline="2024-01-10")

    with pytest.raises(ValidationError):
        await api.change_task_status(manager, task.id, "atrasada")
    with pytest.raises(ValidationError):
        await api.change_task_status(manager, task.id, "feita")

    done = await api.change_task_status(manager, task.id, "concluida")
    assert done.status == TaskStatus.COMPLETED
    assert done.history[-1].action == 'Status alterado para "Concluída"'


@pytest.mark.asyncio
async def test_completed_task_has_no_reminders(manager, platform) -> None:
    person = await _loaded_with_person(manager)
    task = await api.create_task(manager, person_id=person.id, title="T", description="D", deadline="2024-01-10")
    assert len(platform.for_task(task.id)) == 2

    await api.change_task_status(manager, task.id, "concluida")
    assert platform.for_task(task.id) == []

    await api.edit_task(manager, task.id, title="T2")
    assert platform.for_task(task.id) == []

    await api.change_task_status(manager, task.id, "iniciada")
    assert len(platform.for_task(task.id)) == 2


@pytest.mark.asyncio
async def test_remove_task(manager, platform) -> None:
    person = await _loaded_with_person(manager)
    task = await api.create_task(manager, person_id=person.id, title="T", description="D", deadline="2024-01-10")

    await api.remove_task(manager, task.id)
    assert manager.tasks == []
    assert platform.for_task(task.id) == []
    with pytest.raises(NotFoundError):
        await api.remove_task(manager, task.id)


@pytest.mark.asyncio
async def test_notification_settings(manager, platform) -> None:
    await manager.load()

    config = await api.set_daily_summary(manager, "07:30")
    assert config.daily_summary_time == "07:30"
    assert platform.of_type(AlertType.DAILY_SUMMARY.value)[0].trigger == DailyTrigger(7, 30)

    with pytest.raises(ValidationError):
        await api.set_daily_summary(manager, "25:00")
    with pytest.raises(ValidationError):
        await api.update_notification_settings(manager, volume=3)
    assert manager.notification_config.daily_summary_time == "07:30"

    await api.toggle_notifications(manager, False)
    assert platform.of_type(AlertType.DAILY_SUMMARY.value) == []
    assert manager.notification_config.reminders_active is False

    await api.toggle_notifications(manager, True)
    assert len(platform.of_type(AlertType.DAILY_SUMMARY.value)) == 1


@pytest.mark.asyncio
async def test_clear_all_data_resets_everything(manager, platform, kv) -> None:
    person = await _loaded_with_person(manager)
    await api.register_company(manager, name="Acme", cnpj="1", email="a@b.c")
    await api.create_task(manager, person_id=person.id, title="T", description="D", deadline="2024-01-10")
    await api.set_daily_summary(manager, "18:00")

    await api.clear_all_data(manager)

    assert manager.company is None
    assert manager.people == []
    assert manager.tasks == []
    assert manager.notification_config == NotificationConfig()

    # Only the default 09:00 summary is armed again.
    assert [n.trigger for n in platform.scheduled.values()] == [DailyTrigger(9, 0)]
    assert platform.of_type(AlertType.DAILY_SUMMARY.value)[0].trigger == DailyTrigger(9, 0)
    assert kv.data == {}
    assert await api.needs_onboarding(manager) is True


@pytest.mark.asyncio
async def test_task_and_person_stats(manager) -> None:
    person = await _loaded_with_person(manager)
    other = await api.create_person(manager, name="Bruno", role="Técnico")
    a = await api.create_task(manager, person_id=person.id, title="A", description="D", deadline="2024-01-10")
    await api.create_task(manager, person_id=person.id, title="B", description="D", deadline="2024-01-10", reminder=False)
    await api.create_task(manager, person_id=other.id, title="C", description="D", deadline="2024-01-10")
    await api.change_task_status(manager, a.id, "iniciada")

    stats = api.task_stats(manager.tasks)
    assert (stats.total, stats.pending, stats.started, stats.completed, stats.overdue) == (3, 2, 1, 0, 0)
    assert stats.reminders == 2

    mine = api.person_stats(manager, person.id)
    assert (mine.total, mine.started) == (2, 1)


def test_friendly_error_message() -> None:
    assert api.friendly_error_message(ValidationError("Título é obrigatório")) == "Título é obrigatório"
    assert api.friendly_error_message(RuntimeError("boom")) == "Não foi possível concluir a operação"
    assert api.friendly_error_message(NotFoundError("x"), "excluir a atividade") == "Não foi possível excluir a atividade"
