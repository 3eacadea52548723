# tests/test_platform.py

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest

from taskmanagerx.notifications.models import AtTrigger, DailyTrigger, NotificationContent
from taskmanagerx.notifications.platform import ApschedulerPlatform, _deliver


def _content(title: str = "Lembrete de Tarefa", **data: str) -> NotificationContent:
    return NotificationContent(title=title, body="corpo", data=data)


@pytest.mark.asyncio
async def test_schedule_list_and_cancel_without_starting() -> None:
    platform = ApschedulerPlatform()
    when = datetime(2099, 1, 9, 9, 0).astimezone()

    at_id = await platform.schedule(_content(type="day_before", taskId="t1"), AtTrigger(when))
    daily_id = await platform.schedule(_content("Resumo Diário", type="daily_summary"), DailyTrigger(18, 30))
    assert at_id != daily_id

    listed = {n.identifier: n for n in await platform.list_scheduled()}
    assert set(listed) == {at_id, daily_id}
    assert listed[at_id].trigger == AtTrigger(when)
    assert listed[at_id].content.data == {"type": "day_before", "taskId": "t1"}
    assert listed[daily_id].trigger == DailyTrigger(18, 30)

    await platform.cancel(at_id)
    await platform.cancel("never-scheduled")
    assert [n.identifier for n in await platform.list_scheduled()] == [daily_id]


@pytest.mark.asyncio
async def test_permission_follows_configuration() -> None:
    assert await ApschedulerPlatform().request_permission() is True
    assert await ApschedulerPlatform(allowed=False).request_permission() is False


@pytest.mark.asyncio
async def test_started_scheduler_delivers_to_sink() -> None:
    delivered: list[NotificationContent] = []
    platform = ApschedulerPlatform(sink=delivered.append)
    platform.start()
    try:
        when = datetime.now().astimezone() + timedelta(milliseconds=100)
        await platform.schedule(_content(type="deadline_day", taskId="t1"), AtTrigger(when))

        for _ in range(40):
            if delivered:
                break
            await asyncio.sleep(0.05)
    finally:
        platform.shutdown()

    assert [c.data["taskId"] for c in delivered] == ["t1"]


def test_deliver_survives_a_failing_sink() -> None:
    def broken(content: NotificationContent) -> None:
        raise RuntimeError("terminal closed")

    _deliver(_content(), DailyTrigger(9, 0), broken)
    _deliver(_content(), DailyTrigger(9, 0))


@pytest.mark.asyncio
async def test_each_schedule_call_adds_its_own_job() -> None:
    platform = ApschedulerPlatform()
    content = _content(type="day_before", taskId="t1")
    when = datetime(2099, 1, 9, 9, 0).astimezone()

    first = await platform.schedule(content, AtTrigger(when))
    second = await platform.schedule(content, AtTrigger(when))

    listed = await platform.list_scheduled()
    assert sorted(n.identifier for n in listed) == sorted([first, second])
    assert {n.trigger for n in listed} == {AtTrigger(when)}
