# src/taskmanagerx/notifications/platform.py

from __future__ import annotations

"""
Concrete NotificationPlatform backed by APScheduler.

One APScheduler job per alert:
- AtTrigger    -> DateTrigger (fires once)
- DailyTrigger -> CronTrigger(hour, minute) (repeats every day)

The job id is the notification identifier. The notification content and trigger
travel in the job kwargs so list_scheduled() can return them unchanged.
Delivery logs the alert and hands it to an optional sink (the console prints it).
"""

import contextlib
import logging
from collections.abc import Callable
from uuid import uuid4

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from .models import AtTrigger, DailyTrigger, NotificationContent, ScheduledNotification, Trigger

logger = logging.getLogger(__name__)

NotificationSink = Callable[[NotificationContent], None]


def _deliver(content: NotificationContent, trigger: Trigger, sink: NotificationSink | None = None) -> None:
    logger.info("Notification: %s - %s", content.title, content.body)
    if sink is not None:
        try:
            sink(content)
        except Exception:
            logger.exception("Notification sink failed title=%s", content.title)


class ApschedulerPlatform:
    def __init__(
        self,
        *,
        allowed: bool = True,
        sink: NotificationSink | None = None,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self._allowed = allowed
        self._sink = sink
        self._scheduler = scheduler or AsyncIOScheduler()

    def start(self) -> None:
        """Start firing jobs. Must be called from inside the running event loop."""
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Notification scheduler started (jobs=%d)", len(self._scheduler.get_jobs()))

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Notification scheduler stopped")

    async def request_permission(self) -> bool:
        return self._allowed

    async def schedule(self, content: NotificationContent, trigger: Trigger) -> str:
        identifier = uuid4().hex
        if isinstance(trigger, DailyTrigger):
            aps_trigger = CronTrigger(hour=trigger.hour, minute=trigger.minute)
        else:
            aps_trigger = DateTrigger(run_date=trigger.when)

        self._scheduler.add_job(
            _deliver,
            trigger=aps_trigger,
            id=identifier,
            name=content.title,
            # trigger is carried only so list_scheduled() can return it.
            kwargs={"content": content, "trigger": trigger, "sink": self._sink},
            coalesce=True,
            max_instances=1,
        )
        return identifier

    async def cancel(self, identifier: str) -> None:
        # Already fired one-shot jobs are gone from the job store.
        with contextlib.suppress(JobLookupError):
            self._scheduler.remove_job(identifier)

    async def list_scheduled(self) -> list[ScheduledNotification]:
        out: list[ScheduledNotification] = []
        for job in self._scheduler.get_jobs():
            content = job.kwargs.get("content")
            trigger = job.kwargs.get("trigger")
            if not isinstance(content, NotificationContent) or not isinstance(trigger, (AtTrigger, DailyTrigger)):
                continue
            out.append(ScheduledNotification(identifier=job.id, content=content, trigger=trigger))
        return out
