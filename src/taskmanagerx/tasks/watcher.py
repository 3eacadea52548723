# src/taskmanagerx/tasks/watcher.py

from __future__ import annotations

import asyncio
import logging

from .manager import TaskManager

logger = logging.getLogger(__name__)


async def run_overdue_watcher(manager: TaskManager, *, interval_seconds: float = 60.0) -> None:
    """
    Re-run the overdue sweep periodically while the app is open.

    Deadlines pass while nothing else touches the task list; this loop catches
    them. The sweep takes the tasks lock, so it never races a task mutation.

    To stop the watcher, cancel the coroutine/task.
    """
    sleep_s = max(0.5, float(interval_seconds))

    while True:
        try:
            changed = await manager.sweep_overdue()
        except Exception:
            logger.exception("overdue sweep failed")
            changed = []

        if changed:
            logger.warning("%d task(s) became overdue: %s", len(changed), ", ".join(t.title for t in changed))

        await asyncio.sleep(sleep_s)
