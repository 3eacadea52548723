# src/taskmanagerx/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads stored data, then runs:
- the console REPL (optional),
- the overdue watcher in the background.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..cli.bootstrap import create_initial_state, start_services
from ..config import get_settings
from ..connectors.console_connector import print_notification, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.api import needs_onboarding
from ..tasks.watcher import run_overdue_watcher

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    for task in state.background:
        task.cancel()
    for task in state.background:
        with contextlib.suppress(asyncio.CancelledError):
            await task
    state.background.clear()

    try:
        state.platform.shutdown()
    except Exception:
        logger.debug("Notification platform shutdown failed.", exc_info=True)

    # KeyValueStore uses short-lived sqlite connections per call; close() is a no-op hook.
    state.store.close()


async def _run(state: AppState) -> None:
    settings = state.settings
    try:
        await start_services(state)

        if await needs_onboarding(state.manager):
            print("Bem-vindo! Cadastre sua empresa: /empresa set nome; cnpj; email[; endereco; telefone]")

        state.background.append(
            asyncio.create_task(
                run_overdue_watcher(state.manager, interval_seconds=settings.overdue_check_interval)
            )
        )

        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            await asyncio.Event().wait()
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings, sink=print_notification)
    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
