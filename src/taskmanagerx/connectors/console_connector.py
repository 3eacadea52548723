# src/taskmanagerx/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.errors import ValidationError
from ..core.state import AppState
from ..notifications.models import NotificationContent
from ..tasks.api import friendly_error_message

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    if sys.stdout.isatty():
        sys.stdout.write("\033[1A\033[2K\r")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()
    else:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def print_notification(content: NotificationContent) -> None:
    """Notification sink: alerts fired by the platform show up in the console."""
    _print_ts(f"[NOTIFICAÇÃO] {content.title}: {content.body}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(state.settings, "app_name", "TaskManagerX"))
    _print_ts(f"[{app_name}] Use /help para ver os comandos. Use /exit para sair.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit", "/sair"):
            logger.info("Console exit command received.")
            break

        try:
            response = await command_registry.handle(state, user_input)
        except ValidationError as e:
            response = friendly_error_message(e)
        except Exception as e:
            logger.exception("Command handler crashed: %s", user_input)
            response = friendly_error_message(e)

        if response is None:
            response = "Digite um comando começando com /. Use /help para ajuda."
        _print_ts(response)

    logger.info("Console connector finished.")
