# src/puppet_client/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import ClientState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleNotifier:
    """Notifier that prints to the console (desktop builds would pop a dialog)."""

    def notify(self, title: str, message: str) -> None:
        _print_ts(f"[{title}] {message}")


def _connection_gone(state: ClientState) -> bool:
    runner = state.runner
    return runner is not None and runner.finished.is_set()


def run_console_loop(state: ClientState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    while True:
        if _connection_gone(state):
            _print_ts("[CONSOLE] Connection loop has stopped, exiting.")
            logger.info("Connection loop ended, leaving console.")
            break

        try:
            line = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if _connection_gone(state):
            continue

        try:
            response = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Not a command. Use /help to list available commands."
        _print_ts(response)

    logger.info("Console connector finished.")
