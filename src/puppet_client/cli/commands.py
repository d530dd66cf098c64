# src/puppet_client/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import ClientState

CommandHandler = Callable[[ClientState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /control, ...)."""

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

    def handle(self, state: ClientState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _on_loop(state: ClientState, fn: Callable[[], object]) -> None:
    """Mutations go through the connection loop so the scheduler stays single-threaded."""
    if state.runner is not None:
        state.runner.call(fn)
    else:
        fn()


def cmd_help(state: ClientState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: ClientState, args: list[str]) -> str:
    session = state.session
    mode = "CONTROLLED (screen snapshots)" if session.is_controlled() else "IDLE (heartbeat)"

    live = "none"
    supervisor = state.handler.supervisor if state.handler is not None else None
    if supervisor is not None:
        kinds = supervisor.registry.live_kinds()
        live = ", ".join(k.value for k in kinds) or "none"

    conn = state.connection
    counts = ", ".join(f"{k}={v}" for k, v in sorted(conn.counts.items())) or "nothing yet"
    return (
        "Status:\n"
        f"  Puppet name: {session.puppet_name or '-'}\n"
        f"  Mode: {mode}\n"
        f"  Live schedules: {live}\n"
        f"  Connection: {'open' if conn.is_open() else 'closed'}\n"
        f"  Sent: {counts} ({conn.bytes_sent} payload bytes)"
    )


def cmd_control(state: ClientState, args: list[str]) -> str:
    """
    /control      -> show mode
    /control on   -> simulate the server taking control
    /control off  -> simulate the server releasing control
    """
    if not args:
        return f"Control mode is {'ON' if state.session.is_controlled() else 'OFF'}. Use /control on or /control off."

    arg = args[0].lower()

    if arg in ("on", "1", "true", "yes"):
        _on_loop(state, state.session.start_controlled)
        logger.debug("Control mode requested ON")
        return "Control mode ON. Snapshots start on the next check."

    if arg in ("off", "0", "false", "no"):
        _on_loop(state, state.session.stop_controlled)
        logger.debug("Control mode requested OFF")
        return "Control mode OFF. Heartbeat resumes on the next check."

    return "Usage: /control on or /control off."


def cmd_reset(state: ClientState, args: list[str]) -> str:
    handler = state.handler
    if handler is None or handler.supervisor is None:
        return "Nothing to reset (not connected)."
    _on_loop(state, handler.supervisor.reset)
    return "All schedules cancelled. The next check restores the right one."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show puppet name, mode, live schedules and traffic.")
registry.register("control", cmd_control, help_text="Simulate control mode: /control on | /control off.")
registry.register("reset", cmd_reset, help_text="Cancel all schedules (they are re-created on the next check).")
