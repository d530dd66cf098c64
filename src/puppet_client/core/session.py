# src/puppet_client/core/session.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Session:
    """
    Per-connection session.

    `controlled` is written by whoever handles the server's control commands
    and only read by the scheduler (via is_controlled()). Defaults to False,
    so a fresh connection starts in heartbeat mode.
    """

    puppet_name: str | None = None
    controlled: bool = False

    def is_controlled(self) -> bool:
        return self.controlled

    def start_controlled(self) -> None:
        self.controlled = True

    def stop_controlled(self) -> None:
        self.controlled = False
