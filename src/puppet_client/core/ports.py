# src/puppet_client/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler core.

The core depends on Protocols instead of concrete implementations.
This keeps the transport, capture backend and config provider swappable and makes testing easier.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..config import Intervals
    from .messages import Request


class Schedule(Protocol):
    """A repeating job; cancel() is a request, not a guarantee of immediate stop."""

    def is_cancelled(self) -> bool: ...
    def cancel(self) -> None: ...


class Executor(Protocol):
    """Runs repeating jobs for one connection (see scheduling.schedule.ConnectionExecutor)."""

    def schedule_at_fixed_rate(
            self,
            body: Callable[[], None],
            interval_ms: int,
            *,
            name: str,
            fatal: bool = False,
    ) -> Schedule: ...

    def shutdown(self) -> None: ...


class Connection(Protocol):
    """
    Transport-side port for one logical connection.

    send() is fire-and-forget onto a non-blocking write path; its outcome is not consumed.
    """

    def is_open(self) -> bool: ...
    def send(self, request: Request) -> None: ...


class SnapshotSource(Protocol):
    """Returns the raw bytes of the current observable state, or None if capture failed."""

    def capture_snapshot(self) -> bytes | None: ...


class IntervalSource(Protocol):
    """Configuration provider for scheduler cadences. May raise ConfigError."""

    def load_intervals(self) -> Intervals: ...


class Notifier(Protocol):
    """User-facing notification sink (a dialog in desktop builds, a console line in the demo)."""

    def notify(self, title: str, message: str) -> None: ...
