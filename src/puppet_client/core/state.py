# src/puppet_client/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .ports import IntervalSource, Notifier, SnapshotSource
from .session import Session

if TYPE_CHECKING:
    from ..connectors.loopback import ConnectionRunner, LoggingConnection
    from ..handlers.connect import ConnectHandler
    from ..scheduling.schedule import ConnectionExecutor


@dataclass
class ClientState:
    # Settings object (config.Settings or a test double).
    settings: Any

    session: Session
    connection: LoggingConnection
    source: SnapshotSource
    intervals: IntervalSource
    notifier: Notifier | None = None

    # Filled in by the connection thread once the loop is running.
    executor: ConnectionExecutor | None = None
    handler: ConnectHandler | None = None
    runner: ConnectionRunner | None = None
