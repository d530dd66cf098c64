# src/puppet_client/scheduling/tasks.py

from __future__ import annotations

import logging

from ..core.messages import Command, Request, build_request
from ..core.ports import Connection, SnapshotSource
from ..core.session import Session
from .detector import SnapshotBuffer, differs

logger = logging.getLogger(__name__)


def _send_if_open(connection: Connection, request: Request) -> bool:
    """Best-effort send: a closed or failing connection just skips this tick."""
    if not connection.is_open():
        return False
    try:
        connection.send(request)
    except Exception as e:
        logger.warning("Send %s failed, skipping this tick: %r", request.command.value, e)
        return False
    return True


class HeartbeatTask:
    """Liveness ping, fired while the session is not controlled."""

    def __init__(self, connection: Connection, session: Session, *, host: str = "", port: int = 0) -> None:
        self.connection = connection
        self.session = session
        self.host = host
        self.port = port

    def __call__(self) -> None:
        request = build_request(Command.HEARTBEAT, self.session.puppet_name)
        logger.debug("Send a heartbeat to %s:%s", self.host, self.port)
        _send_if_open(self.connection, request)


class SnapshotTask:
    """
    Screen snapshot streaming, fired while the session is controlled.

    Each instance owns its own SnapshotBuffer, so a new instance (after a reset)
    always sends its first successful capture.
    """

    def __init__(
        self,
        connection: Connection,
        session: Session,
        source: SnapshotSource,
        *,
        host: str = "",
        port: int = 0,
    ) -> None:
        self.connection = connection
        self.session = session
        self.source = source
        self.host = host
        self.port = port
        self.buffer = SnapshotBuffer()

    def _capture(self) -> bytes | None:
        try:
            return self.source.capture_snapshot()
        except Exception as e:
            logger.debug("Snapshot capture failed, treating as no change: %r", e)
            return None

    def __call__(self) -> None:
        candidate = self._capture()
        if not differs(self.buffer, candidate):
            return

        request = build_request(Command.SCREEN, self.session.puppet_name, candidate)
        logger.debug("Send a screen snapshot (%d bytes) to %s:%s", len(candidate or b""), self.host, self.port)
        _send_if_open(self.connection, request)
