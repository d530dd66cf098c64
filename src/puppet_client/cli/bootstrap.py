# src/puppet_client/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into ClientState (connection/capture/notifier/intervals).
"""

from __future__ import annotations

import logging

from ..config import EnvIntervalSource, get_settings
from ..connectors.console_connector import ConsoleNotifier
from ..connectors.loopback import LoggingConnection
from ..core.capture import FileSnapshotSource, NullSnapshotSource
from ..core.ports import SnapshotSource
from ..core.session import Session
from ..core.state import ClientState

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None) -> ClientState:
    """
    Create ClientState from the provided settings.

    Keeping settings injectable makes the client easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    source: SnapshotSource
    if settings.snapshot_path is not None:
        source = FileSnapshotSource(settings.snapshot_path)
        logger.info("Screen snapshots are read from %s", settings.snapshot_path)
    else:
        source = NullSnapshotSource()
        logger.info("No snapshot source configured (set PUPPET_SNAPSHOT_PATH); controlled mode sends nothing.")

    return ClientState(
        settings=settings,
        session=Session(),
        connection=LoggingConnection(),
        source=source,
        intervals=EnvIntervalSource(),
        notifier=ConsoleNotifier(),
    )
