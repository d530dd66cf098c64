# src/puppet_client/core/capture.py

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileSnapshotSource:
    """
    SnapshotSource that reads the current snapshot from a file.

    Useful with any external screen grabber that keeps overwriting one image file.
    A missing or unreadable file is a failed capture (None), not an error.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def capture_snapshot(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except OSError as e:
            logger.debug("Snapshot capture failed (%s): %r", self.path, e)
            return None


class NullSnapshotSource:
    """SnapshotSource used when no capture backend is configured."""

    def capture_snapshot(self) -> bytes | None:
        return None
