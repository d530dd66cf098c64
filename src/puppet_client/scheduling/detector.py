# src/puppet_client/scheduling/detector.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SnapshotBuffer:
    """The last snapshot that was reported as changed (None until the first one)."""

    data: bytes | None = None


def differs(previous: SnapshotBuffer, candidate: bytes | None) -> bool:
    """
    Return True if `candidate` should be sent, replacing `previous.data` with it.

    - candidate None (capture failed): no change, buffer untouched
    - previous absent/empty or a different length: changed
    - same length: early-exit byte comparison; identical means no change
    """
    if candidate is None:
        return False

    prev = previous.data
    if not prev or len(prev) != len(candidate):
        previous.data = candidate
        return True

    for a, b in zip(prev, candidate):
        if a != b:
            previous.data = candidate
            return True

    return False
