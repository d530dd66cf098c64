# src/puppet_client/scheduling/supervisor.py

from __future__ import annotations

"""
Task supervisor.

Heartbeats and screen snapshots are never sent at the same time, to keep bandwidth down:
- session not controlled -> only the heartbeat schedule is live
- session controlled     -> only the snapshot schedule is live

check() runs on its own fixed cadence and reconciles the registry with the observed
control mode. It is idempotent: when the registry already matches, it does nothing.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum

from ..core.ports import Connection, Executor, IntervalSource, Schedule, SnapshotSource
from ..core.session import Session
from .tasks import HeartbeatTask, SnapshotTask

logger = logging.getLogger(__name__)


class TaskKind(StrEnum):
    HEARTBEAT = "heartbeat"
    SNAPSHOT = "snapshot"


def _is_live(handle: Schedule | None) -> bool:
    return handle is not None and not handle.is_cancelled()


@dataclass(slots=True)
class TaskRegistry:
    """The two schedules a connection can have (None = never started)."""

    heartbeat: Schedule | None = None
    snapshot: Schedule | None = None

    def live_kinds(self) -> list[TaskKind]:
        out: list[TaskKind] = []
        if _is_live(self.heartbeat):
            out.append(TaskKind.HEARTBEAT)
        if _is_live(self.snapshot):
            out.append(TaskKind.SNAPSHOT)
        return out

    def cancel_all(self) -> int:
        cancelled = 0
        for handle in (self.heartbeat, self.snapshot):
            if handle is not None and not handle.is_cancelled():
                handle.cancel()
                cancelled += 1
        return cancelled


class TaskSupervisor:
    def __init__(
        self,
        executor: Executor,
        connection: Connection,
        session: Session,
        source: SnapshotSource,
        intervals: IntervalSource,
        *,
        host: str = "",
        port: int = 0,
    ) -> None:
        self.executor = executor
        self.connection = connection
        self.session = session
        self.source = source
        self.interval_source = intervals
        self.host = host
        self.port = port

        # Read once up front so a broken config fails construction, not the first tick.
        self.intervals = intervals.load_intervals()

        self.registry = TaskRegistry()
        self.heartbeat_task = HeartbeatTask(connection, session, host=host, port=port)
        self.snapshot_task: SnapshotTask | None = None

    def check(self) -> None:
        """One reconcile pass. Raises ConfigError if an interval cannot be read."""
        reg = self.registry

        if self.session.is_controlled():
            heartbeat = reg.heartbeat
            if heartbeat is not None and not heartbeat.is_cancelled():
                heartbeat.cancel()
                logger.info("Session controlled: heartbeat stopped.")

            if not _is_live(reg.snapshot):
                reg.snapshot = self._start_snapshot()
        else:
            snapshot = reg.snapshot
            if snapshot is not None and not snapshot.is_cancelled():
                snapshot.cancel()
                logger.info("Session released: screen snapshots stopped.")

            if not _is_live(reg.heartbeat):
                reg.heartbeat = self._start_heartbeat()

    def reset(self) -> None:
        """Cancel every registered schedule, whatever the control mode."""
        cancelled = self.registry.cancel_all()
        if cancelled:
            logger.info("Task supervisor reset: %d schedule(s) cancelled.", cancelled)

    def _start_heartbeat(self) -> Schedule:
        self.intervals = self.interval_source.load_intervals()
        interval = self.intervals.heartbeat_ms
        logger.info("Starting heartbeat every %sms.", interval)
        return self.executor.schedule_at_fixed_rate(self.heartbeat_task, interval, name=TaskKind.HEARTBEAT.value)

    def _start_snapshot(self) -> Schedule:
        self.intervals = self.interval_source.load_intervals()
        interval = self.intervals.snapshot_ms
        # New task, new buffer: the first capture after (re)start is always sent.
        self.snapshot_task = SnapshotTask(
            self.connection,
            self.session,
            self.source,
            host=self.host,
            port=self.port,
        )
        logger.info("Starting screen snapshots every %sms.", interval)
        return self.executor.schedule_at_fixed_rate(self.snapshot_task, interval, name=TaskKind.SNAPSHOT.value)
