# src/puppet_client/handlers/connect.py

from __future__ import annotations

"""
Connect handler.

Runs when the server answers our CONNECT: adopts the puppet name assigned by the
server, drops whatever was scheduled for a previous identity and starts a fresh
task supervisor driven by a fixed-rate check loop on the connection executor.
"""

import logging

from ..core.messages import Response
from ..core.ports import Connection, Executor, IntervalSource, Notifier, Schedule, SnapshotSource
from ..core.session import Session
from ..errors import CommandHandlerError, ConfigError, ExecutorShutdownError, HeartbeatError
from ..scheduling.supervisor import TaskSupervisor

logger = logging.getLogger(__name__)

CHECK_SCHEDULE_NAME = "task-check"


class ConnectHandler:
    def __init__(
        self,
        executor: Executor,
        connection: Connection,
        session: Session,
        source: SnapshotSource,
        intervals: IntervalSource,
        *,
        notifier: Notifier | None = None,
        host: str = "",
        port: int = 0,
    ) -> None:
        self.executor = executor
        self.connection = connection
        self.session = session
        self.source = source
        self.intervals = intervals
        self.notifier = notifier
        self.host = host
        self.port = port

        self.supervisor: TaskSupervisor | None = None
        self.check_schedule: Schedule | None = None

    def handle(self, response: Response) -> None:
        """
        Handle a connect response.

        Raises:
        - CommandHandlerError if the server did not assign a name and we have none
        - HeartbeatError if the scheduler cannot be started (bad config, or the executor
          was already shut down by an earlier fatal check); the executor is shut down first
        """
        if not self.session.puppet_name:
            name = (response.puppet_name or "").strip()
            if not name:
                raise CommandHandlerError("Connect response carries no puppet name")
            self.session.puppet_name = name
            logger.info("Puppet name from server: %s", name)
            if self.notifier is not None:
                try:
                    self.notifier.notify("Connected", f"Puppet name from server: {name}")
                except Exception:
                    logger.debug("Notifier failed.", exc_info=True)

        self.reset()

        try:
            supervisor = TaskSupervisor(
                self.executor,
                self.connection,
                self.session,
                self.source,
                self.intervals,
                host=self.host,
                port=self.port,
            )
            interval = supervisor.intervals.task_check_ms
            self.check_schedule = self.executor.schedule_at_fixed_rate(
                supervisor.check,
                interval,
                name=CHECK_SCHEDULE_NAME,
                fatal=True,
            )
            self.supervisor = supervisor
        except (ConfigError, ExecutorShutdownError) as e:
            logger.error("Cannot start heartbeat scheduler for %s: %s", self.session.puppet_name, e)
            self.executor.shutdown()
            raise HeartbeatError(str(e)) from e

        logger.info(
            "Task supervisor started for %s (check every %sms).",
            self.session.puppet_name,
            interval,
        )

    def reset(self) -> None:
        """Back to heartbeat mode; stop everything scheduled for the previous identity."""
        self.session.stop_controlled()
        if self.check_schedule is not None:
            self.check_schedule.cancel()
            self.check_schedule = None
        if self.supervisor is not None:
            self.supervisor.reset()
            self.supervisor = None

    def close(self) -> None:
        """Connection closed: nothing of this connection may keep firing."""
        self.reset()
        self.executor.shutdown()
        logger.info("Connection to %s:%s closed.", self.host, self.port)
