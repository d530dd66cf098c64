# src/puppet_client/scheduling/schedule.py

from __future__ import annotations

"""
Per-connection executor.

Every repeating job of one connection (check cycle, heartbeat, snapshot) runs as an
asyncio task on the same event loop, so bodies execute serially and the state they
share needs no locking. Bodies are plain synchronous callables and must not block.

Cancellation is cooperative: cancel() marks the handle and cancels the asyncio task,
which can only be interrupted while it sleeps between firings. A firing already in
progress always runs to completion.
"""

import asyncio
import logging
from collections.abc import Callable

from ..errors import ExecutorShutdownError

logger = logging.getLogger(__name__)

Body = Callable[[], None]


class ScheduleHandle:
    """One outstanding repeating job."""

    def __init__(self, name: str, interval_ms: int) -> None:
        self.name = name
        self.interval_ms = interval_ms
        self.firings = 0
        self.error: BaseException | None = None
        self._cancelled = False
        self._task: asyncio.Task[None] | None = None

    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request that no further firings happen. Idempotent."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def done(self) -> bool:
        return self._task is None or self._task.done()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "live"
        return f"ScheduleHandle({self.name!r}, every {self.interval_ms}ms, {state}, firings={self.firings})"


class ConnectionExecutor:
    """
    Single-threaded cooperative executor bound to one connection.

    Must be used from the thread running its event loop; other threads hop onto
    that loop first (see connectors.loopback.ConnectionRunner.call).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handles: list[ScheduleHandle] = []
        self._shutdown = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def live_handles(self) -> list[ScheduleHandle]:
        return [h for h in self._handles if not h.is_cancelled()]

    def schedule_at_fixed_rate(
        self,
        body: Body,
        interval_ms: int,
        *,
        name: str,
        fatal: bool = False,
    ) -> ScheduleHandle:
        """
        Run `body` now and then every `interval_ms` (deadline-based, not delay-based).

        fatal=False: an exception in a firing is logged and the schedule keeps going.
        fatal=True: an exception stops the schedule and shuts the whole executor down.
        """
        if self._shutdown:
            raise ExecutorShutdownError(f"Executor is shut down; cannot schedule {name!r}")
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")

        handle = ScheduleHandle(name, interval_ms)
        handle._task = self.loop.create_task(
            self._run_fixed_rate(handle, body, fatal),
            name=f"puppet-schedule:{name}",
        )
        # Forget handles that can no longer fire.
        self._handles = [h for h in self._handles if not (h.is_cancelled() and h.done())]
        self._handles.append(handle)
        logger.debug("Scheduled %s every %sms (fatal=%s)", name, interval_ms, fatal)
        return handle

    async def _run_fixed_rate(self, handle: ScheduleHandle, body: Body, fatal: bool) -> None:
        loop = asyncio.get_running_loop()
        period = handle.interval_ms / 1000.0
        deadline = loop.time()

        while not handle.is_cancelled():
            try:
                body()
            except Exception as e:
                if fatal:
                    handle.error = e
                    logger.exception("Schedule %s failed; shutting down connection executor", handle.name)
                    self.shutdown()
                    return
                logger.exception("Schedule %s firing failed; it will fire again", handle.name)
            handle.firings += 1

            deadline += period
            await asyncio.sleep(max(0.0, deadline - loop.time()))

    def shutdown(self) -> None:
        """Cancel every schedule and refuse new ones. Idempotent."""
        if self._shutdown:
            return
        self._shutdown = True
        for h in self._handles:
            h.cancel()
        logger.info("Connection executor shut down (%d schedules cancelled).", len(self._handles))
