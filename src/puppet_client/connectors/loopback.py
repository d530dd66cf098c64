# src/puppet_client/connectors/loopback.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import uuid
from collections import Counter, deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from ..core.messages import Command, Request, Response
from ..handlers.connect import ConnectHandler
from ..scheduling.schedule import ConnectionExecutor

if TYPE_CHECKING:
    from ..core.state import ClientState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoggingConnection:
    """
    Connection that records outgoing requests instead of writing to a socket.

    Stands in for the real transport in the console demo; keeps the last
    `keep_last` requests, a per-connection sequence number and per-command
    counters for /status.
    """

    def __init__(self, *, keep_last: int = 64) -> None:
        self._open = True
        self.sent: deque[Request] = deque(maxlen=keep_last)
        self.counts: Counter[str] = Counter()
        self.bytes_sent = 0
        self.seq = 0

    def is_open(self) -> bool:
        return self._open

    def send(self, request: Request) -> None:
        if not self._open:
            raise ConnectionError("connection is closed")
        self.sent.append(request)
        self.counts[request.command.value] += 1
        self.bytes_sent += len(request.value or b"")
        self.seq += 1
        logger.debug("-> %s #%s (%d bytes)", request.command.value, self.seq, len(request.value or b""))

    def close(self) -> None:
        self._open = False


@dataclass
class ConnectionRunner:
    """Per-connection event loop running in a background thread (so the console REPL can block on input())."""

    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event
    finished: threading.Event
    errors: list[BaseException]

    @property
    def error(self) -> BaseException | None:
        """Why the connection loop ended on its own (None while running or after a clean stop)."""
        return self.errors[0] if self.errors else None

    def call(self, fn: Callable[[], T], timeout: float = 5.0) -> T:
        """Run `fn` on the connection loop and wait for its result."""
        if self.finished.is_set():
            raise ConnectionError("connection loop has stopped")

        async def _invoke() -> T:
            return fn()

        fut = asyncio.run_coroutine_threadsafe(_invoke(), self.loop)
        return fut.result(timeout=timeout)

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal connection stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def demo_connect_response(app_name: str) -> Response:
    """What a server would answer to CONNECT: a freshly assigned puppet name."""
    return Response(command=Command.CONNECT, puppet_name=f"{app_name}-{uuid.uuid4().hex[:8]}")


async def _run_connection(state: ClientState, stop_event: asyncio.Event) -> None:
    settings = state.settings
    executor = ConnectionExecutor(asyncio.get_running_loop())
    handler = ConnectHandler(
        executor,
        state.connection,
        state.session,
        state.source,
        state.intervals,
        notifier=state.notifier,
        host=settings.server_host,
        port=settings.server_port,
    )
    state.executor = executor
    state.handler = handler

    try:
        handler.handle(demo_connect_response(settings.app_name))
        await stop_event.wait()
    finally:
        handler.close()
        state.connection.close()


def start_connection_in_background(
    state: ClientState,
    *,
    on_exit: Callable[[], None] | None = None,
) -> ConnectionRunner | None:
    """
    Start the connection loop in a background thread.

    `on_exit` is called from that thread once the loop has ended, whether it was
    stopped or failed (e.g. HeartbeatError on connect); the failure is kept in
    ConnectionRunner.error.
    """
    ready = threading.Event()
    finished = threading.Event()
    errors: list[BaseException] = []
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_connection(state, stop_event))
        except Exception as e:
            errors.append(e)
            logger.exception("Connection loop crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.run_until_complete(loop.shutdown_asyncgens())
            with contextlib.suppress(Exception):
                loop.close()
            finished.set()
            if on_exit is not None:
                on_exit()

    t = threading.Thread(target=runner, name="puppet-connection", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Connection thread did not initialize properly.")
        return None

    logger.info("Connection background thread started.")
    return ConnectionRunner(thread=t, loop=loop, stop_event=stop_event, finished=finished, errors=errors)
