# src/puppet_client/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds ClientState, then:
- runs the connection (executor + task supervisor) in a background thread,
- runs the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..connectors.loopback import start_connection_in_background
from ..errors import ConfigError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    try:
        settings = get_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (server %s:%s)...", settings.app_name, settings.server_host, settings.server_port)

    state = create_initial_state(settings=settings)

    # Use an Event so main can wait without a busy while-loop.
    # The connection thread sets it too when its loop ends (stopped or failed).
    stop_main = threading.Event()

    state.runner = start_connection_in_background(state, on_exit=stop_main.set)
    if state.runner is None:
        sys.exit(1)

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        state.runner.stop()
        state.runner.join(timeout=10.0)

    if state.runner.error is not None:
        logger.error("Connection failed: %s", state.runner.error)
        sys.exit(1)
    logger.info("Bye.")


if __name__ == "__main__":
    main()
