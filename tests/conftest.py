# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from puppet_client.config import Intervals
from puppet_client.core.session import Session

from .fakes import FakeConnection, FakeExecutor, FakeIntervalSource


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the console commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="puppet-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        server_host="127.0.0.1",
        server_port=9999,
        intervals=Intervals(task_check_ms=10, heartbeat_ms=10, snapshot_ms=10),
        snapshot_path=None,
        console_enabled=False,
    )


@pytest.fixture()
def session() -> Session:
    return Session(puppet_name="puppet-1")


@pytest.fixture()
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture()
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def intervals() -> FakeIntervalSource:
    return FakeIntervalSource(task_check_ms=100, heartbeat_ms=5000, snapshot_ms=200)
