# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from puppet_client.config import (
    DEFAULT_HEARTBEAT_INTERVAL_MS,
    EnvIntervalSource,
    Intervals,
    Settings,
)
from puppet_client.errors import ConfigError

INTERVAL_VARS = (
    "PUPPET_TASK_CHECK_INTERVAL_MS",
    "PUPPET_HEARTBEAT_INTERVAL_MS",
    "PUPPET_SCREEN_REFRESH_INTERVAL_MS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in INTERVAL_VARS + ("PUPPET_SNAPSHOT_PATH", "PUPPET_SERVER_PORT", "PUPPET_CONSOLE_ENABLED"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_env_is_empty() -> None:
    s = Settings.from_env()

    assert s.intervals.heartbeat_ms == DEFAULT_HEARTBEAT_INTERVAL_MS
    assert s.snapshot_path is None
    assert s.console_enabled is True


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PUPPET_TASK_CHECK_INTERVAL_MS", "250")
    monkeypatch.setenv("PUPPET_HEARTBEAT_INTERVAL_MS", "3000")
    monkeypatch.setenv("PUPPET_SCREEN_REFRESH_INTERVAL_MS", "40")
    monkeypatch.setenv("PUPPET_SNAPSHOT_PATH", str(tmp_path / "screen.png"))
    monkeypatch.setenv("PUPPET_SERVER_PORT", "not-a-port")
    monkeypatch.setenv("PUPPET_CONSOLE_ENABLED", "off")

    s = Settings.from_env()

    assert s.intervals == Intervals(task_check_ms=250, heartbeat_ms=3000, snapshot_ms=40)
    assert s.snapshot_path == tmp_path / "screen.png"
    # Non-scheduler ints fall back to the default.
    assert s.server_port == 8080
    assert s.console_enabled is False


@pytest.mark.parametrize("raw", ["abc", "0", "-5", "1.5"])
def test_bad_interval_is_a_config_error(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("PUPPET_HEARTBEAT_INTERVAL_MS", raw)

    with pytest.raises(ConfigError):
        EnvIntervalSource().load_intervals()


def test_interval_source_rereads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    source = EnvIntervalSource()
    monkeypatch.setenv("PUPPET_SCREEN_REFRESH_INTERVAL_MS", "100")
    assert source.load_intervals().snapshot_ms == 100

    monkeypatch.setenv("PUPPET_SCREEN_REFRESH_INTERVAL_MS", "60")
    assert source.load_intervals().snapshot_ms == 60


def test_intervals_reject_non_positive_values() -> None:
    with pytest.raises(ConfigError):
        Intervals(task_check_ms=0, heartbeat_ms=1, snapshot_ms=1)
