# src/puppet_client/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole client (normal "settings layer").
- Scheduler intervals are read strictly: a bad value is a ConfigError, never a silent default.
- Intervals can be re-read at any time (EnvIntervalSource) so edits apply on the next (re)start.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

ENV_PREFIX = "PUPPET"

DEFAULT_TASK_CHECK_INTERVAL_MS = 1000
DEFAULT_HEARTBEAT_INTERVAL_MS = 5000
DEFAULT_SCREEN_REFRESH_INTERVAL_MS = 200


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_interval_ms(name: str, default: int) -> int:
    """Strict variant of _env_int for scheduler intervals."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer (milliseconds), got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Intervals:
    """Scheduler cadences, all in milliseconds."""

    task_check_ms: int
    heartbeat_ms: int
    snapshot_ms: int

    def __post_init__(self) -> None:
        for name in ("task_check_ms", "heartbeat_ms", "snapshot_ms"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigError(f"Interval {name} must be a positive integer, got {value!r}")


def load_intervals_from_env() -> Intervals:
    return Intervals(
        task_check_ms=_env_interval_ms(_k("TASK_CHECK_INTERVAL_MS"), DEFAULT_TASK_CHECK_INTERVAL_MS),
        heartbeat_ms=_env_interval_ms(_k("HEARTBEAT_INTERVAL_MS"), DEFAULT_HEARTBEAT_INTERVAL_MS),
        snapshot_ms=_env_interval_ms(_k("SCREEN_REFRESH_INTERVAL_MS"), DEFAULT_SCREEN_REFRESH_INTERVAL_MS),
    )


class EnvIntervalSource:
    """IntervalSource that re-reads the environment on every call."""

    def load_intervals(self) -> Intervals:
        return load_intervals_from_env()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Peer (used for log context) ----
    server_host: str
    server_port: int

    # ---- Scheduler ----
    intervals: Intervals

    # ---- Demo wiring ----
    snapshot_path: Path | None
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "puppet").strip() or "puppet"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/puppet"))

        server_host = _env(_k("SERVER_HOST"), "127.0.0.1").strip() or "127.0.0.1"
        server_port = _env_int(_k("SERVER_PORT"), 8080)

        raw_snapshot = _env(_k("SNAPSHOT_PATH"), "").strip()
        snapshot_path = Path(raw_snapshot).expanduser() if raw_snapshot else None

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            server_host=server_host,
            server_port=server_port,
            intervals=load_intervals_from_env(),
            snapshot_path=snapshot_path,
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Lazily build the process settings (a bad interval surfaces here as ConfigError)."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
