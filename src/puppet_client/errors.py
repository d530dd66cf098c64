# src/puppet_client/errors.py

from __future__ import annotations


class PuppetError(Exception):
    """Base class for puppet client errors."""


class ConfigError(PuppetError):
    """A configuration value is missing or invalid. Fatal to the scheduler."""


class HeartbeatError(PuppetError):
    """The heartbeat/snapshot scheduler could not be started for a connection."""


class ExecutorShutdownError(PuppetError):
    """Work was scheduled on a connection executor that has already been shut down."""


class CommandHandlerError(PuppetError):
    """A server response could not be handled."""
