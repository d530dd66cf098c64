# src/puppet_client/core/messages.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Command(StrEnum):
    CONNECT = "connect"
    HEARTBEAT = "heartbeat"
    SCREEN = "screen"


@dataclass(slots=True, frozen=True)
class Request:
    """
    Outbound request envelope.

    Payload-agnostic: framing, serialization and request ids belong to the transport.
    - HEARTBEAT carries no value
    - SCREEN carries the raw changed snapshot bytes
    """

    command: Command
    puppet_name: str | None
    value: bytes | None = None


@dataclass(slots=True, frozen=True)
class Response:
    """Inbound response from the server (only what the client handlers read)."""

    command: Command
    puppet_name: str | None = None
    value: bytes | None = None


def build_request(command: Command, puppet_name: str | None, value: bytes | None = None) -> Request:
    return Request(command=command, puppet_name=puppet_name, value=value)
