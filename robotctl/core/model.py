"""Core data models used across loader, service, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Direction(enum.Enum):
    FORWARD = "forward"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"
    STOP = "stop"


class SessionState(enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CONNECTING = "connecting"
    RESOLVING_ATTRIBUTE = "resolving_attribute"
    DRIVING = "driving"
    DISCONNECTING = "disconnecting"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class MotorCommand:
    direction: Direction
    left_speed: int
    right_speed: int
    frame: bytes


@dataclass(frozen=True)
class AgentSpec:
    command: tuple[str, ...] = ("bluetoothctl",)
    read_timeout_s: float = 1.0


@dataclass(frozen=True)
class RobotProfile:
    id: str
    name: str
    service_uuid: str
    tx_char_uuid: str
    agent: AgentSpec = AgentSpec()
    discovery_timeout_s: float | None = None
    resolve_timeout_s: float | None = None
