"""Stable public API for building tooling on top of robotctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable

from robotctl.core import commands
from robotctl.core.errors import (
    AgentError,
    AgentUnavailableError,
    AttributeResolutionTimeoutError,
    DeviceNotDiscoveredError,
    DiscoveryError,
    DiscoveryTimeoutError,
    FrameIntegrityError,
    ProfileLoadError,
    ProfileValidationError,
    RobotctlError,
)
from robotctl.core.model import AgentSpec, Direction, MotorCommand, RobotProfile, SessionState
from robotctl.core.profile_loader import DEFAULT_PROFILE_ID, load_profiles
from robotctl.core.service import Echo, RobotService
from robotctl.transports.base import AgentTransport
from robotctl.transports.bluetoothctl import BluetoothctlSession

__all__ = [
    "RobotctlError",
    "AgentError",
    "AgentUnavailableError",
    "AttributeResolutionTimeoutError",
    "DeviceNotDiscoveredError",
    "DiscoveryError",
    "DiscoveryTimeoutError",
    "FrameIntegrityError",
    "ProfileLoadError",
    "ProfileValidationError",
    "AgentSpec",
    "Direction",
    "MotorCommand",
    "RobotProfile",
    "SessionState",
    "AgentTransport",
    "BluetoothctlSession",
    "Client",
    "command_frames",
]


class Client:
    """Public client for driving a robot from other tools.

    A `Client` owns one control agent session for one robot profile. Use it
    as a context manager so the robot is disconnected and the agent stopped
    on every exit path::

        with Client() as client:
            client.discover()
            client.connect()
            client.send(Direction.FORWARD)
    """

    def __init__(
        self,
        *,
        profile_id: str = DEFAULT_PROFILE_ID,
        transport: AgentTransport | None = None,
        echo: Echo = print,
    ) -> None:
        loaded = load_profiles()
        profile = loaded.profiles.get(profile_id)
        if profile is None:
            raise ProfileLoadError(f"Unknown profile '{profile_id}'")
        self.load_warnings = loaded.warnings
        self._transport = transport or BluetoothctlSession.open(
            profile.agent.command,
            read_timeout_s=profile.agent.read_timeout_s,
        )
        self._service = RobotService(self._transport, profile, echo=echo)

    @property
    def profile(self) -> RobotProfile:
        return self._service.profile

    @property
    def state(self) -> SessionState:
        return self._service.state

    @property
    def device_address(self) -> str | None:
        return self._service.device_address

    def discover(self, *, timeout_s: float | None = None) -> str:
        return self._service.discover(timeout_s=timeout_s)

    def connect(self, *, timeout_s: float | None = None) -> str:
        return self._service.connect(timeout_s=timeout_s)

    def send(self, direction: Direction) -> None:
        self._service.send_command(direction)

    def drive(self, keys: Iterable[str]) -> int:
        return self._service.drive(keys)

    def close(self) -> None:
        try:
            self._service.teardown()
        finally:
            self._transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def command_frames() -> dict[Direction, bytes]:
    return {direction: command.frame for direction, command in commands.CATALOG.items()}
