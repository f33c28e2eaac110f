"""Service layer driving a robot through the control agent."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from robotctl.core import commands
from robotctl.core.errors import (
    AgentError,
    AttributeResolutionTimeoutError,
    DeviceNotDiscoveredError,
    DiscoveryTimeoutError,
)
from robotctl.core.keys import LABELS, decode_keys
from robotctl.core.line_match import AttributeScanner, first_device_address
from robotctl.core.model import Direction, RobotProfile, SessionState
from robotctl.transports.base import AgentTransport

LOGGER = logging.getLogger(__name__)

Echo = Callable[[str], None]


class RobotService:
    def __init__(
        self,
        transport: AgentTransport,
        profile: RobotProfile,
        *,
        echo: Echo = print,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.transport = transport
        self.profile = profile
        self.echo = echo
        self.clock = clock
        self.state = SessionState.IDLE
        self.device_address: str | None = None
        self.attribute_path: str | None = None

    def _read(self, *, show: bool = True) -> list[str]:
        lines = self.transport.read_burst()
        if show and lines:
            self.echo("\n".join(lines))
        return lines

    def _deadline(self, timeout_s: float | None) -> float | None:
        return None if timeout_s is None else self.clock() + timeout_s

    def _expired(self, deadline: float | None) -> bool:
        return deadline is not None and self.clock() >= deadline

    def discover(self, timeout_s: float | None = None) -> str:
        """Scan for a robot advertising the profile's service and return its address."""
        if timeout_s is None:
            timeout_s = self.profile.discovery_timeout_s

        self._read()
        self.transport.send(f"set-scan-filter-uuids {self.profile.service_uuid}")
        self._read()

        self.echo("\nSearching for robot\n")
        self.state = SessionState.SCANNING
        self.transport.send("scan on")

        deadline = self._deadline(timeout_s)
        address: str | None = None
        while address is None:
            address = first_device_address(self._read())
            if address is None and self._expired(deadline):
                self.transport.send("scan off")
                self._read()
                raise DiscoveryTimeoutError(
                    f"No {self.profile.name} found within {timeout_s:g}s. Is it powered on and in range?"
                )

        self.device_address = address
        LOGGER.debug("Discovered %s at %s", self.profile.name, address)

        self.transport.send("scan off")
        self._read()
        self.echo("\nFound robot, connecting\n")
        return address

    def connect(self, timeout_s: float | None = None) -> str:
        """Connect to the discovered robot and select its TX characteristic."""
        if self.device_address is None:
            raise DeviceNotDiscoveredError("No robot address captured. Run discovery first.")
        if timeout_s is None:
            timeout_s = self.profile.resolve_timeout_s

        self.state = SessionState.CONNECTING
        self.transport.send(f"connect {self.device_address}")

        self.state = SessionState.RESOLVING_ATTRIBUTE
        scanner = AttributeScanner(self.profile.tx_char_uuid)
        deadline = self._deadline(timeout_s)
        path: str | None = None
        while path is None:
            path = scanner.feed(self._read())
            if path is None and self._expired(deadline):
                raise AttributeResolutionTimeoutError(
                    f"Characteristic {self.profile.tx_char_uuid} not announced within {timeout_s:g}s"
                )

        self.attribute_path = path
        self.transport.send(f"select-attribute {path}")
        self._read()
        return path

    def send_command(self, direction: Direction) -> None:
        command = commands.get(direction)
        self.echo(LABELS[direction])
        self.transport.send(f"write {commands.format_frame(command.frame)}")

    def drive(self, keys: Iterable[str]) -> int:
        """Send a motor command per decoded key until the key source ends.

        Returns the number of commands written.
        """
        self.state = SessionState.DRIVING
        self.echo("\nPress arrow keys to drive robot, press any other key to stop")
        self.echo("Use CTRL-C to exit\n")
        sent = 0
        for direction in decode_keys(keys):
            if direction is None:
                continue
            self.send_command(direction)
            sent += 1
        return sent

    def teardown(self) -> None:
        if self.state is SessionState.TERMINATED:
            return
        self.state = SessionState.DISCONNECTING
        try:
            self._read(show=False)
            if self.device_address is not None:
                self.transport.send(f"disconnect {self.device_address}")
                self._read()
                self.transport.send(f"remove {self.device_address}")
                self._read()
            self.transport.send("exit")
        except AgentError as exc:
            LOGGER.warning("Teardown incomplete: %s", exc)
        finally:
            self.state = SessionState.TERMINATED

    def run(self, keys: Iterable[str]) -> None:
        try:
            self.discover()
            self.connect()
            self.drive(keys)
        finally:
            self.teardown()
