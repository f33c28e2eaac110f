"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol


class AgentTransport(Protocol):
    def send(self, line: str) -> None:
        """Write one command line to the control agent."""

    def read_burst(self, timeout: float | None = None) -> list[str]:
        """Return the lines currently available, waiting up to timeout for the first."""

    def close(self) -> None:
        """Stop the control agent."""
