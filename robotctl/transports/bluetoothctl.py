"""Line-oriented session with the BlueZ ``bluetoothctl`` agent."""

from __future__ import annotations

import logging
import queue
import re
import subprocess
import threading
import time
from collections.abc import Sequence
from typing import IO

from robotctl.core.errors import AgentError, AgentUnavailableError

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]|[\x01\x02]")
_PROMPT_RE = re.compile(r"^(?:\[[^\]\n]*\][#>] ?)+")
_CLOSE_TIMEOUT_S = 2.0
LOGGER = logging.getLogger(__name__)


def clean_line(raw: str) -> str:
    """Strip colour escapes, readline markers and the interactive prompt."""
    line = _ANSI_RE.sub("", raw.rstrip("\r\n"))
    # A carriage return redraws the line; only the text after the last one is shown.
    line = line.rsplit("\r", 1)[-1]
    return _PROMPT_RE.sub("", line)


class BluetoothctlSession:
    def __init__(self, process: subprocess.Popen[str], *, read_timeout_s: float = 1.0) -> None:
        self._process = process
        self.read_timeout_s = read_timeout_s
        self._lines: queue.Queue[str] = queue.Queue()
        self._closed = False
        self._reader = threading.Thread(
            target=self._pump,
            args=(process.stdout,),
            name="bluetoothctl-reader",
            daemon=True,
        )
        self._reader.start()

    @classmethod
    def open(
        cls,
        command: Sequence[str] = ("bluetoothctl",),
        *,
        read_timeout_s: float = 1.0,
    ) -> BluetoothctlSession:
        try:
            process = subprocess.Popen(
                list(command),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError as exc:
            raise AgentUnavailableError(
                f"Control agent '{command[0]}' not found. Install BlueZ and retry."
            ) from exc
        except OSError as exc:
            raise AgentUnavailableError(f"Could not start control agent '{command[0]}': {exc}") from exc
        LOGGER.debug("Started control agent %s (pid %s)", " ".join(command), process.pid)
        return cls(process, read_timeout_s=read_timeout_s)

    def _pump(self, stream: IO[str] | None) -> None:
        if stream is None:
            return
        for raw in stream:
            self._lines.put(clean_line(raw))

    def send(self, line: str) -> None:
        stdin = self._process.stdin
        if self._closed or stdin is None:
            raise AgentError("Control agent session is closed")
        LOGGER.debug("agent <- %s", line)
        try:
            stdin.write(line + "\n")
            stdin.flush()
        except (BrokenPipeError, ValueError) as exc:
            raise AgentError(f"Control agent stopped accepting commands: {exc}") from exc

    def read_burst(self, timeout: float | None = None) -> list[str]:
        """Collect every line the agent prints before the read window closes."""
        wait = self.read_timeout_s if timeout is None else timeout
        deadline = time.monotonic() + wait
        lines: list[str] = []
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                lines.append(self._lines.get(timeout=remaining))
            except queue.Empty:
                break
        for line in lines:
            LOGGER.debug("agent -> %s", line)
        return lines

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._process.stdin is not None:
                self._process.stdin.close()
        except (BrokenPipeError, OSError):
            pass
        try:
            self._process.wait(timeout=_CLOSE_TIMEOUT_S)
        except subprocess.TimeoutExpired:
            LOGGER.warning("Control agent did not exit, killing pid %s", self._process.pid)
            self._process.kill()
            self._process.wait()

    def __enter__(self) -> BluetoothctlSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
