from __future__ import annotations

import sys
import textwrap

import pytest

from robotctl.core.errors import AgentError, AgentUnavailableError
from robotctl.core.model import RobotProfile
from robotctl.core.service import RobotService
from robotctl.transports.bluetoothctl import BluetoothctlSession, clean_line

ROBOT = "AB:CD:EF:12:34:56"

# Answers the scan filter in two chunks, the second carrying an unrelated
# device, and announces the robot only after scanning starts.
SLOW_AGENT = textwrap.dedent(
    f"""
    import sys
    import time

    for line in sys.stdin:
        command = line.strip()
        if command.startswith("set-scan-filter-uuids"):
            print("SetDiscoveryFilter success", flush=True)
            time.sleep(0.05)
            print("[CHG] Device 11:22:33:44:55:66 Headphones", flush=True)
        elif command == "scan on":
            time.sleep(0.3)
            print("[NEW] Device {ROBOT} Root", flush=True)
        elif command == "exit":
            break
    """
)


def test_missing_agent_raises_clean_error() -> None:
    with pytest.raises(AgentUnavailableError):
        BluetoothctlSession.open(["robotctl-no-such-agent"])


def test_read_burst_times_out_empty_then_returns_lines() -> None:
    with BluetoothctlSession.open(["cat"], read_timeout_s=0.1) as session:
        assert session.read_burst() == []
        session.send("  /org/bluez/hci0/dev_X/char0010")
        assert session.read_burst(timeout=1.0) == ["  /org/bluez/hci0/dev_X/char0010"]


def test_read_burst_collects_late_chunks_of_a_reply() -> None:
    with BluetoothctlSession.open([sys.executable, "-c", SLOW_AGENT], read_timeout_s=0.5) as session:
        session.send("set-scan-filter-uuids 48c5d828-ac2a-442d-97a3-0c9822b04979")
        assert session.read_burst() == [
            "SetDiscoveryFilter success",
            "[CHG] Device 11:22:33:44:55:66 Headphones",
        ]


def test_discover_ignores_devices_in_filter_reply() -> None:
    profile = RobotProfile(
        id="root_robot",
        name="Root Robot",
        service_uuid="48c5d828-ac2a-442d-97a3-0c9822b04979",
        tx_char_uuid="6e400002-b5a3-f393-e0a9-e50e24dcca9e",
    )
    with BluetoothctlSession.open([sys.executable, "-c", SLOW_AGENT], read_timeout_s=0.5) as session:
        service = RobotService(session, profile, echo=lambda line: None)
        try:
            assert service.discover() == ROBOT
        finally:
            service.teardown()


def test_send_after_close_raises() -> None:
    session = BluetoothctlSession.open(["cat"], read_timeout_s=0.1)
    session.close()
    session.close()
    with pytest.raises(AgentError):
        session.send("exit")


def test_clean_line_strips_prompt_and_colour() -> None:
    raw = "\x1b[0;94m[bluetooth]\x1b[0m# [\x1b[0;92mNEW\x1b[0m] Device AB:CD:EF:12:34:56 Root\n"
    assert clean_line(raw) == "[NEW] Device AB:CD:EF:12:34:56 Root"


def test_clean_line_strips_redrawn_prompt() -> None:
    raw = "\r\x1b[K\x1b[0;94m[Root]\x1b[0m# [CHG] Device AB:CD:EF:12:34:56 RSSI: -60\r\n"
    assert clean_line(raw) == "[CHG] Device AB:CD:EF:12:34:56 RSSI: -60"


def test_clean_line_keeps_indent() -> None:
    assert clean_line("\t/org/bluez/hci0/dev_X/char0010\n") == "\t/org/bluez/hci0/dev_X/char0010"
