"""Pattern matching over bluetoothctl output lines."""

from __future__ import annotations

import re
from collections.abc import Iterable

_DEVICE_RE = re.compile(r"Device\s+([0-9A-F]{2}(?::[0-9A-F]{2}){5})", re.IGNORECASE)


def match_device_address(line: str) -> str | None:
    match = _DEVICE_RE.search(line)
    if not match:
        return None
    return match.group(1).upper()


def first_device_address(lines: Iterable[str]) -> str | None:
    for line in lines:
        address = match_device_address(line)
        if address is not None:
            return address
    return None


class AttributeScanner:
    """Find the attribute path announced just before a characteristic UUID.

    bluetoothctl prints a characteristic as two lines: the indented object
    path, then a line ending with the UUID. The previous line is kept across
    calls to :meth:`feed` so a UUID that opens a new read burst still pairs
    with the last line of the burst before it.
    """

    def __init__(self, char_uuid: str) -> None:
        self.char_uuid = char_uuid.lower()
        self.previous_line = ""

    def feed(self, lines: Iterable[str]) -> str | None:
        for line in lines:
            if line.rstrip().lower().endswith(self.char_uuid):
                return self.previous_line.lstrip()
            self.previous_line = line
        return None
