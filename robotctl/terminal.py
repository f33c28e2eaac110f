"""Single-keypress input from the controlling terminal."""

from __future__ import annotations

import contextlib
import sys
import termios
import tty
from collections.abc import Iterator
from typing import TextIO


@contextlib.contextmanager
def cbreak(stream: TextIO) -> Iterator[None]:
    """Disable line buffering and echo, leaving CTRL-C as an interrupt."""
    if not stream.isatty():
        yield
        return
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def read_keys(stream: TextIO | None = None) -> Iterator[str]:
    """Yield one character at a time until end of input."""
    source = stream or sys.stdin
    with cbreak(source):
        while True:
            key = source.read(1)
            if not key:
                return
            yield key
