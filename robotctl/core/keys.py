"""Arrow-key decoding for the drive loop."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from robotctl.core.model import Direction

ESCAPE = "\x1b"

ARROW_CODES: dict[str, Direction] = {
    "[A": Direction.FORWARD,
    "[B": Direction.BACK,
    "[C": Direction.RIGHT,
    "[D": Direction.LEFT,
}

LABELS: dict[Direction, str] = {
    Direction.FORWARD: "UP ARROW:\tDRIVE FORWARDS",
    Direction.BACK: "DOWN ARROW:\tDRIVE BACKWARDS",
    Direction.RIGHT: "RIGHT ARROW:\tTURN RIGHT",
    Direction.LEFT: "LEFT ARROW:\tTURN LEFT",
    Direction.STOP: "NO ARROW:\tSTOP",
}


def decode_keys(keys: Iterable[str]) -> Iterator[Direction | None]:
    """Turn single characters into drive directions.

    An escape followed by a known arrow code yields that direction, an
    escape followed by anything else yields ``None``, and any other
    character yields STOP. Input ending mid-sequence ends decoding.
    """
    source = iter(keys)
    for key in source:
        if key != ESCAPE:
            yield Direction.STOP
            continue
        code = "".join(next(source, "") for _ in range(2))
        if len(code) < 2:
            return
        yield ARROW_CODES.get(code)
