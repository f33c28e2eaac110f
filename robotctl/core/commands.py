"""Motor command catalog for the Root Robot BLE protocol.

Every packet is 20 bytes: device, command, packet id, a 16-byte payload and a
CRC-8 trailer. Motor speed packets carry the left and right wheel speeds as
signed 32-bit big-endian integers at the start of the payload.
"""

from __future__ import annotations

from robotctl.core.errors import FrameIntegrityError
from robotctl.core.model import Direction, MotorCommand

FRAME_LENGTH = 20
MOTOR_DEVICE = 0x01
SET_LEFT_RIGHT_SPEED = 0x04
DRIVE_SPEED = 100

_CRC8_POLY = 0x07
_PAYLOAD_LENGTH = 16

_SPEEDS: dict[Direction, tuple[int, int]] = {
    Direction.FORWARD: (DRIVE_SPEED, DRIVE_SPEED),
    Direction.BACK: (-DRIVE_SPEED, -DRIVE_SPEED),
    Direction.LEFT: (0, DRIVE_SPEED),
    Direction.RIGHT: (DRIVE_SPEED, 0),
    Direction.STOP: (0, 0),
}


def checksum(data: bytes) -> int:
    """CRC-8 with polynomial 0x07 and zero initial value."""
    crc = 0
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x80:
                crc = ((crc << 1) ^ _CRC8_POLY) & 0xFF
            else:
                crc = (crc << 1) & 0xFF
    return crc


def build_frame(left_speed: int, right_speed: int, *, packet_id: int = 0) -> bytes:
    payload = left_speed.to_bytes(4, "big", signed=True) + right_speed.to_bytes(4, "big", signed=True)
    payload = payload.ljust(_PAYLOAD_LENGTH, b"\x00")
    body = bytes((MOTOR_DEVICE, SET_LEFT_RIGHT_SPEED, packet_id)) + payload
    return body + bytes((checksum(body),))


def verify_frame(frame: bytes) -> None:
    if len(frame) != FRAME_LENGTH:
        raise FrameIntegrityError(f"Frame must be {FRAME_LENGTH} bytes, got {len(frame)}")
    # Running the CRC over a frame including its own trailer leaves no residue.
    residue = checksum(frame)
    if residue != 0:
        raise FrameIntegrityError(f"Frame {frame.hex()} fails checksum (residue 0x{residue:02X})")


def format_frame(frame: bytes) -> str:
    """Render a frame the way bluetoothctl's ``write`` command expects it."""
    return " ".join(f"0x{byte:02X}" for byte in frame)


def _build_catalog() -> dict[Direction, MotorCommand]:
    catalog: dict[Direction, MotorCommand] = {}
    for direction, (left, right) in _SPEEDS.items():
        frame = build_frame(left, right)
        verify_frame(frame)
        catalog[direction] = MotorCommand(
            direction=direction,
            left_speed=left,
            right_speed=right,
            frame=frame,
        )
    return catalog


CATALOG: dict[Direction, MotorCommand] = _build_catalog()


def get(direction: Direction) -> MotorCommand:
    return CATALOG[direction]
