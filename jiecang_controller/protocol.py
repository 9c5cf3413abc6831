"""
Jiecang UART protocol framing, as tunnelled over the Lierda BLE module.

Frame layout (both directions)::

    +----------+---------+---------+------------------+----------+------------+
    | Preamble |  Type   | Length  |       Data       | Checksum | Terminator |
    | 2 bytes  | 1 byte  | 1 byte  |  `Length` bytes  |  1 byte  |    0x7E    |
    +----------+---------+---------+------------------+----------+------------+

- Preamble: 0xF1 0xF1 for commands, 0xF2 0xF2 for frames sent by the desk
- Checksum: (type + length + sum(data)) mod 256
- Heights travel as big-endian millimetres; the rest of the package uses cm.
"""

import struct
from enum import IntEnum

COMMAND_PREAMBLE = b"\xf1\xf1"
FRAME_PREAMBLE = b"\xf2\xf2"
TERMINATOR = 0x7E

MIN_FRAME_SIZE = 6  # preamble + type + length + checksum + terminator
MIN_SEGMENT_SIZE = 3


class MessageType(IntEnum):
    """Type byte of frames reported by the desk."""

    HEIGHT = 0x01
    HEIGHT_RANGE = 0x07
    UNITS = 0x0E
    UNKNOWN_17 = 0x17
    MEMORY_MODE = 0x19
    HEIGHT_ACK = 0x1B
    ANTI_COLLISION = 0x1D
    PRESET_1 = 0x25
    PRESET_2 = 0x26
    PRESET_3 = 0x27
    PRESET_4 = 0x28


PRESET_TYPES = (
    MessageType.PRESET_1,
    MessageType.PRESET_2,
    MessageType.PRESET_3,
    MessageType.PRESET_4,
)


def checksum(msg_type: int, data: bytes = b"") -> int:
    """Checksum of a frame or command with the given type and payload."""
    return (msg_type + len(data) + sum(data)) % 256


def validate(buf: bytes) -> bool:
    """
    Check that a buffer is a well-formed frame from the desk.

    Never raises: truncated or garbage input simply returns False.
    """
    if len(buf) < MIN_FRAME_SIZE:
        return False
    if buf[0:2] != FRAME_PREAMBLE or buf[-1] != TERMINATOR:
        return False

    data_len = buf[3]
    # The declared payload must fit before the checksum and terminator
    if 4 + data_len > len(buf) - 2:
        return False

    return checksum(buf[2], buf[4 : 4 + data_len]) == buf[-2]


def split_frames(buf: bytes) -> list[bytes]:
    """
    Split a notification buffer into segments, one per frame.

    Each segment keeps its 0x7E terminator. Bytes after the last terminator
    are dropped.
    """
    segments = []
    start = 0
    for i, byte in enumerate(buf):
        if byte == TERMINATOR:
            segments.append(bytes(buf[start : i + 1]))
            start = i + 1
    return segments


def mm_to_cm(mm: int) -> int:
    """Convert millimetres to centimetres, rounding half away from zero."""
    # Values on the wire are unsigned, so flooring after +5 rounds half up
    return (mm + 5) // 10


def _read_mm(buf: bytes, offset: int) -> int:
    return struct.unpack(">H", buf[offset : offset + 2])[0]


def decode_height(buf: bytes) -> int:
    """Decode a height frame (length 3) to cm. Returns 0 for anything else."""
    if len(buf) >= 6 and buf[3] == 0x03:
        return mm_to_cm(_read_mm(buf, 4))
    return 0


def decode_height_range(buf: bytes) -> tuple[int, int]:
    """Decode a height range frame (length 4). Returns (highest_cm, lowest_cm)."""
    if len(buf) >= 8 and buf[3] == 0x04:
        return mm_to_cm(_read_mm(buf, 4)), mm_to_cm(_read_mm(buf, 6))
    return 0, 0


def decode_preset(buf: bytes) -> int:
    """Decode a memory preset frame (length 2) to cm. Returns 0 for anything else."""
    if len(buf) >= 6 and buf[3] == 0x02:
        return mm_to_cm(_read_mm(buf, 4))
    return 0


def decode_setting(buf: bytes) -> int | None:
    """First payload byte of a settings frame, or None if it carries no payload."""
    if len(buf) >= 5 and buf[3] >= 1:
        return buf[4]
    return None


def preset_index(msg_type: int) -> int:
    """Map a preset frame type (0x25-0x28) to its preset number (1-4)."""
    return msg_type % 0x24
