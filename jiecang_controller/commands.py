"""Command builders for the Jiecang protocol."""

from types import MappingProxyType

from jiecang_controller.protocol import COMMAND_PREAMBLE, TERMINATOR, checksum

GO_TO_HEIGHT = 0x1B

# Type byte of every fixed, payload-less command
COMMAND_TYPES = {
    "up": 0x01,
    "down": 0x02,
    "save_memory1": 0x03,
    "save_memory2": 0x04,
    "goto_memory1": 0x05,
    "goto_memory2": 0x06,
    "fetch_height": 0x07,
    "fetch_height_range": 0x0C,
    "save_memory3": 0x25,
    "goto_memory3": 0x27,
    "stop": 0x2B,
    "fetch_stand_time": 0xA2,
    "fetch_all_time": 0xAA,
}


def build_command(cmd_type: int, data: bytes = b"") -> bytes:
    """Build an outbound command with the given type and payload."""
    return (
        COMMAND_PREAMBLE
        + bytes([cmd_type, len(data)])
        + bytes(data)
        + bytes([checksum(cmd_type, data), TERMINATOR])
    )


def build_command_table() -> MappingProxyType:
    """Build the read-only name -> bytes table of fixed commands."""
    return MappingProxyType({name: build_command(t) for name, t in COMMAND_TYPES.items()})


def go_to_height_command(height_cm: int) -> bytes:
    """
    Build the "go to absolute height" command.

    The height is sent in millimetres. Range checks are left to the caller.
    """
    height_mm = height_cm * 10
    return build_command(GO_TO_HEIGHT, bytes([height_mm // 256, height_mm % 256]))


COMMANDS = build_command_table()
