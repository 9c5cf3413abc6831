"""Shared fixtures: an in-memory transport standing in for the BLE link."""

import pytest

from jiecang_controller.commands import COMMANDS
from jiecang_controller.exceptions import DeskCommunicationError, DeskConnectionError
from jiecang_controller.state import DeviceStateStore


def frame(msg_type: int, data: bytes) -> bytes:
    """Build a desk-to-client frame with a correct checksum."""
    checksum = (msg_type + len(data) + sum(data)) % 256
    return b"\xf2\xf2" + bytes([msg_type, len(data)]) + data + bytes([checksum, 0x7E])


def height_frame(height_cm: int) -> bytes:
    mm = height_cm * 10
    return frame(0x01, bytes([mm // 256, mm % 256, 0x07]))


def range_frame(highest_cm: int, lowest_cm: int) -> bytes:
    high, low = highest_cm * 10, lowest_cm * 10
    return frame(0x07, bytes([high // 256, high % 256, low // 256, low % 256]))


def preset_frame(preset: int, height_cm: int) -> bytes:
    mm = height_cm * 10
    return frame(0x24 + preset, bytes([mm // 256, mm % 256]))


class FakeTransport:
    """Records every write; can answer commands or fail on demand."""

    def __init__(self, address: str | None = None):
        self.address = address
        self.writes: list[bytes] = []
        self.callback = None
        self.connected = False
        self.disconnected = False
        self.fail_subscribe = False
        self.fail_after: int | None = None
        self.on_write = None

    async def write_command(self, data: bytes) -> None:
        if self.fail_after is not None and len(self.writes) >= self.fail_after:
            raise DeskCommunicationError("write failed")
        self.writes.append(bytes(data))
        if self.on_write is not None:
            self.on_write(self, bytes(data))

    async def connect(self, timeout: float = 0, retries: int = 0) -> None:
        self.connected = True

    async def subscribe(self, callback) -> None:
        if self.fail_subscribe:
            raise DeskConnectionError("notify failed")
        self.callback = callback

    async def disconnect(self) -> None:
        self.disconnected = True

    def notify(self, data: bytes) -> None:
        self.callback(data)


def fake_desk(transport, data):
    """Answer requests the way the desk controller does."""
    if data == COMMANDS["fetch_height"]:
        transport.notify(height_frame(80) + preset_frame(1, 110) + preset_frame(2, 75))
    elif data == COMMANDS["fetch_height_range"]:
        transport.notify(range_frame(127, 62))
    elif data == COMMANDS["goto_memory1"]:
        transport.notify(height_frame(110))
    elif data == COMMANDS["goto_memory2"]:
        transport.notify(height_frame(75))
    elif data[2] == 0x1B:
        transport.notify(height_frame((data[4] * 256 + data[5]) // 10))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def store():
    return DeviceStateStore()
