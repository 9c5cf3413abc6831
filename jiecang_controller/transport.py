"""
BLE transport to the desk's Lierda module.

The movement and notification code only depends on the `Transport` protocol;
`BleakTransport` is the real implementation.
"""

import asyncio
import logging
import warnings
from collections.abc import Callable
from contextlib import suppress
from typing import Protocol

from bleak import BleakClient
from bleak.exc import BleakError

from jiecang_controller.const import CONNECT_RETRIES, CONNECT_TIMEOUT, UUID_DATA_IN, UUID_DATA_OUT
from jiecang_controller.exceptions import DeskCommunicationError, DeskConnectionError

# Suppress bleak's internal asyncio warnings (race condition in CoreBluetooth backend)
warnings.filterwarnings("ignore", message=".*invalid state.*")
logging.getLogger("bleak").setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[bytes], None]


class Transport(Protocol):
    """What the desk session needs from a connection."""

    async def write_command(self, data: bytes) -> None:
        ...

    async def subscribe(self, callback: NotificationCallback) -> None:
        ...

    async def disconnect(self) -> None:
        ...


class BleakTransport:
    """Transport over a bleak client, writing to FE61 and listening on FE62."""

    def __init__(self, address: str):
        self.address = address
        self.client: BleakClient | None = None
        self._connected = False
        self._disconnecting = False  # Track intentional disconnect
        self._subscribed = False

    async def connect(self, timeout: float = CONNECT_TIMEOUT, retries: int = CONNECT_RETRIES) -> None:
        """
        Connect to the desk.

        Args:
            timeout: Connection timeout in seconds
            retries: Number of additional connection attempts

        Raises:
            DeskConnectionError: If connection fails after retries
        """
        last_error = None
        for attempt in range(retries + 1):
            try:
                logger.debug("Connecting to %s (attempt %d)", self.address, attempt + 1)
                self.client = BleakClient(
                    self.address,
                    timeout=timeout,
                    disconnected_callback=self._on_disconnect,
                )
                await self.client.connect()

                if self.client.is_connected:
                    self._connected = True
                    self._disconnecting = False
                    return

            except asyncio.TimeoutError:
                last_error = DeskConnectionError("Connection timed out")
            except BleakError as e:
                last_error = DeskConnectionError(f"BLE error: {e}")

            if attempt < retries:
                await asyncio.sleep(1)

        raise last_error or DeskConnectionError("Connection failed")

    def _on_disconnect(self, client: BleakClient):
        """Handle unexpected disconnection."""
        was_connected = self._connected
        self._connected = False
        if was_connected and not self._disconnecting:
            logger.warning("Desk %s disconnected unexpectedly", self.address)

    async def write_command(self, data: bytes) -> None:
        if not self._connected or not self.client:
            raise DeskCommunicationError("Not connected")
        try:
            await self.client.write_gatt_char(UUID_DATA_IN, data, response=False)
        except BleakError as e:
            raise DeskCommunicationError(f"Failed to send command: {e}") from e
        logger.debug("Sent: %s", data.hex())

    async def subscribe(self, callback: NotificationCallback) -> None:
        if not self._connected or not self.client:
            raise DeskConnectionError("Not connected")

        def handler(sender, data: bytearray):
            callback(bytes(data))

        try:
            await self.client.start_notify(UUID_DATA_OUT, handler)
        except BleakError as e:
            raise DeskConnectionError(f"Failed to enable notifications: {e}") from e
        self._subscribed = True

    async def disconnect(self) -> None:
        self._disconnecting = True
        if not self.client:
            return
        if self._connected and self._subscribed:
            with suppress(BleakError):
                await self.client.stop_notify(UUID_DATA_OUT)
        self._subscribed = False
        try:
            await self.client.disconnect()
        except BleakError as e:
            raise DeskCommunicationError(f"Failed to disconnect: {e}") from e
        finally:
            self._connected = False
