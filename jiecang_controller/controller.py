"""
Jiecang Standing Desk Controller

Drives desks fitted with a Jiecang control box and a Lierda LSD4BT BLE
module. One `DeskController` is one session with one desk: it owns the
desk's state store and wires notifications into it.
"""

import asyncio
import logging
from contextlib import suppress

from jiecang_controller.commands import COMMANDS
from jiecang_controller.const import (
    CONNECT_RETRIES,
    CONNECT_TIMEOUT,
    INITIAL_STATE_TIMEOUT,
    OPERATION_TIMEOUT,
    POLL_INTERVAL,
    SCAN_TIMEOUT,
    SETTLE_DELAY,
)
from jiecang_controller.dispatcher import NotificationDispatcher
from jiecang_controller.exceptions import (
    DeskCommunicationError,
    DeskConnectionError,
    DeskNotFoundError,
)
from jiecang_controller.movement import MovementController
from jiecang_controller.scanner import find_desk
from jiecang_controller.state import DeviceState, DeviceStateStore
from jiecang_controller.transport import BleakTransport, Transport

logger = logging.getLogger(__name__)


class DeskController:
    """Controller for a Jiecang standing desk."""

    def __init__(
        self,
        address: str | None = None,
        name: str | None = None,
        quiet: bool = False,
        transport: Transport | None = None,
        poll_interval: float = POLL_INTERVAL,
        settle_delay: float = SETTLE_DELAY,
    ):
        self.address = address
        self.name = name
        self.quiet = quiet
        self.transport = transport
        self.commands = COMMANDS
        self.store = DeviceStateStore()
        self.dispatcher = NotificationDispatcher(self.store)
        self._poll_interval = poll_interval
        self._settle_delay = settle_delay
        self._movement: MovementController | None = None
        self._connected = False
        self._owns_transport = False

    def _log(self, msg: str):
        """Print message unless in quiet mode."""
        if not self.quiet:
            print(msg)

    async def __aenter__(self) -> "DeskController":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.disconnect()

    @property
    def movement(self) -> MovementController:
        if self._movement is None:
            raise DeskConnectionError("Not connected")
        return self._movement

    @property
    def state(self) -> DeviceState:
        return self.store.get_snapshot()

    @property
    def current_height(self) -> int:
        return self.state.current_height

    async def connect(
        self,
        timeout: float = CONNECT_TIMEOUT,
        retries: int = CONNECT_RETRIES,
        state_timeout: float = INITIAL_STATE_TIMEOUT,
    ) -> None:
        """
        Find and connect to the desk, then request its current state.

        Args:
            timeout: Connection timeout in seconds
            retries: Number of additional connection attempts
            state_timeout: How long to wait for the desk to report its limits

        Raises:
            DeskNotFoundError: If no address was given and no desk is found
            DeskConnectionError: If connection fails after retries
            DeskCommunicationError: If the initial requests cannot be sent
        """
        if self.transport is None:
            if self.address is None:
                self._log("🔍 Searching for desk...")
                device = await find_desk(self.name, timeout=SCAN_TIMEOUT)
                if device is None:
                    raise DeskNotFoundError("No desk found. Is it powered on?")
                self._log(f"✅ Found: {device.name or device.address}")
                self.address = device.address

            self._log(f"🔌 Connecting to {self.address}...")
            transport = BleakTransport(self.address)
            await transport.connect(timeout=timeout, retries=retries)
            self.transport = transport
            self._owns_transport = True
            self._log("🔗 Connected!")

        self._connected = True
        try:
            await self.transport.subscribe(self.dispatcher)
            self._movement = MovementController(
                self.transport,
                self.store,
                self.commands,
                poll_interval=self._poll_interval,
                settle_delay=self._settle_delay,
            )

            await self._movement.fetch_height()
            await self._movement.fetch_height_range()
            await self._movement.fetch_stand_time()
            await self._movement.fetch_all_time()

            if not await self._wait_for_height_range(state_timeout):
                logger.warning("Desk did not report its height range within %.1fs", state_timeout)
        except BaseException:
            # Release the link; the desk accepts a single connection
            with suppress(DeskCommunicationError):
                await self.disconnect()
            raise

    async def _wait_for_height_range(self, timeout: float) -> bool:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not self.state.has_height_range:
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(self._poll_interval)
        return True

    async def disconnect(self):
        """Disconnect from the desk. Safe to call more than once."""
        if not self._connected:
            return
        self._connected = False
        self._movement = None
        transport = self.transport
        if self._owns_transport:
            # A new BleakTransport is created on the next connect
            self.transport = None
            self._owns_transport = False
        await transport.disconnect()
        self._log("👋 Disconnected")

    async def up(self):
        """Move the desk up one step."""
        await self.movement.up()

    async def down(self):
        """Move the desk down one step."""
        await self.movement.down()

    async def stop(self):
        """Emergency stop desk movement."""
        await self.movement.stop()
        self._log("🛑 Stopped")

    async def move_to_height(
        self,
        height_cm: int,
        cancel: asyncio.Event | None = None,
        timeout: float | None = OPERATION_TIMEOUT,
    ) -> int:
        """
        Move desk to target height in cm.

        Returns:
            Last reported height in cm

        Raises:
            HeightOutOfRangeError: If target is outside the desk's limits
            DeskCommunicationError: If communication fails during movement
        """
        self._log(f"📏 {self.current_height}cm → {height_cm}cm")
        await self.movement.go_to_height(height_cm, cancel=cancel, timeout=timeout)
        final = self.current_height
        self._log(f"✅ Done: {final}cm")
        return final

    async def go_to_preset(
        self,
        preset: int,
        cancel: asyncio.Event | None = None,
        timeout: float | None = OPERATION_TIMEOUT,
    ) -> int:
        """
        Move to a memory preset position (1-3).

        Returns:
            Last reported height in cm

        Raises:
            InvalidPresetError: If preset is not 1-3
            DeskCommunicationError: If communication fails
        """
        self._log(f"📍 Moving to preset {preset}...")
        await self.movement.go_to_memory(preset, cancel=cancel, timeout=timeout)
        final = self.current_height
        self._log(f"✅ At preset {preset}: {final}cm")
        return final

    async def save_preset(self, preset: int) -> int:
        """
        Save current height to a memory preset (1-3).

        Returns:
            Height that was saved in cm
        """
        height = self.current_height
        self._log(f"💾 Saving preset {preset} at {height}cm...")
        await self.movement.save_memory(preset)
        self._log(f"✅ Preset {preset} saved!")
        return height
