"""
Movement and query operations against a connected desk.

Long-running moves poll the state store on a fixed tick and keep re-sending
their command until the desk reports the target height. Each tick is raced
against an optional cancellation event and deadline; cancelling is a normal
early return, not an error.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping

from jiecang_controller.commands import COMMANDS, go_to_height_command
from jiecang_controller.const import POLL_INTERVAL, PRESETS, SETTLE_DELAY
from jiecang_controller.exceptions import HeightOutOfRangeError, InvalidPresetError
from jiecang_controller.state import DeviceState, DeviceStateStore
from jiecang_controller.transport import Transport

logger = logging.getLogger(__name__)


class MovementController:
    """Sends commands to the desk and drives moves to completion."""

    def __init__(
        self,
        transport: Transport,
        store: DeviceStateStore,
        commands: Mapping[str, bytes] = COMMANDS,
        poll_interval: float = POLL_INTERVAL,
        settle_delay: float = SETTLE_DELAY,
    ):
        self.transport = transport
        self.store = store
        self.commands = commands
        self.poll_interval = poll_interval
        self.settle_delay = settle_delay

    async def _send(self, name: str) -> None:
        await self.transport.write_command(self.commands[name])

    async def _send_twice(self, name: str) -> None:
        # Fetch requests must be sent twice to be answered reliably
        await self._send(name)
        await self._send(name)

    async def _wait_for_tick(self, cancel: asyncio.Event | None, deadline: float | None) -> bool:
        """Wait for the next tick. Returns True if cancelled or past the deadline."""
        loop = asyncio.get_running_loop()
        wait = self.poll_interval
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return True
            wait = min(wait, remaining)

        if cancel is None:
            await asyncio.sleep(wait)
        else:
            try:
                await asyncio.wait_for(cancel.wait(), timeout=wait)
                return True
            except asyncio.TimeoutError:
                pass

        return deadline is not None and loop.time() >= deadline

    async def _poll_until(
        self,
        reached: Callable[[DeviceState], bool],
        command: bytes,
        cancel: asyncio.Event | None,
        timeout: float | None,
    ) -> bool:
        """Re-send `command` every tick until `reached`. Returns False if cancelled."""
        deadline = None if timeout is None else asyncio.get_running_loop().time() + timeout
        while not reached(self.store.get_snapshot()):
            if await self._wait_for_tick(cancel, deadline):
                return False
            await self.transport.write_command(command)
        return True

    async def go_to_height(
        self,
        height_cm: int,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Move the desk to an absolute height.

        Args:
            height_cm: Target height, within the desk's reported limits
            cancel: Set to stop the desk and return early
            timeout: Seconds after which the move is cancelled

        Raises:
            HeightOutOfRangeError: If target is outside the desk's limits
            DeskCommunicationError: If a command cannot be sent
        """
        state = self.store.get_snapshot()
        if not state.lowest_height <= height_cm <= state.highest_height:
            raise HeightOutOfRangeError(height_cm, state.lowest_height, state.highest_height)

        command = go_to_height_command(height_cm)
        logger.info("Moving from %dcm to %dcm", state.current_height, height_cm)

        reached = await self._poll_until(
            lambda s: s.current_height == height_cm, command, cancel, timeout
        )
        if not reached:
            # The absolute height command keeps the motor running until told otherwise
            await self._send("stop")
            logger.info("Move cancelled at %dcm", self.store.get_snapshot().current_height)

    async def go_to_memory(
        self,
        preset: int,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Move the desk to a memory preset (1-3).

        Raises:
            InvalidPresetError: If preset is not 1-3
            DeskCommunicationError: If a command cannot be sent
        """
        if preset not in PRESETS:
            raise InvalidPresetError(preset)

        command = self.commands[f"goto_memory{preset}"]
        await self.transport.write_command(command)
        logger.info("Moving to memory %d", preset)

        reached = await self._poll_until(
            lambda s: s.current_height == s.presets.get(preset), command, cancel, timeout
        )
        if not reached:
            logger.info("Move cancelled at %dcm", self.store.get_snapshot().current_height)

    async def save_memory(self, preset: int) -> None:
        """Save the current height to a memory preset (1-3)."""
        if preset not in PRESETS:
            raise InvalidPresetError(preset)

        await self._send(f"save_memory{preset}")
        logger.info("Saved height %dcm to memory %d", self.store.get_snapshot().current_height, preset)
        await asyncio.sleep(self.settle_delay)

    async def up(self) -> None:
        await self._send("up")

    async def down(self) -> None:
        await self._send("down")

    async def stop(self) -> None:
        await self._send("stop")

    async def fetch_height(self) -> None:
        """Request current height and memory presets."""
        await self._send_twice("fetch_height")

    async def fetch_height_range(self) -> None:
        await self._send_twice("fetch_height_range")

    async def fetch_stand_time(self) -> None:
        await self._send_twice("fetch_stand_time")

    async def fetch_all_time(self) -> None:
        await self._send_twice("fetch_all_time")
