"""Routes frames notified by the desk into the state store."""

import logging

from jiecang_controller import protocol
from jiecang_controller.protocol import MessageType
from jiecang_controller.state import DeviceStateStore

logger = logging.getLogger(__name__)

# Recognised, but nothing to store
IGNORED_TYPES = (MessageType.UNITS, MessageType.UNKNOWN_17, MessageType.HEIGHT_ACK)


class NotificationDispatcher:
    """
    Notification handler for a desk's data-out characteristic.

    A single notification may carry several concatenated frames. Invalid or
    unknown frames are logged and skipped without affecting the others.
    """

    def __init__(self, store: DeviceStateStore):
        self.store = store

    def __call__(self, data: bytes) -> None:
        for segment in protocol.split_frames(data):
            if len(segment) < protocol.MIN_SEGMENT_SIZE:
                continue
            if not protocol.validate(segment):
                logger.debug("Invalid frame: %s", segment.hex())
                continue
            self._dispatch(segment)

    def _dispatch(self, frame: bytes) -> None:
        msg_type = frame[2]

        if msg_type == MessageType.HEIGHT:
            self.store.set_current_height(protocol.decode_height(frame))

        elif msg_type == MessageType.HEIGHT_RANGE:
            highest, lowest = protocol.decode_height_range(frame)
            self.store.set_height_range(highest, lowest)

        elif msg_type in protocol.PRESET_TYPES:
            self.store.set_preset(protocol.preset_index(msg_type), protocol.decode_preset(frame))

        elif msg_type == MessageType.MEMORY_MODE:
            value = protocol.decode_setting(frame)
            if value is not None:
                self.store.set_memory_constant_touch_mode(value == 1)

        elif msg_type == MessageType.ANTI_COLLISION:
            value = protocol.decode_setting(frame)
            if value is not None:
                self.store.set_anti_collision_sensitivity(value)

        elif msg_type in IGNORED_TYPES:
            logger.debug("Ignored %s frame: %s", MessageType(msg_type).name, frame.hex())

        else:
            logger.debug("Unhandled frame: %s", frame.hex())
