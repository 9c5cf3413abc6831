"""Live state of a connected desk, shared between notifications and movement."""

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import IntEnum
from types import MappingProxyType


class AntiCollisionSensitivity(IntEnum):
    """Anti-collision sensitivity levels reported by the controller."""

    HIGH = 1
    MEDIUM = 2
    LOW = 3


@dataclass(frozen=True)
class DeviceState:
    """Immutable snapshot of everything the desk has reported so far.

    Heights are in centimetres; 0 means not reported yet.
    """

    current_height: int = 0
    lowest_height: int = 0
    highest_height: int = 0
    presets: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))
    memory_constant_touch_mode: bool = False
    anti_collision_sensitivity: int = 0

    @property
    def has_height_range(self) -> bool:
        return self.highest_height > 0


class DeviceStateStore:
    """
    Thread-safe owner of a desk's DeviceState.

    Every setter applies the effect of one decoded frame in a single critical
    section, so snapshots never observe a half-applied frame. The lock is
    never held across I/O.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = DeviceState()

    def get_snapshot(self) -> DeviceState:
        with self._lock:
            return self._state

    def _update(self, **changes) -> None:
        with self._lock:
            self._state = replace(self._state, **changes)

    def set_current_height(self, height_cm: int) -> None:
        self._update(current_height=height_cm)

    def set_height_range(self, highest_cm: int, lowest_cm: int) -> None:
        self._update(highest_height=highest_cm, lowest_height=lowest_cm)

    def set_preset(self, preset: int, height_cm: int) -> None:
        with self._lock:
            presets = dict(self._state.presets)
            presets[preset] = height_cm
            self._state = replace(self._state, presets=MappingProxyType(presets))

    def set_memory_constant_touch_mode(self, enabled: bool) -> None:
        self._update(memory_constant_touch_mode=enabled)

    def set_anti_collision_sensitivity(self, level: int) -> None:
        self._update(anti_collision_sensitivity=level)
