"""
Jiecang Controller - BLE control library for Jiecang standing desks.

This package implements the Jiecang desk protocol as carried over the
Lierda BLE module: command encoding, frame decoding, live desk state and
movement to heights and memory presets.
"""

from jiecang_controller.controller import DeskController
from jiecang_controller.exceptions import (
    DeskCommunicationError,
    DeskConnectionError,
    DeskError,
    DeskNotFoundError,
    DeskValueError,
    HeightOutOfRangeError,
    InvalidPresetError,
)
from jiecang_controller.state import AntiCollisionSensitivity, DeviceState

__version__ = "0.1.0"

__all__ = [
    # Controller
    "DeskController",
    "DeviceState",
    "AntiCollisionSensitivity",
    # Errors
    "DeskError",
    "DeskNotFoundError",
    "DeskConnectionError",
    "DeskCommunicationError",
    "DeskValueError",
    "HeightOutOfRangeError",
    "InvalidPresetError",
]
