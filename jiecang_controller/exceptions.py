"""Exceptions raised by the Jiecang desk controller."""


class DeskError(Exception):
    """Base exception for desk controller errors."""

    pass


class DeskNotFoundError(DeskError):
    """Raised when desk cannot be found via BLE scan."""

    pass


class DeskConnectionError(DeskError):
    """Raised when connection to desk fails."""

    pass


class DeskCommunicationError(DeskError):
    """Raised when a command cannot be written to the desk."""

    pass


class DeskValueError(DeskError, ValueError):
    """Raised for invalid input, before any command is sent."""

    pass


class HeightOutOfRangeError(DeskValueError):
    """Raised when a target height is outside the desk's reported limits."""

    def __init__(self, height: int, lowest: int, highest: int):
        super().__init__(f"Height {height}cm is out of range (low: {lowest}cm, high: {highest}cm)")
        self.height = height
        self.lowest = lowest
        self.highest = highest


class InvalidPresetError(DeskValueError):
    """Raised when a memory preset number is not 1-3."""

    def __init__(self, preset: int):
        super().__init__(f"Invalid memory preset {preset} (must be 1-3)")
        self.preset = preset
