"""
CLI interface for desk control.

Provides command-line tools for scanning for desks and controlling them.
"""

import asyncio
import logging
import signal
import sys
from contextlib import contextmanager, suppress

from jiecang_controller import __version__
from jiecang_controller.controller import DeskController
from jiecang_controller.exceptions import (
    DeskCommunicationError,
    DeskConnectionError,
    DeskNotFoundError,
    DeskValueError,
)
from jiecang_controller.scanner import print_devices, scan_devices
from jiecang_controller.state import AntiCollisionSensitivity

CLI_COMMANDS = ("height", "settings", "up", "down", "goto-height", "goto-memory", "save-memory")


def parse_options(argv: list[str]) -> tuple[str | None, bool, list[str]]:
    """Split `-a/--address` and `-v/--verbose` out of argv.

    Returns:
        Tuple of (address, verbose, remaining_args)
    """
    address = None
    verbose = False
    rest = []
    args = iter(argv)
    for arg in args:
        if arg in ("-a", "--address"):
            address = next(args, None)
            if address is None:
                raise ValueError(f"{arg} requires a value")
        elif arg.startswith("--address="):
            address = arg.split("=", 1)[1]
        elif arg in ("-v", "--verbose"):
            verbose = True
        else:
            rest.append(arg)
    return address, verbose, rest


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


def format_settings(desk: DeskController) -> str:
    """Render the desk's reported state for display."""
    state = desk.state
    lines = [
        f"Height:          {state.current_height}cm",
        f"Height range:    {state.lowest_height}-{state.highest_height}cm",
    ]
    for preset in sorted(state.presets):
        lines.append(f"Memory {preset}:        {state.presets[preset]}cm")
    mode = "constant touch" if state.memory_constant_touch_mode else "one touch"
    lines.append(f"Memory mode:     {mode}")
    try:
        sensitivity = AntiCollisionSensitivity(state.anti_collision_sensitivity).name.lower()
    except ValueError:
        sensitivity = "unknown"
    lines.append(f"Anti-collision:  {sensitivity}")
    return "\n".join(lines)


@contextmanager
def cancel_on_signals():
    """Turn SIGINT/SIGTERM into a cancellation event while a move runs."""
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Signal handlers are unavailable on Windows event loops
        with suppress(NotImplementedError, AttributeError):
            loop.add_signal_handler(sig, cancel.set)
            installed.append(sig)
    try:
        yield cancel
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _parse_int(args: list[str], usage: str) -> int | None:
    if len(args) < 2:
        print(f"Usage: {usage}")
        return None
    try:
        return int(args[1])
    except ValueError:
        print(f"❌ Not a number: {args[1]}")
        return None


async def run_scan():
    """Scan for desks."""
    print("🔍 Scanning for desks (10 seconds)...\n")
    devices = await scan_devices(timeout=10.0)
    print_devices(devices)


async def run_control(address: str | None, args: list[str]) -> int:
    """Run a desk command. Returns the process exit code."""
    command = args[0] if args else "height"
    if command not in CLI_COMMANDS:
        print(f"Unknown command: {command}")
        print_control_help()
        return 1

    desk = DeskController(address)

    try:
        await desk.connect()

        if command == "height":
            print(f"📏 Height: {desk.current_height}cm")

        elif command == "settings":
            print(format_settings(desk))

        elif command == "up":
            await desk.up()

        elif command == "down":
            await desk.down()

        elif command == "goto-height":
            height = _parse_int(args, "goto-height <cm>")
            if height is None:
                return 1
            with cancel_on_signals() as cancel:
                await desk.move_to_height(height, cancel=cancel)

        elif command == "goto-memory":
            preset = _parse_int(args, "goto-memory <1-3>")
            if preset is None:
                return 1
            with cancel_on_signals() as cancel:
                await desk.go_to_preset(preset, cancel=cancel)

        elif command == "save-memory":
            preset = _parse_int(args, "save-memory <1-3>")
            if preset is None:
                return 1
            await desk.save_preset(preset)

        return 0

    except DeskNotFoundError as e:
        print(f"❌ {e}")
    except DeskConnectionError as e:
        print(f"❌ Connection failed: {e}")
    except DeskCommunicationError as e:
        print(f"❌ Communication error: {e}")
    except DeskValueError as e:
        print(f"❌ {e}")
    finally:
        try:
            await desk.disconnect()
        except DeskCommunicationError as e:
            print(f"❌ Error when disconnecting: {e}")
    return 1


def print_control_help():
    """Print help for desk control commands."""
    print(
        """
Usage: desk-control [-a ADDRESS] [-v] [command] [args]

Options:
  -a, --address    Bluetooth address of the desk (scans if omitted)
  -v, --verbose    Log protocol traffic

Commands:
  (no command)       Show current height
  height             Show current height in cm
  settings           Show height range, memory presets and settings
  up                 Move up one step
  down               Move down one step
  goto-height <cm>   Move to specific height in cm
  goto-memory <1-3>  Move to memory preset
  save-memory <1-3>  Save current position to memory preset
  version            Show version

Examples:
  desk-control -a AA:BB:CC:DD:EE:FF               # Show current height
  desk-control -a AA:BB:CC:DD:EE:FF goto-height 110
  desk-control goto-memory 1                      # Scan, then go to memory 1
"""
    )


def main_scan():
    """Entry point for desk-scan command."""
    asyncio.run(run_scan())


def main_control():
    """Entry point for desk-control command."""
    try:
        address, verbose, args = parse_options(sys.argv[1:])
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    if args and args[0] in ("-h", "--help", "help"):
        print_control_help()
        return
    if args and args[0] == "version":
        print(f"Version: {__version__}")
        return

    setup_logging(verbose)
    sys.exit(asyncio.run(run_control(address, args)))


if __name__ == "__main__":
    main_control()
