"""
MCP Server for Jiecang Standing Desk Control.

Exposes desk control as tools that LLMs can call via the Model Context Protocol.
Set DESK_ADDRESS to the desk's Bluetooth address to skip scanning.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import Context, FastMCP

from jiecang_controller import (
    DeskCommunicationError,
    DeskConnectionError,
    DeskController,
    DeskNotFoundError,
    DeskValueError,
)
from jiecang_controller.cli import format_settings

# Create MCP server
mcp = FastMCP(
    "Standing Desk Controller",
    instructions="Control a Jiecang standing desk via BLE. Heights are in centimeters. "
    "Tools: get_height (check position), get_settings (limits, presets, settings), "
    "move_up/move_down (one step), move_to_height (absolute positioning), "
    "go_to_preset/save_preset (memory positions 1-3), stop_desk (emergency stop).",
)


@asynccontextmanager
async def get_desk() -> AsyncIterator[DeskController]:
    """Context manager for desk connection with automatic cleanup."""
    async with DeskController(os.getenv("DESK_ADDRESS"), quiet=True) as desk:
        yield desk


def describe_error(e: Exception) -> str:
    """Turn a desk error into a tool result."""
    if isinstance(e, DeskNotFoundError):
        return "Error: Desk not found. Is it powered on?"
    if isinstance(e, DeskConnectionError):
        return f"Error: Could not connect to desk - {e}"
    if isinstance(e, DeskCommunicationError):
        return f"Error: Communication failed - {e}"
    return f"Error: {e}"


DESK_ERRORS = (DeskNotFoundError, DeskConnectionError, DeskCommunicationError, DeskValueError)


@mcp.tool()
async def get_height(ctx: Context) -> str:
    """Get the current desk height in centimeters."""
    try:
        async with get_desk() as desk:
            return f"Current height: {desk.current_height}cm"
    except DESK_ERRORS as e:
        return describe_error(e)


@mcp.tool()
async def get_settings(ctx: Context) -> str:
    """
    Get everything the desk reports about itself.

    Includes height limits, saved memory presets, memory mode and
    anti-collision sensitivity.
    """
    try:
        async with get_desk() as desk:
            return format_settings(desk)
    except DESK_ERRORS as e:
        return describe_error(e)


@mcp.tool()
async def move_up(ctx: Context) -> str:
    """Move the desk up by one step, like pressing the up button once."""
    try:
        async with get_desk() as desk:
            await desk.up()
            return f"Moved up one step from {desk.current_height}cm"
    except DESK_ERRORS as e:
        return describe_error(e)


@mcp.tool()
async def move_down(ctx: Context) -> str:
    """Move the desk down by one step, like pressing the down button once."""
    try:
        async with get_desk() as desk:
            await desk.down()
            return f"Moved down one step from {desk.current_height}cm"
    except DESK_ERRORS as e:
        return describe_error(e)


@mcp.tool()
async def move_to_height(ctx: Context, height_cm: int) -> str:
    """
    Move the desk to a specific height in centimeters.

    Args:
        height_cm: Target height; must be within the desk's limits (see get_settings)

    Returns:
        Result of the movement including final height.
    """
    try:
        async with get_desk() as desk:
            final = await desk.move_to_height(height_cm)
            if final != height_cm:
                return f"Stopped at {final}cm before reaching {height_cm}cm"
            return f"Moved to {final}cm"
    except DESK_ERRORS as e:
        return describe_error(e)


@mcp.tool()
async def stop_desk(ctx: Context) -> str:
    """
    Emergency stop - immediately halt desk movement.

    Use this if the desk is moving and you need to stop it immediately.
    """
    try:
        async with get_desk() as desk:
            await desk.stop()
            return f"Desk stopped at {desk.current_height}cm"
    except DESK_ERRORS as e:
        return describe_error(e)


@mcp.tool()
async def go_to_preset(ctx: Context, preset: int = 1) -> str:
    """
    Move the desk to a saved memory preset position.

    The desk has 3 memory slots that can store favorite heights.

    Args:
        preset: Preset number 1-3 (default: 1)

    Returns:
        Final height after moving to the preset position.
    """
    try:
        async with get_desk() as desk:
            final = await desk.go_to_preset(preset)
            return f"Moved to preset {preset}: {final}cm"
    except DESK_ERRORS as e:
        return describe_error(e)


@mcp.tool()
async def save_preset(ctx: Context, preset: int = 1) -> str:
    """
    Save the current desk height to a memory preset.

    You can later recall this position using go_to_preset.

    Args:
        preset: Preset number 1-3 to save to (default: 1)

    Returns:
        Confirmation of the saved height.
    """
    try:
        async with get_desk() as desk:
            height = await desk.save_preset(preset)
            return f"Saved preset {preset} at {height}cm"
    except DESK_ERRORS as e:
        return describe_error(e)


def run_server():
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    run_server()
