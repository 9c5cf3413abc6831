"""Tests for the MCP tools, run against a fake desk."""

from contextlib import asynccontextmanager

import pytest

from conftest import FakeTransport, fake_desk
from desk_mcp import server
from jiecang_controller.commands import COMMANDS
from jiecang_controller.controller import DeskController
from jiecang_controller.exceptions import DeskConnectionError, DeskNotFoundError


async def call(tool, **kwargs):
    """Invoke a registered tool's coroutine directly."""
    fn = getattr(tool, "fn", tool)
    return await fn(None, **kwargs)


@pytest.fixture
def link(monkeypatch):
    link = FakeTransport()
    link.on_write = fake_desk

    @asynccontextmanager
    async def get_desk():
        async with DeskController(
            transport=link, quiet=True, poll_interval=0.01, settle_delay=0.01
        ) as desk:
            yield desk

    monkeypatch.setattr(server, "get_desk", get_desk)
    return link


@pytest.mark.asyncio
async def test_get_height(link):
    assert await call(server.get_height) == "Current height: 80cm"
    assert link.disconnected


@pytest.mark.asyncio
async def test_get_settings(link):
    result = await call(server.get_settings)
    assert "62-127cm" in result
    assert "Memory 1:        110cm" in result


@pytest.mark.asyncio
async def test_move_up_and_down(link):
    assert await call(server.move_up) == "Moved up one step from 80cm"
    assert await call(server.move_down) == "Moved down one step from 80cm"
    assert COMMANDS["up"] in link.writes
    assert COMMANDS["down"] in link.writes


@pytest.mark.asyncio
async def test_move_to_height(link):
    assert await call(server.move_to_height, height_cm=100) == "Moved to 100cm"


@pytest.mark.asyncio
async def test_move_to_height_out_of_range(link):
    result = await call(server.move_to_height, height_cm=200)
    assert result.startswith("Error: Height 200cm is out of range")
    assert not any(write[2] == 0x1B for write in link.writes)


@pytest.mark.asyncio
async def test_stop_desk(link):
    assert await call(server.stop_desk) == "Desk stopped at 80cm"
    assert COMMANDS["stop"] in link.writes


@pytest.mark.asyncio
async def test_go_to_preset(link):
    assert await call(server.go_to_preset, preset=2) == "Moved to preset 2: 75cm"


@pytest.mark.asyncio
async def test_go_to_preset_invalid(link):
    result = await call(server.go_to_preset, preset=4)
    assert result == "Error: Invalid memory preset 4 (must be 1-3)"


@pytest.mark.asyncio
async def test_save_preset(link):
    assert await call(server.save_preset, preset=3) == "Saved preset 3 at 80cm"
    assert COMMANDS["save_memory3"] in link.writes


@pytest.mark.asyncio
async def test_write_failure(link):
    link.fail_after = 0
    result = await call(server.get_height)
    assert result == "Error: Communication failed - write failed"
    assert link.disconnected


def test_describe_error():
    assert server.describe_error(DeskNotFoundError("x")) == "Error: Desk not found. Is it powered on?"
    assert server.describe_error(DeskConnectionError("timed out")) == (
        "Error: Could not connect to desk - timed out"
    )
