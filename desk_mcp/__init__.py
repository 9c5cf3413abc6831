"""
MCP Server for Jiecang Standing Desk Control.

Exposes the desk's movement and memory operations as tools that LLMs can call.
"""

from desk_mcp.server import mcp, run_server

__all__ = ["mcp", "run_server"]
