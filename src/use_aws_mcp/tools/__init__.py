"""Tool registration helpers.

The server exposes exactly one tool, ``use_aws``.
"""

from __future__ import annotations

import logging

from use_aws_mcp.mcp_runtime import MCPServer, ToolSpec
from use_aws_mcp.tools.use_aws import use_aws_tool

__all__ = ["get_tool_registry", "get_tool_specs", "register_tools"]

logger = logging.getLogger(__name__)


def get_tool_specs() -> list[ToolSpec]:
    return [use_aws_tool]


def get_tool_registry() -> dict[str, ToolSpec]:
    return {tool.name: tool for tool in get_tool_specs()}


def register_tools(server: MCPServer) -> None:
    """Register the use_aws tool with the MCP server."""
    for tool in get_tool_specs():
        server.add_tool(tool)
    logger.info("Registered tools: %s", ", ".join(get_tool_registry()))
