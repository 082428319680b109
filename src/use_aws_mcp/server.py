"""Entrypoint for the use_aws MCP server."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # pragma: no cover

from use_aws_mcp import __version__
from use_aws_mcp.config import load_settings
from use_aws_mcp.logging_utils import configure_logging
from use_aws_mcp.mcp_runtime import MCPServer
from use_aws_mcp.tools import register_tools

SERVER_NAME = "use_aws"


def build_server() -> MCPServer:
    """Create and configure the MCP server instance."""

    settings = load_settings()

    server = MCPServer(
        name=SERVER_NAME,
        version=__version__,
        instructions=settings.server.instructions,
    )

    # Re-configure logging after FastMCP init so our stderr/file handlers persist.
    configure_logging(settings.logging)

    logging.info("Initializing use_aws MCP server v%s", __version__)
    if settings.logging.file:
        logging.info("Log file configured at: %s", settings.logging.file)
    register_tools(server)
    return server


_server: MCPServer | None = None
_server_lock = threading.Lock()


def get_server() -> MCPServer:
    """Lazily initialise and return the module-level server instance."""
    global _server
    if _server is not None:
        return _server
    with _server_lock:
        if _server is None:
            _server = build_server()
        return _server


def run_entrypoint() -> None:
    """Serve MCP over stdio until the client disconnects."""
    get_server().run()


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
