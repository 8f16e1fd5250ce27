"""
MCP transport bridge.

Publishes the operation catalog as MCP tools and forwards tools/call requests
to the Dispatcher. Input validation in the MCP server is switched off: the
advertised schemas describe the arguments, but coercion decides whether they
are acceptable, so "800" is still a valid integer.
"""

import logging
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .decorators.envelope import payload_to_text
from .errors import OperationFailed
from .operations import PROVIDER_MODULES
from .registry import Dispatcher, build_catalog, list_operations

logger = logging.getLogger(__name__)


SERVER_NAME = "mcp-playwright-server"


def build_dispatcher(session=None) -> Dispatcher:
    """Catalog of every provider module, bound to `session` (or the global one)."""
    return Dispatcher(build_catalog(PROVIDER_MODULES), session=session)


def to_mcp_tool(description: Dict[str, Any]) -> types.Tool:
    annotations = description["annotations"]
    return types.Tool(
        name=description["name"],
        description=description["description"],
        inputSchema=description["inputSchema"],
        annotations=types.ToolAnnotations(
            title=annotations["title"],
            readOnlyHint=annotations["readOnlyHint"],
            destructiveHint=annotations["destructiveHint"],
            openWorldHint=annotations["openWorldHint"],
        ),
    )


def create_server(dispatcher: Dispatcher, name: str = SERVER_NAME) -> Server:
    server = Server(name)
    tools = [to_mcp_tool(description) for description in list_operations(dispatcher.catalog)]

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return tools

    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        envelope = await dispatcher.invoke(name, arguments)
        if not envelope["ok"]:
            # The MCP server turns exceptions into an isError result with this message.
            raise OperationFailed(envelope["message"])
        return [types.TextContent(type="text", text=payload_to_text(envelope["payload"]))]

    logger.debug("MCP server %s exposes %d tools", name, len(tools))
    return server


async def serve_stdio(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


__all__ = [
    "SERVER_NAME",
    "build_dispatcher",
    "to_mcp_tool",
    "create_server",
    "serve_stdio",
]
