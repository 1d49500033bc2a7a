"""MCP stdio server exposing the Recraft tools."""

import base64
import logging
from typing import Any, Dict, List, Optional, Union

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import ImageContent, Prompt, Resource, TextContent, Tool

from recraft_mcp import __version__
from recraft_mcp.core import ToolDispatcher
from recraft_mcp.errors import RecraftError
from recraft_mcp.models import ImageSegment, ToolResult
from recraft_mcp.tools import TOOLS

logger = logging.getLogger(__name__)

SERVER_NAME = "recraft-mcp"

Content = Union[TextContent, ImageContent]


def to_mcp_content(result: ToolResult) -> List[Content]:
    content: List[Content] = []
    for segment in result.content:
        if isinstance(segment, ImageSegment):
            content.append(
                ImageContent(
                    type="image",
                    data=base64.b64encode(segment.data).decode("ascii"),
                    mimeType=segment.mime_type,
                )
            )
        else:
            content.append(TextContent(type="text", text=segment.text))
    return content


def list_mcp_tools() -> List[Tool]:
    return [
        Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in TOOLS
    ]


def create_server(dispatcher: ToolDispatcher) -> Server:
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return list_mcp_tools()

    # The dispatcher validates arguments itself so callers get the aggregated message.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[Content]:
        try:
            result = await dispatcher.dispatch(name, arguments)
        except RecraftError as e:
            logger.error(f"Tool {name} failed: {e}")
            raise
        return to_mcp_content(result)

    @server.list_resources()
    async def list_resources() -> List[Resource]:
        return []

    @server.list_prompts()
    async def list_prompts() -> List[Prompt]:
        return []

    return server


async def run_stdio_server(dispatcher: ToolDispatcher) -> None:
    server = create_server(dispatcher)
    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Recraft MCP server running on stdio")
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await dispatcher.close()
