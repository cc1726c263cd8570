"""MCP server exposing the Mermaid tools over stdio.

Stdout carries the JSON-RPC stream, so nothing in this process may
print to it; logging goes to stderr (see ``cli._setup_logging``).
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool

from . import __version__
from .config import RendererConfig
from .mermaid_renderer import MermaidRenderer
from .tools.mermaid_tools import Content, MermaidTool, RenderMermaidTool, ValidateMermaidTool, text_content

logger = logging.getLogger(__name__)

SERVER_NAME = "Mermaid Validator"


class MermaidValidatorServer:
    """Routes MCP tool calls to the Mermaid tool adapters."""

    def __init__(self, config: RendererConfig | None = None) -> None:
        renderer = MermaidRenderer(config)
        self.config = renderer.config
        self.tools: dict[str, MermaidTool] = {
            tool.name: tool
            for tool in (ValidateMermaidTool(renderer), RenderMermaidTool(renderer))
        }

    async def list_tools(self) -> list[Tool]:
        return [tool.contract.to_mcp_tool() for tool in self.tools.values()]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> list[Content]:
        tool = self.tools.get(name)
        if tool is None:
            logger.warning("Call to unknown tool %r", name)
            return [text_content(f"Unknown tool: {name}")]
        logger.debug("Calling %s", name)
        return await tool.execute(arguments or {})

    def build(self) -> Server:
        """Create the low-level MCP server with our handlers attached."""
        server: Server = Server(SERVER_NAME, version=__version__)
        server.list_tools()(self.list_tools)
        server.call_tool()(self.call_tool)
        return server

    async def run_stdio(self) -> None:
        """Serve until the client closes stdin."""
        server = self.build()
        logger.info(
            "Starting %s %s (renderer: %s, timeout %gs)",
            SERVER_NAME, __version__, " ".join(self.config.command), self.config.timeout,
        )
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
        logger.info("Client disconnected, shutting down")
