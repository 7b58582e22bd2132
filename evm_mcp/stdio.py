"""stdio transport built on the MCP SDK's low-level server."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from evm_mcp import __version__
from evm_mcp.chain.client import WalletCapabilities
from evm_mcp.config import EvmConfig, default_config
from evm_mcp.registry import dispatch, list_tools

logger = logging.getLogger(__name__)

MCP_SERVER_NAME = "evm-mcp-server"


def build_server(capabilities: WalletCapabilities, *, config: EvmConfig = default_config) -> Server:
    server: Server = Server(MCP_SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=entry["name"],
                description=entry["description"],
                inputSchema=entry["inputSchema"],
                outputSchema=entry["outputSchema"],
            )
            for entry in list_tools()
        ]

    # Arguments are validated by the dispatcher so callers get every bad field at once.
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]):
        result = await dispatch(capabilities, name, arguments, config=config)
        return [types.TextContent(type="text", text=json.dumps(result))], result

    return server


async def serve_stdio(capabilities: WalletCapabilities, *, config: EvmConfig = default_config) -> None:
    server = build_server(capabilities, config=config)
    logger.info("serving MCP over stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
