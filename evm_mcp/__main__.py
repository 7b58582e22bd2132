"""Command-line entry point: ``evm-mcp-server`` or ``python -m evm_mcp``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from evm_mcp import __version__
from evm_mcp.bootstrap import BootstrapError, bootstrap, close_capabilities, load_wallet_settings
from evm_mcp.config import EvmConfig, WalletSettings, default_config
from evm_mcp.logging_setup import configure_logging
from evm_mcp.server import create_app
from evm_mcp.stdio import serve_stdio

logger = logging.getLogger("evm_mcp")


def build_parser(config: EvmConfig = default_config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="evm-mcp-server",
        description="Expose a server-held EVM wallet as MCP tools (stdio by default).",
    )
    parser.add_argument("--http", action="store_true", help="Serve JSON-RPC over HTTP instead of stdio.")
    parser.add_argument("--host", default=config.http_host, help="HTTP bind host (with --http).")
    parser.add_argument("--port", type=int, default=config.http_port, help="HTTP bind port (with --http).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def run_stdio(settings: WalletSettings, config: EvmConfig) -> None:
    capabilities = await bootstrap(settings, config=config)
    try:
        await serve_stdio(capabilities, config=config)
    finally:
        await close_capabilities(capabilities)


async def run_http(settings: WalletSettings, config: EvmConfig, host: str, port: int) -> None:
    # Bootstrap before binding so a bad chain never starts the listener.
    capabilities = await bootstrap(settings, config=config)
    app = create_app(capabilities, config=config)
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_config=None))
    try:
        await server.serve()
    finally:
        await close_capabilities(capabilities)


def main(argv: Optional[List[str]] = None, *, config: EvmConfig = default_config) -> int:
    args = build_parser(config).parse_args(argv)
    configure_logging(config)

    try:
        settings = load_wallet_settings()
        if args.http:
            asyncio.run(run_http(settings, config, args.host, args.port))
        else:
            asyncio.run(run_stdio(settings, config))
    except BootstrapError as exc:
        logger.error("Error: %s", exc, extra={"error": str(exc)})
        return 1
    except KeyboardInterrupt:
        return 0
    except Exception:
        logger.exception("Fatal error in main()")
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
