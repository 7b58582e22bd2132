"""FastAPI application exposing the tool registry over JSON-RPC on HTTP."""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from evm_mcp import __version__
from evm_mcp.bootstrap import bootstrap, close_capabilities
from evm_mcp.chain.client import WalletCapabilities
from evm_mcp.config import EvmConfig, default_config
from evm_mcp.metrics import default_metrics
from evm_mcp.registry import (
    InvalidArgumentsError,
    ToolExecutionError,
    ToolNotFoundError,
    dispatch,
    list_tools,
)

logger = logging.getLogger(__name__)

HEALTH_STATUS = {"status": "ok"}
MCP_SERVER_NAME = "evm-mcp-server"
MCP_SERVER_VERSION = __version__

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def create_app(
    capabilities: Optional[WalletCapabilities] = None,
    *,
    config: EvmConfig = default_config,
) -> FastAPI:
    """
    Build the HTTP app. Without ``capabilities`` the lifespan bootstraps a
    wallet from the environment and closes it on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "capabilities", None) is None:
            owned = await bootstrap(config=config)
            app.state.capabilities = owned
        yield
        if owned is not None:
            await close_capabilities(owned)

    app = FastAPI(
        title="EVM MCP Server",
        description="Wallet tool surface for LLM agents on EVM chains.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.capabilities = capabilities
    app.state.config = config

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.time()
        default_metrics.incr_request()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000
        default_metrics.record_duration(request_id, duration_ms)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health endpoint for monitoring."""
        return JSONResponse(content=HEALTH_STATUS)

    @app.get("/metrics")
    async def metrics() -> JSONResponse:
        """Return in-process metrics snapshot."""
        return JSONResponse(content=default_metrics.snapshot())

    @app.post("/mcp")
    async def mcp_gateway(request: Request) -> Response:
        """
        JSON-RPC 2.0 gateway for MCP clients.

        Supported methods:
          - initialize
          - ping
          - list_tools / tools/list
          - call_tool / tools/call
          - notifications/initialized
        """
        return await _handle_rpc(request)

    return app


class RpcError(Exception):
    """A JSON-RPC error response; ``status_code`` is the HTTP status to send it with."""

    def __init__(self, code: int, message: str, *, data: Any = None, status_code: int = 200) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
        self.status_code = status_code


def _parse_envelope(body: Any) -> Tuple[str, Dict[str, Any]]:
    """Return (method, params) or raise RpcError."""
    if not isinstance(body, dict):
        raise RpcError(INVALID_REQUEST, "Invalid request", status_code=400)
    params = body.get("params")
    if params is None:
        params = {}
    elif not isinstance(params, dict):
        raise RpcError(INVALID_PARAMS, "Invalid params")
    method = body.get("method")
    if not isinstance(method, str) or not method:
        raise RpcError(INVALID_REQUEST, "Invalid request")
    return method, params


async def _rpc_initialize(request: Request, params: Dict[str, Any]) -> Dict[str, Any]:
    protocol_version = params.get("protocolVersion")
    if not isinstance(protocol_version, str) or not protocol_version:
        raise RpcError(INVALID_PARAMS, "Invalid params")
    return {
        "protocolVersion": protocol_version,
        "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
        "capabilities": {"tools": {"listChanged": False}},
    }


async def _rpc_ping(request: Request, params: Dict[str, Any]) -> Dict[str, Any]:
    return {}


async def _rpc_list_tools(request: Request, params: Dict[str, Any]) -> Dict[str, Any]:
    return {"tools": list_tools()}


async def _rpc_call_tool(request: Request, params: Dict[str, Any]) -> Dict[str, Any]:
    # Accepts both MCP (name/arguments) and legacy (tool/params) field names.
    tool_name = params.get("name") or params.get("tool")
    if not isinstance(tool_name, str) or not tool_name.strip():
        raise RpcError(INVALID_PARAMS, "Invalid params")
    arguments = params.get("arguments")
    if arguments is None:
        arguments = params.get("params") or {}

    capabilities = getattr(request.app.state, "capabilities", None)
    if capabilities is None:
        raise RpcError(INTERNAL_ERROR, "Wallet not initialized")
    config = getattr(request.app.state, "config", default_config)

    try:
        result = await dispatch(capabilities, tool_name, arguments, config=config)
    except ToolNotFoundError as exc:
        raise RpcError(INVALID_PARAMS, exc.message) from exc
    except InvalidArgumentsError as exc:
        issues = [{"path": path, "reason": reason} for path, reason in exc.issues]
        raise RpcError(INVALID_PARAMS, exc.message, data={"issues": issues}) from exc
    except ToolExecutionError as exc:
        return _wrap_tool_error(exc.message)
    return _wrap_tool_result(result)


RpcMethod = Callable[[Request, Dict[str, Any]], Awaitable[Dict[str, Any]]]

_RPC_METHODS: Dict[str, RpcMethod] = {
    "initialize": _rpc_initialize,
    "ping": _rpc_ping,
    "list_tools": _rpc_list_tools,
    "tools/list": _rpc_list_tools,
    "call_tool": _rpc_call_tool,
    "tools/call": _rpc_call_tool,
}

_NOTIFICATIONS = frozenset({"notifications/initialized", "initialized"})


async def _handle_rpc(request: Request) -> Response:
    request_id = getattr(request.state, "request_id", None)
    start = time.time()
    method: Optional[str] = None
    rpc_id: Any = None

    try:
        try:
            body = await request.json()
        except ValueError as exc:
            raise RpcError(PARSE_ERROR, "Parse error", status_code=400) from exc
        if isinstance(body, dict):
            rpc_id = body.get("id")
        method, params = _parse_envelope(body)

        if method in _NOTIFICATIONS:
            # Notifications get no JSON-RPC response body.
            logger.debug("mcp notification method=%s", method, extra={"request_id": request_id})
            return Response(status_code=204)

        handler = _RPC_METHODS.get(method)
        if handler is None:
            raise RpcError(METHOD_NOT_FOUND, "Method not found")
        result = await handler(request, params)
    except RpcError as exc:
        _log_rpc(request_id, method, rpc_id, start, error_code=exc.code)
        payload = _jsonrpc_error_payload(rpc_id, exc.code, exc.message, data=exc.data)
        return JSONResponse(status_code=exc.status_code, content=payload)

    _log_rpc(request_id, method, rpc_id, start, is_error=bool(result.get("isError")))
    return JSONResponse(content=_jsonrpc_success_payload(rpc_id, result))


def _log_rpc(
    request_id: Optional[str],
    method: Optional[str],
    rpc_id: Any,
    start: float,
    *,
    error_code: Optional[int] = None,
    is_error: bool = False,
) -> None:
    outcome = "error" if error_code is not None or is_error else "success"
    logger.debug(
        "mcp outcome=%s method=%s id=%s duration_ms=%.2f error_code=%s",
        outcome,
        method,
        rpc_id,
        (time.time() - start) * 1000,
        error_code,
        extra={"request_id": request_id, "error": error_code},
    )


def _jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _jsonrpc_error_payload(rpc_id: Any, code: int, message: str, *, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": rpc_id, "error": error}


def _wrap_tool_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a tool result into an MCP content array plus structured content."""
    return {
        "content": [{"type": "text", "text": json.dumps(result)}],
        "structuredContent": result,
    }


def _wrap_tool_error(message: str) -> Dict[str, Any]:
    # Execution errors are returned in-band with the isError flag.
    return {"content": [{"type": "text", "text": message}], "isError": True}


# Run with: uvicorn evm_mcp.server:app
app = create_app()
