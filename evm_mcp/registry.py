"""
Tool registry and dispatcher shared by the stdio and HTTP transports.

The registry is a fixed, ordered mapping of wire names to tool definitions.
Dispatch is stateless: the caller threads the wallet capabilities in on every
call, and every per-call failure surfaces as a ``ToolError`` subclass.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from evm_mcp.config import EvmConfig, default_config
from evm_mcp import metrics
from evm_mcp.metrics import default_metrics
from evm_mcp.tools import (
    approve_token,
    convert_from_base_unit,
    convert_to_base_unit,
    get_address,
    get_balance,
    get_chain,
    get_token_allowance,
    get_token_balance,
    get_token_total_supply,
    revoke_approval,
    send_native_token,
    sign_message,
    transfer_token,
    transfer_token_from,
)
from evm_mcp.tools import schemas

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any, Any], Awaitable[Dict[str, Any]]]
Issue = Tuple[str, str]


class ToolError(Exception):
    """Base class for per-call failures; never fatal to the process."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name
        self.message = message


class ToolNotFoundError(ToolError):
    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"Tool '{tool_name}' not found.")


class InvalidArgumentsError(ToolError):
    """Carries one (field path, reason) pair per violated field."""

    def __init__(self, tool_name: str, issues: List[Issue]) -> None:
        details = ", ".join(f"{path} ({reason})" for path, reason in issues)
        super().__init__(tool_name, f"Invalid arguments for tool {tool_name}: {details}")
        self.issues = issues


class ToolExecutionError(ToolError):
    def __init__(self, tool_name: str, cause: str) -> None:
        super().__init__(tool_name, f"Tool {tool_name} failed: {cause}")
        self.cause = cause


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    handler: ToolHandler
    # Handlers that fall back to configured token decimals take config as a keyword.
    uses_config: bool = False

    @property
    def input_schema(self) -> Dict[str, Any]:
        return schemas.json_schema(self.input_model)

    @property
    def output_schema(self) -> Dict[str, Any]:
        return schemas.json_schema(self.output_model)


_TOOLS: Tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="getAddress",
        description="Get the connected wallet address.",
        input_model=schemas.EmptyInput,
        output_model=schemas.AddressOutput,
        handler=get_address,
    ),
    ToolDefinition(
        name="getChain",
        description="Get the chain ID and name the wallet is connected to.",
        input_model=schemas.EmptyInput,
        output_model=schemas.ChainOutput,
        handler=get_chain,
    ),
    ToolDefinition(
        name="getBalance",
        description="Get the native token (e.g., ETH) balance for a given address or the connected wallet.",
        input_model=schemas.GetBalanceInput,
        output_model=schemas.BalanceOutput,
        handler=get_balance,
    ),
    ToolDefinition(
        name="signMessage",
        description="Sign a message using the connected wallet.",
        input_model=schemas.SignMessageInput,
        output_model=schemas.SignatureOutput,
        handler=sign_message,
    ),
    ToolDefinition(
        name="sendNativeToken",
        description="Send native tokens (e.g., ETH) from the wallet to a specified address.",
        input_model=schemas.SendNativeTokenInput,
        output_model=schemas.TransactionOutput,
        handler=send_native_token,
    ),
    ToolDefinition(
        name="getTokenBalance",
        description="Get the ERC20 token balance for a specified owner address.",
        input_model=schemas.GetTokenBalanceInput,
        output_model=schemas.BalanceOutput,
        handler=get_token_balance,
        uses_config=True,
    ),
    ToolDefinition(
        name="transferToken",
        description="Send a specified amount of an ERC20 token to a recipient address.",
        input_model=schemas.TransferTokenInput,
        output_model=schemas.TransactionOutput,
        handler=transfer_token,
        uses_config=True,
    ),
    ToolDefinition(
        name="getTokenTotalSupply",
        description="Get the total supply of an ERC20 token.",
        input_model=schemas.GetTokenTotalSupplyInput,
        output_model=schemas.TotalSupplyOutput,
        handler=get_token_total_supply,
        uses_config=True,
    ),
    ToolDefinition(
        name="getTokenAllowance",
        description="Get the allowance an owner has granted to a spender for an ERC20 token.",
        input_model=schemas.GetTokenAllowanceInput,
        output_model=schemas.AllowanceOutput,
        handler=get_token_allowance,
        uses_config=True,
    ),
    ToolDefinition(
        name="approveToken",
        description=(
            "Approve a spender to withdraw an amount of an ERC20 token from the connected wallet. "
            "Use 'max' for amount to approve the maximum."
        ),
        input_model=schemas.ApproveTokenInput,
        output_model=schemas.TransactionOutput,
        handler=approve_token,
        uses_config=True,
    ),
    ToolDefinition(
        name="revokeApproval",
        description="Revoke (set to 0) a spender's allowance for an ERC20 token from the connected wallet.",
        input_model=schemas.RevokeApprovalInput,
        output_model=schemas.TransactionOutput,
        handler=revoke_approval,
    ),
    ToolDefinition(
        name="transferTokenFrom",
        description="Transfer an amount of an ERC20 token from one address to another; requires prior approval.",
        input_model=schemas.TransferTokenFromInput,
        output_model=schemas.TransactionOutput,
        handler=transfer_token_from,
        uses_config=True,
    ),
    ToolDefinition(
        name="convertToBaseUnit",
        description="Convert a decimal token amount to its base unit representation.",
        input_model=schemas.ConvertToBaseUnitInput,
        output_model=schemas.BaseUnitOutput,
        handler=convert_to_base_unit,
    ),
    ToolDefinition(
        name="convertFromBaseUnit",
        description="Convert a token amount from its base unit representation to a decimal string.",
        input_model=schemas.ConvertFromBaseUnitInput,
        output_model=schemas.DecimalAmountOutput,
        handler=convert_from_base_unit,
    ),
)

TOOL_REGISTRY: Dict[str, ToolDefinition] = {tool.name: tool for tool in _TOOLS}


def list_tools() -> List[Dict[str, Any]]:
    """Return discovery metadata for every tool, in registry order."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
            "outputSchema": tool.output_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


def _issues_from(error: ValidationError) -> List[Issue]:
    issues: List[Issue] = []
    for entry in error.errors():
        path = ".".join(str(part) for part in entry.get("loc", ())) or "<root>"
        issues.append((path, entry.get("msg", "invalid value")))
    return issues


def validate_arguments(tool: ToolDefinition, raw_arguments: Optional[Any]) -> BaseModel:
    """Validate untrusted arguments against the tool's input model."""
    arguments = {} if raw_arguments is None else raw_arguments
    if not isinstance(arguments, dict):
        raise InvalidArgumentsError(tool.name, [("<root>", "arguments must be an object")])
    try:
        return tool.input_model.model_validate(arguments)
    except ValidationError as exc:
        raise InvalidArgumentsError(tool.name, _issues_from(exc)) from exc


def validate_result(tool: ToolDefinition, result: Any) -> Dict[str, Any]:
    """Check a handler result against the tool's advertised output model."""
    try:
        tool.output_model.model_validate(result)
    except ValidationError as exc:
        details = ", ".join(f"{path} ({reason})" for path, reason in _issues_from(exc))
        raise ToolExecutionError(tool.name, f"result does not match output schema: {details}") from exc
    return result


async def dispatch(
    capabilities: Any,
    name: str,
    raw_arguments: Optional[Any] = None,
    *,
    config: EvmConfig = default_config,
) -> Dict[str, Any]:
    """
    Look up ``name``, validate ``raw_arguments``, run the handler.

    Raises ToolNotFoundError, InvalidArgumentsError or ToolExecutionError.
    Handler results are returned unmodified.
    """
    tool = TOOL_REGISTRY.get(name)
    if tool is None:
        logger.warning("tool=%s outcome=not_found", name, extra={"tool": name})
        default_metrics.record_tool(metrics.UNKNOWN_TOOL, metrics.NOT_FOUND)
        raise ToolNotFoundError(name)

    try:
        params = validate_arguments(tool, raw_arguments)
    except InvalidArgumentsError as exc:
        logger.warning(
            "tool=%s outcome=invalid_arguments arguments=%s error=%s",
            name,
            raw_arguments,
            exc.message,
            extra={"tool": name, "error": exc.message},
        )
        default_metrics.record_tool(name, metrics.INVALID_ARGUMENTS)
        raise

    start = time.monotonic()
    try:
        if tool.uses_config:
            result = await tool.handler(capabilities, params, config=config)
        else:
            result = await tool.handler(capabilities, params)
        if config.enforce_output_schema:
            validate_result(tool, result)
    except ToolExecutionError as exc:
        _log_failure(name, raw_arguments, exc.cause, start)
        raise
    except Exception as exc:
        _log_failure(name, raw_arguments, str(exc), start)
        raise ToolExecutionError(name, str(exc)) from exc

    duration_ms = (time.monotonic() - start) * 1000
    logger.info(
        "tool=%s outcome=success duration_ms=%.2f",
        name,
        duration_ms,
        extra={"tool": name},
    )
    default_metrics.record_tool(name, metrics.SUCCESS, duration_ms=duration_ms)
    return result


def _log_failure(name: str, raw_arguments: Any, message: str, start: float) -> None:
    duration_ms = (time.monotonic() - start) * 1000
    logger.error(
        "tool=%s outcome=error arguments=%s error=%s",
        name,
        raw_arguments,
        message,
        extra={"tool": name, "error": message},
    )
    default_metrics.record_tool(name, metrics.ERROR, duration_ms=duration_ms)
