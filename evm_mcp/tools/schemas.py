"""Pydantic input and output shapes for every tool.

Field names are snake_case in Python and camelCase on the wire. JSON Schema for
tool discovery is generated from these models.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from evm_mcp.config import MAX_TOKEN_DECIMALS

ADDRESS_DESCRIPTION = "(0x-prefixed, 20-byte hex)"
DECIMALS_DESCRIPTION = (
    "The number of decimals the token uses. When omitted, the token contract's "
    "decimals() is read; if that fails the server default (6) is used."
)


class ToolModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, extra="forbid")


def _decimals_field(required: bool = False) -> Any:
    if required:
        return Field(
            ...,
            ge=0,
            le=MAX_TOKEN_DECIMALS,
            description="The number of decimals the token uses (e.g., 6 or 18).",
        )
    return Field(None, ge=0, le=MAX_TOKEN_DECIMALS, description=DECIMALS_DESCRIPTION)


# --- Inputs ---


class EmptyInput(ToolModel):
    pass


class GetBalanceInput(ToolModel):
    address: Optional[str] = Field(
        None,
        description=f"The address to check the balance for {ADDRESS_DESCRIPTION}. Defaults to the connected wallet address.",
    )


class SignMessageInput(ToolModel):
    message: str = Field(..., description="The message to sign.")


class SendNativeTokenInput(ToolModel):
    to: str = Field(..., description=f"The recipient's address {ADDRESS_DESCRIPTION}.")
    value: str = Field(..., description="The amount of native tokens to send (e.g., '0.1').")


class GetTokenBalanceInput(ToolModel):
    token_address: str = Field(..., description=f"The contract address of the ERC20 token {ADDRESS_DESCRIPTION}.")
    owner_address: Optional[str] = Field(
        None,
        description=f"The owner's address {ADDRESS_DESCRIPTION}. Defaults to the connected wallet address.",
    )
    decimals: Optional[int] = _decimals_field()


class TransferTokenInput(ToolModel):
    token_address: str = Field(..., description=f"The contract address of the ERC20 token {ADDRESS_DESCRIPTION}.")
    to: str = Field(..., description=f"The recipient's address {ADDRESS_DESCRIPTION}.")
    amount: str = Field(..., description="The amount of tokens to send (human-readable, e.g., '100.5').")
    decimals: Optional[int] = _decimals_field()


class GetTokenTotalSupplyInput(ToolModel):
    token_address: str = Field(..., description=f"The contract address of the ERC20 token {ADDRESS_DESCRIPTION}.")
    decimals: Optional[int] = _decimals_field()


class GetTokenAllowanceInput(ToolModel):
    token_address: str = Field(..., description=f"The contract address of the ERC20 token {ADDRESS_DESCRIPTION}.")
    owner: Optional[str] = Field(
        None,
        description=f"The address of the token owner {ADDRESS_DESCRIPTION}. Defaults to the connected wallet address.",
    )
    spender: str = Field(..., description=f"The address of the spender {ADDRESS_DESCRIPTION}.")
    decimals: Optional[int] = _decimals_field()


class ApproveTokenInput(ToolModel):
    token_address: str = Field(..., description=f"The contract address of the ERC20 token {ADDRESS_DESCRIPTION}.")
    spender: str = Field(..., description=f"The address of the spender to approve {ADDRESS_DESCRIPTION}.")
    amount: str = Field(
        ...,
        description="The amount of tokens to approve (human-readable, e.g., '100.5'), or 'max' for the maximum uint256.",
    )
    decimals: Optional[int] = _decimals_field()


class RevokeApprovalInput(ToolModel):
    token_address: str = Field(..., description=f"The contract address of the ERC20 token {ADDRESS_DESCRIPTION}.")
    spender: str = Field(..., description=f"The address of the spender whose approval to revoke {ADDRESS_DESCRIPTION}.")


class TransferTokenFromInput(ToolModel):
    token_address: str = Field(..., description=f"The contract address of the ERC20 token {ADDRESS_DESCRIPTION}.")
    from_address: str = Field(..., alias="from", description=f"The address to transfer tokens from {ADDRESS_DESCRIPTION}.")
    to: str = Field(..., description=f"The address to transfer tokens to {ADDRESS_DESCRIPTION}.")
    amount: str = Field(..., description="The amount of tokens to transfer (human-readable, e.g., '100.5').")
    decimals: Optional[int] = _decimals_field()


class ConvertToBaseUnitInput(ToolModel):
    # Integers and strings reach the converter untouched; floats go through str().
    amount: Union[StrictInt, StrictFloat, StrictStr] = Field(
        ..., description="The decimal amount to convert (e.g., 1.23 or '1.000000000000000001')."
    )
    decimals: int = _decimals_field(required=True)


class ConvertFromBaseUnitInput(ToolModel):
    amount: str = Field(..., description="The base unit amount to convert (as a string, e.g., '123000000').")
    decimals: int = _decimals_field(required=True)


# --- Outputs ---


class AddressOutput(ToolModel):
    address: str = Field(..., description="The wallet address (0x...).")


class ChainOutput(ToolModel):
    chain_id: int = Field(..., description="The ID of the connected chain.")
    chain_name: str = Field(..., description="The name of the connected chain.")


class BalanceOutput(ToolModel):
    balance: str = Field(..., description="The balance in human-readable format, e.g., '1.23'.")


class SignatureOutput(ToolModel):
    signature: str = Field(..., description="The resulting signature (0x...).")


class TransactionOutput(ToolModel):
    transaction_hash: str = Field(..., description="The hash of the submitted transaction.")


class TotalSupplyOutput(ToolModel):
    total_supply: str = Field(..., description="The total token supply (human-readable).")


class AllowanceOutput(ToolModel):
    allowance: str = Field(..., description="The allowance amount (human-readable).")


class BaseUnitOutput(ToolModel):
    base_unit_amount: str = Field(..., description="The amount in its base unit (as a string).")


class DecimalAmountOutput(ToolModel):
    decimal_amount: str = Field(..., description="The amount in its decimal representation (as a string).")


def json_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """JSON Schema for discovery, keyed by wire (camelCase) names."""
    schema = model.model_json_schema(by_alias=True)
    schema.pop("title", None)
    schema.setdefault("properties", {})
    schema["type"] = "object"
    return schema
