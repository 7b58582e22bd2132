"""LLM-facing tool implementations."""

from .wallet import get_address, get_balance, get_chain, send_native_token, sign_message
from .tokens import (
    approve_token,
    get_token_allowance,
    get_token_balance,
    get_token_total_supply,
    revoke_approval,
    transfer_token,
    transfer_token_from,
)
from .conversion import convert_from_base_unit, convert_to_base_unit
from . import schemas, units

__all__ = [
    "get_address",
    "get_chain",
    "get_balance",
    "sign_message",
    "send_native_token",
    "get_token_balance",
    "transfer_token",
    "get_token_total_supply",
    "get_token_allowance",
    "approve_token",
    "revoke_approval",
    "transfer_token_from",
    "convert_to_base_unit",
    "convert_from_base_unit",
    "schemas",
    "units",
]
