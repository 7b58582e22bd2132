"""Offline unit-conversion tools; the capability bundle is accepted but unused."""

from __future__ import annotations

from typing import Any, Dict

from evm_mcp.tools.schemas import ConvertFromBaseUnitInput, ConvertToBaseUnitInput
from evm_mcp.tools.units import ConversionError, from_base_unit, to_base_unit


async def convert_to_base_unit(_capabilities: Any, params: ConvertToBaseUnitInput) -> Dict[str, Any]:
    try:
        base_units = to_base_unit(params.amount, params.decimals)
    except ConversionError as exc:
        raise ConversionError(f"Failed to convert to base unit: {exc}") from exc
    return {"baseUnitAmount": base_units}


async def convert_from_base_unit(_capabilities: Any, params: ConvertFromBaseUnitInput) -> Dict[str, Any]:
    try:
        decimal_amount = from_base_unit(params.amount, params.decimals)
    except ConversionError as exc:
        raise ConversionError(f"Failed to convert from base unit: {exc}") from exc
    return {"decimalAmount": decimal_amount}
