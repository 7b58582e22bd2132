"""
Exact conversion between human-readable decimal amounts and integer base units.

Amounts represent currency, so nothing here touches float arithmetic: floats
are rendered with ``str()`` and parsed as ``Decimal``, and scaling is done on
the Decimal digit tuple rather than under a rounding context.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Union

from evm_mcp.config import MAX_TOKEN_DECIMALS

MAX_UINT256 = 2**256 - 1
_MAX_DIGITS = len(str(MAX_UINT256))

INTEGER_REGEX = re.compile(r"^-?\d+$")

Amount = Union[str, int, float, Decimal]


class ConversionError(ValueError):
    """Raised when an amount cannot be converted exactly."""


def _check_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ConversionError(f"decimals must be an integer, got {decimals!r}")
    if decimals < 0 or decimals > MAX_TOKEN_DECIMALS:
        raise ConversionError(f"decimals must be between 0 and {MAX_TOKEN_DECIMALS}, got {decimals}")
    return decimals


def _parse_decimal(amount: Amount) -> Decimal:
    if isinstance(amount, bool):
        raise ConversionError(f"Invalid amount: {amount!r}")
    if isinstance(amount, Decimal):
        value = amount
    else:
        text = str(amount).strip()
        if not text:
            raise ConversionError("Invalid amount: empty string")
        try:
            value = Decimal(text)
        except InvalidOperation as exc:
            raise ConversionError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ConversionError(f"Invalid amount: {amount!r}")
    return value


def to_base_unit(amount: Amount, decimals: int) -> str:
    """
    Convert a decimal amount to its integer base-unit string.

    ``to_base_unit("1.23", 6) == "1230000"``. Raises ConversionError when the
    amount has more fractional digits than ``decimals`` allows.
    """
    _check_decimals(decimals)
    value = _parse_decimal(amount)
    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    if coefficient == 0:
        return "0"
    shift = exponent + decimals
    if shift >= 0:
        if len(digits) + shift > _MAX_DIGITS:
            raise ConversionError(f"Amount {amount!r} is too large")
        scaled = coefficient * 10**shift
    else:
        if -shift > len(digits):
            raise ConversionError(
                f"Amount {amount!r} has more than {decimals} fractional digits"
            )
        divisor = 10 ** (-shift)
        if coefficient % divisor:
            raise ConversionError(
                f"Amount {amount!r} has more than {decimals} fractional digits"
            )
        scaled = coefficient // divisor
    if sign and scaled:
        return f"-{scaled}"
    return str(scaled)


def from_base_unit(amount: Union[str, int], decimals: int) -> str:
    """
    Convert an integer base-unit amount to a decimal string.

    Trailing fractional zeros are dropped: ``from_base_unit("123000000", 6) == "123"``.
    """
    _check_decimals(decimals)
    if isinstance(amount, bool):
        raise ConversionError(f"Invalid base unit amount: {amount!r}")
    text = str(amount).strip()
    if not INTEGER_REGEX.fullmatch(text):
        raise ConversionError(f"Invalid base unit amount: {amount!r}")
    raw = int(text)
    whole, fraction = divmod(abs(raw), 10**decimals)
    rendered = str(whole)
    if decimals:
        fraction_text = str(fraction).rjust(decimals, "0").rstrip("0")
        if fraction_text:
            rendered = f"{rendered}.{fraction_text}"
    if raw < 0:
        return f"-{rendered}"
    return rendered
