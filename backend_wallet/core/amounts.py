"""Raw integer amounts <-> human decimal strings, without float drift."""

from __future__ import annotations

import re
from decimal import Decimal

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]*$")
_DEC_RE = re.compile(r"^[0-9]+$")


def parse_raw_amount(value: str | int | None) -> int:
    """
    Parse an on-chain quantity: int, 0x-hex string, or base-10 string.

    Empty / None / "0x" count as zero. Raises ValueError on anything else.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("amount must be non-negative")
        return value
    text = str(value).strip()
    if not text or text.lower() == "0x":
        return 0
    if _HEX_RE.match(text):
        return int(text, 16)
    if _DEC_RE.match(text):
        return int(text)
    raise ValueError(f"not an integer amount: {value!r}")


def format_units(raw: int, decimals: int) -> str:
    """
    Insert the decimal point into the integer digits and strip trailing zeros.

    >>> format_units(10**18, 18)
    '1'
    >>> format_units(1500000, 6)
    '1.5'
    >>> format_units(5, 3)
    '0.005'
    """
    if raw < 0:
        raise ValueError("raw amount must be non-negative")
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    digits = str(raw)
    if decimals == 0:
        return digits
    if len(digits) <= decimals:
        digits = digits.rjust(decimals + 1, "0")
    int_part, frac_part = digits[:-decimals], digits[-decimals:]
    frac_part = frac_part.rstrip("0")
    return f"{int_part}.{frac_part}" if frac_part else int_part


def usd_value(formatted_amount: str, usd_price: float) -> float:
    """formatted * price via Decimal; 0.0 for unknown or non-finite prices."""
    if not usd_price:
        return 0.0
    price = Decimal(str(usd_price))
    if not price.is_finite():
        return 0.0
    return float(Decimal(formatted_amount) * price)
