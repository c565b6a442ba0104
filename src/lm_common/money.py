"""Decimal money utilities.

All accruals, balances and withdrawals are Decimal with two fractional digits,
matching the NUMERIC(15, 2) columns. No float arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0.00")
_QUANT = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999999.99")


def to_amount(value: Decimal | int | float | str) -> Decimal:
    """Convert a JSON number or string to a two-place Decimal.

    Floats go through str() so that 729.98 stays 729.98 instead of its binary
    expansion. Raises ValueError for NaN, infinities, unparseable input and
    magnitudes that do not fit a NUMERIC(15,2) column.
    """
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
        if not amount.is_finite():
            raise ValueError(f"Not a monetary amount: {value!r}")
        amount = amount.quantize(_QUANT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc
    if abs(amount) > MAX_AMOUNT:
        raise ValueError(f"Amount out of range: {value!r}")
    return amount


def amount_to_json(amount: Decimal) -> float:
    """Render an amount as a JSON number for API responses."""
    return float(amount.quantize(_QUANT, rounding=ROUND_HALF_UP))
