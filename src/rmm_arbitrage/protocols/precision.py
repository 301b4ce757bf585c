"""
Fixed-point precision helpers.

The curve is defined over real numbers but settlement only supports token
amounts at each token's decimal precision. Amounts fed back into the curve
are truncated to that precision with these helpers.
"""
import math
from decimal import Decimal, ROUND_FLOOR, localcontext

# Enough digits for 18-decimal amounts of very large reserves
DECIMAL_PRECISION = 78

MAX_DECIMALS = 18


def truncate(value: float, decimals: int) -> float:
    """
    Truncate a value down to the given number of decimal places.

    Rounds toward negative infinity. The float is read through its shortest
    repr, so 0.3 truncated to one place stays 0.3.

    Args:
        value: Real-valued amount
        decimals: Number of decimal places the settlement layer supports

    Returns:
        The largest value with at most `decimals` places not above `value`
    """
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise ValueError(f"Decimals must be within [0, {MAX_DECIMALS}], got {decimals}")
    if not math.isfinite(value):
        raise ValueError(f"Cannot truncate non-finite value: {value}")

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        quantum = Decimal(1).scaleb(-decimals)
        return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_FLOOR))


def parse_units(value: float, decimals: int) -> int:
    """
    Convert a human-readable amount to integer base units.

    Uses the shortest repr of the float so that e.g. 0.1 with 4 decimals
    becomes 1000 rather than 999.

    Args:
        value: Amount in whole units
        decimals: Token or parameter precision

    Returns:
        Integer amount in base units (truncated)
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot parse non-finite value: {value}")

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        scaled = Decimal(repr(float(value))).scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))
