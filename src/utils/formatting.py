"""
Number formatting for map labels

Label values are rounded half-up on their decimal representation, so
12.345 becomes 12.35 rather than the 12.34 that binary float rounding
would produce.
"""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Optional, Union

Number = Union[int, float]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return Decimal(value)
    # repr() is the shortest string that round-trips, i.e. the value the
    # sender actually meant
    return Decimal(repr(float(value)))


def round_decimal(value: Number, places: int) -> Decimal:
    """
    Round to `places` decimals with half-up rounding

    Args:
        value: Finite number to round
        places: Number of decimals to keep (>= 0)

    Returns:
        Rounded Decimal
    """
    if places < 0:
        raise ValueError(f"places must be >= 0, got {places}")
    d = _to_decimal(value)
    quantum = Decimal(1).scaleb(-places)
    # quantize fails once the result has more digits than the context allows
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, d.adjusted() + places + 2)
        return d.quantize(quantum, rounding=ROUND_HALF_UP)


def round_half_up(value: Number, places: int = 0) -> float:
    """Round to `places` decimals, half-up, returning a float"""
    return float(round_decimal(value, places))


def format_number(value: Number, places: Optional[int] = None) -> str:
    """
    Render a number for display

    Rounds half-up when `places` is given, then drops trailing zeros
    (12.0 -> "12", 12.50 -> "12.5"). Negative zero renders as "0".
    """
    if places is None:
        d = _to_decimal(value)
    else:
        d = round_decimal(value, places)

    if d == d.to_integral_value():
        return str(int(d))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(d.as_tuple().digits))
        return format(d.normalize(), "f")
