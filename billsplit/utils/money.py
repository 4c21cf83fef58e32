"""Money helpers. Amounts travel as floats; arithmetic happens in Decimal."""
import math
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any, Iterable

CENT = Decimal("0.01")
TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")

# Largest amount a bill, share or item may carry.
MAX_AMOUNT = Decimal("1000000000000")

# Enough digits to quantize any finite float to the cent without trapping.
MONEY_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Convert an amount to Decimal; missing or non-numeric values count as zero."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return ZERO
    if isinstance(value, float) and not math.isfinite(value):
        return ZERO
    # str() keeps the shortest repr, so 33.33 stays 33.33
    return Decimal(str(value))


def is_valid_amount(value: Any) -> bool:
    """True for a finite number between 0 and MAX_AMOUNT."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    if isinstance(value, Decimal) and not value.is_finite():
        return False
    return ZERO <= to_decimal(value) <= MAX_AMOUNT


def quantize(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP, context=MONEY_CONTEXT)


def round_money(value: Any) -> float:
    return float(quantize(value))


def money_sum(values: Iterable[Any]) -> Decimal:
    return sum((to_decimal(v) for v in values), ZERO)


def within_tolerance(actual: Any, expected: Any) -> bool:
    return abs(to_decimal(actual) - to_decimal(expected)) <= TOLERANCE


def format_amount(value: Any) -> str:
    """Render 100.00 as "100" and 90.50 as "90.5" for messages."""
    normalized = quantize(value).normalize(context=MONEY_CONTEXT)
    return format(normalized, "f")
