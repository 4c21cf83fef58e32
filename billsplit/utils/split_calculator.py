"""
Split calculators.

Pure functions that turn a bill total into per-participant shares. They do
no I/O and report bad input through ValidationResult instead of raising.

Rounding rules:
- equal_split rounds each share to the cent and gives the residual to the
  last participant, so the shares always add up to the total.
- percentage_split and item_based_split round each share independently and
  do NOT correct the residual. Their sums can miss the total by a cent; bill
  validation accepts differences up to one cent.
"""
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel

from billsplit.models.bill import Share
from billsplit.utils.money import (
    ZERO,
    format_amount,
    money_sum,
    quantize,
    to_decimal,
    within_tolerance,
)


class ValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None
    total: float = 0.0


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def equal_split(total: float, participant_ids: Sequence[str]) -> List[Share]:
    """
    Split total evenly; the last participant absorbs the rounding residual.

    100 over [A, B, C] gives [33.33, 33.33, 33.34]. An empty participant
    list yields no shares; callers treat that as invalid input.
    """
    if not participant_ids:
        return []

    total_dec = to_decimal(total)
    per_person = quantize(total_dec / len(participant_ids))
    amounts = [per_person] * len(participant_ids)

    residual = quantize(total_dec - per_person * len(participant_ids))
    if residual != ZERO:
        amounts[-1] = quantize(amounts[-1] + residual)

    return [
        Share(user_id=user_id, amount=float(amount))
        for user_id, amount in zip(participant_ids, amounts)
    ]


def validate_custom_split(shares: Sequence[Any], total: float) -> ValidationResult:
    """Check that share amounts add up to total, within one cent."""
    actual = quantize(money_sum(_field(s, "amount") for s in shares))
    expected = quantize(total)

    if not within_tolerance(actual, expected):
        return ValidationResult(
            is_valid=False,
            error=f"Total must equal {format_amount(expected)}. Current total: {format_amount(actual)}",
            total=float(actual),
        )

    return ValidationResult(is_valid=True, total=float(actual))


def validate_percentage_split(shares: Sequence[Any]) -> ValidationResult:
    """Check that percentages add up to 100, within 0.01."""
    actual = quantize(money_sum(_field(s, "percentage") for s in shares))

    if not within_tolerance(actual, 100):
        return ValidationResult(
            is_valid=False,
            error=f"Percentages must total 100%. Current total: {format_amount(actual)}%",
            total=float(actual),
        )

    return ValidationResult(is_valid=True, total=float(actual))


def percentage_split(total: float, shares: Sequence[Any]) -> List[Share]:
    """Compute each amount as total * percentage / 100, rounded to the cent."""
    total_dec = to_decimal(total)
    result = []
    for share in shares:
        percentage = to_decimal(_field(share, "percentage"))
        result.append(Share(
            user_id=_field(share, "user_id"),
            amount=float(quantize(total_dec * percentage / 100)),
            percentage=float(percentage),
        ))
    return result


def item_based_split(items: Sequence[Any], participant_ids: Sequence[str]) -> List[Share]:
    """
    Divide each item's price evenly among its assignees.

    Participants without items get a zero share; assignees that are not
    participants are ignored.
    """
    owed = {user_id: ZERO for user_id in participant_ids}

    for item in items:
        assigned = _field(item, "assigned_to") or []
        if not assigned:
            continue
        per_person = to_decimal(_field(item, "price")) / len(assigned)
        for user_id in assigned:
            if user_id in owed:
                owed[user_id] += per_person

    return [
        Share(user_id=user_id, amount=float(quantize(amount)))
        for user_id, amount in owed.items()
    ]
