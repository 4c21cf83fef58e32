"""Bill validation utilities."""
from collections import Counter
from typing import List, Sequence, Union

from billsplit.models.bill import Share, SplitMethod
from billsplit.schemas.bill import CreateBillRequest
from billsplit.schemas.split import SplitPreviewRequest
from billsplit.utils.money import MAX_AMOUNT, format_amount, is_valid_amount
from billsplit.utils.split_calculator import (
    ValidationResult,
    equal_split,
    item_based_split,
    percentage_split,
    validate_custom_split,
    validate_percentage_split,
)

SplitRequest = Union[CreateBillRequest, SplitPreviewRequest]


def resolve_shares(request: SplitRequest) -> List[Share]:
    """
    Build shares for a bill request from its split method.

    - equal: computed from participants, residual to the last one
    - custom: the supplied amounts (missing amounts count as zero)
    - percentage: amounts computed from the supplied percentages
    - item-based: amounts computed from the supplied items
    """
    method = request.split_method

    if method == SplitMethod.EQUAL:
        return equal_split(request.total_amount, request.participants)
    if method == SplitMethod.PERCENTAGE:
        return percentage_split(request.total_amount, request.splits)
    if method == SplitMethod.ITEM_BASED:
        return item_based_split(request.items, request.participants)

    return [
        Share(user_id=s.user_id, amount=s.amount or 0.0, percentage=s.percentage)
        for s in request.splits
    ]


def validate_shares(request: SplitRequest, shares: Sequence[Share]) -> ValidationResult:
    """
    Split-level rules.

    - percentage splits must total 100%
    - share amounts must add up to the bill total, within one cent
    """
    if request.split_method == SplitMethod.PERCENTAGE:
        result = validate_percentage_split(request.splits)
        if not result.is_valid:
            return result

    return validate_custom_split(shares, request.total_amount)


def _invalid(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=message)


def validate_total(total: float) -> ValidationResult:
    """Reject non-positive, non-finite and oversized totals."""
    if total <= 0:
        return _invalid("Total amount must be greater than 0")
    if not is_valid_amount(total):
        return _invalid(f"Total amount must be a finite number up to {format_amount(MAX_AMOUNT)}")
    return ValidationResult(is_valid=True, total=float(total))


def validate_bill_request(request: CreateBillRequest, shares: Sequence[Share]) -> ValidationResult:
    """
    Bill-level rules, checked before anything is written.

    - total must be a finite, positive amount no larger than MAX_AMOUNT
    - at least one participant, no duplicates, payer among them
    - exactly one share per participant, none for outsiders
    - split-level rules from validate_shares
    """
    total_check = validate_total(request.total_amount)
    if not total_check.is_valid:
        return total_check

    participants = request.participants
    if not participants:
        return _invalid("At least one participant is required")

    if len(set(participants)) != len(participants):
        return _invalid("Participants must be unique")

    if request.paid_by not in participants:
        return _invalid("The payer must be one of the participants")

    share_counts = Counter(s.user_id for s in shares)
    duplicated = sorted(uid for uid, count in share_counts.items() if count > 1)
    if duplicated:
        return _invalid(f"Each participant can only have one share: {', '.join(duplicated)}")

    missing = [uid for uid in participants if uid not in share_counts]
    if missing:
        return _invalid(f"Missing shares for participants: {', '.join(missing)}")

    strangers = [uid for uid in share_counts if uid not in set(participants)]
    if strangers:
        return _invalid(f"Shares given to non-participants: {', '.join(strangers)}")

    return validate_shares(request, shares)
