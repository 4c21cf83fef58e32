"""
Settlement state machine for a single payment edge.

    action             from                   to                     who
    mark_paid          unpaid                 pending_confirmation   debtor
    cancel_payment     pending_confirmation   unpaid                 debtor
    confirm_payment    pending_confirmation   confirmed              creditor
    undo_confirmation  confirmed              pending_confirmation   creditor

Requests are checked in this order: the actor must be on the edge, must
hold the action's role, and then the edge must be in the action's source
state. An edge already in the action's target state is a successful no-op
and keeps its timestamps. Nothing here raises for business conditions.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

from pydantic import BaseModel

from billsplit.models.bill import Share
from billsplit.models.settlement import (
    PaymentDetails,
    PaymentEdge,
    PaymentStatus,
    SettlementAction,
    SettlementEvent,
    SettlementRole,
)


class TransitionRule(NamedTuple):
    source: PaymentStatus
    target: PaymentStatus
    role: SettlementRole


TRANSITIONS: Dict[SettlementAction, TransitionRule] = {
    SettlementAction.MARK_PAID: TransitionRule(
        PaymentStatus.UNPAID, PaymentStatus.PENDING_CONFIRMATION, SettlementRole.DEBTOR
    ),
    SettlementAction.CANCEL_PAYMENT: TransitionRule(
        PaymentStatus.PENDING_CONFIRMATION, PaymentStatus.UNPAID, SettlementRole.DEBTOR
    ),
    SettlementAction.CONFIRM_PAYMENT: TransitionRule(
        PaymentStatus.PENDING_CONFIRMATION, PaymentStatus.CONFIRMED, SettlementRole.CREDITOR
    ),
    SettlementAction.UNDO_CONFIRMATION: TransitionRule(
        PaymentStatus.CONFIRMED, PaymentStatus.PENDING_CONFIRMATION, SettlementRole.CREDITOR
    ),
}


class TransitionError(str, Enum):
    NOT_PARTICIPANT = "not_participant"
    WRONG_ROLE = "wrong_role"
    INVALID_STATE = "invalid_state"


class TransitionResult(BaseModel):
    ok: bool
    changed: bool = False
    error: Optional[TransitionError] = None
    message: Optional[str] = None
    from_status: PaymentStatus
    to_status: PaymentStatus
    updates: Dict[str, Any] = {}
    event: Optional[SettlementEvent] = None


def _updates_for(action: SettlementAction, target: PaymentStatus, now: datetime) -> Dict[str, Any]:
    updates: Dict[str, Any] = {"payment_status": target}
    if action == SettlementAction.MARK_PAID:
        updates["marked_paid_at"] = now
        updates["confirmed_at"] = None
    elif action == SettlementAction.CANCEL_PAYMENT:
        updates["marked_paid_at"] = None
        updates["confirmed_at"] = None
    elif action == SettlementAction.CONFIRM_PAYMENT:
        updates["confirmed_at"] = now
    elif action == SettlementAction.UNDO_CONFIRMATION:
        # the debtor's claim of payment stands, so marked_paid_at is kept
        updates["confirmed_at"] = None
    return updates


def apply_transition(
    edge: PaymentEdge,
    action: SettlementAction,
    actor_id: str,
    now: Optional[datetime] = None,
    payment: Optional[PaymentDetails] = None,
) -> TransitionResult:
    """
    Check action against edge and describe the resulting write.

    payment is recorded on the event of a mark_paid and ignored otherwise.
    """
    rule = TRANSITIONS[action]
    current = edge.status

    role = edge.role_of(actor_id)
    if role is None:
        return TransitionResult(
            ok=False,
            error=TransitionError.NOT_PARTICIPANT,
            message="Only the debtor or the payer of this payment can change it",
            from_status=current,
            to_status=current,
        )

    if role != rule.role:
        return TransitionResult(
            ok=False,
            error=TransitionError.WRONG_ROLE,
            message=f"Only the {rule.role.value} can {action.value.replace('_', ' ')}",
            from_status=current,
            to_status=current,
        )

    if current == rule.target:
        return TransitionResult(ok=True, changed=False, from_status=current, to_status=current)

    if current != rule.source:
        return TransitionResult(
            ok=False,
            error=TransitionError.INVALID_STATE,
            message=f"Cannot {action.value.replace('_', ' ')} a payment that is {current.value}",
            from_status=current,
            to_status=current,
        )

    now = now or datetime.now(timezone.utc)
    return TransitionResult(
        ok=True,
        changed=True,
        from_status=current,
        to_status=rule.target,
        updates=_updates_for(action, rule.target, now),
        event=SettlementEvent(
            action=action,
            from_status=current,
            to_status=rule.target,
            actor_id=actor_id,
            at=now,
            payment=(payment or PaymentDetails()) if action == SettlementAction.MARK_PAID else None,
        ),
    )


def apply_to_share(share: Share, result: TransitionResult) -> Share:
    """Return a copy of share with a successful transition applied."""
    if not result.changed:
        return share
    return share.model_copy(update={
        **result.updates,
        "history": [*share.history, result.event],
        "version": share.version + 1,
        "updated_at": result.event.at,
    })
