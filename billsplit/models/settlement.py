"""
Settlement model - lifecycle of a debtor -> payer obligation.

A payment edge is never stored on its own. It is derived from a bill's
payer and one share; the share carries the edge's status and timestamps.

    unpaid --mark_paid--> pending_confirmation --confirm_payment--> confirmed
    unpaid <-cancel_payment-- pending_confirmation <-undo_confirmation-- confirmed
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"


class SettlementAction(str, Enum):
    MARK_PAID = "mark_paid"
    CANCEL_PAYMENT = "cancel_payment"
    CONFIRM_PAYMENT = "confirm_payment"
    UNDO_CONFIRMATION = "undo_confirmation"


class SettlementRole(str, Enum):
    DEBTOR = "debtor"
    CREDITOR = "creditor"


class PaymentDetails(BaseModel):
    """How the debtor says they paid. "manual" means outside the app."""
    method: str = "manual"
    reference: Optional[str] = None
    note: Optional[str] = None


class SettlementEvent(BaseModel):
    """One applied transition, appended to the share's history."""
    action: SettlementAction
    from_status: PaymentStatus
    to_status: PaymentStatus
    actor_id: str
    at: datetime
    payment: Optional[PaymentDetails] = None


class PaymentEdge(BaseModel):
    """from_user_id owes to_user_id amount for one bill."""
    bill_id: Optional[str] = None
    from_user_id: str
    to_user_id: str
    amount: float
    status: PaymentStatus = PaymentStatus.UNPAID
    marked_paid_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.CONFIRMED

    def role_of(self, user_id: str) -> Optional[SettlementRole]:
        if user_id == self.from_user_id:
            return SettlementRole.DEBTOR
        if user_id == self.to_user_id:
            return SettlementRole.CREDITOR
        return None
