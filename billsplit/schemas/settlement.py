from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from billsplit.models.settlement import PaymentEdge

class MarkPaidRequest(BaseModel):
    """Optional body for mark-paid. Without it the payment is recorded as manual."""
    payment_method: str = Field(default="manual", min_length=1, max_length=50)
    reference: Optional[str] = Field(default=None, max_length=200)
    note: Optional[str] = Field(default=None, max_length=500)

class PaymentDetailsResponse(BaseModel):
    method: str
    reference: Optional[str] = None
    note: Optional[str] = None

class SettlementEventResponse(BaseModel):
    action: str
    from_status: str
    to_status: str
    actor_id: str
    at: datetime
    payment: Optional[PaymentDetailsResponse] = None

class PaymentEdgeResponse(BaseModel):
    bill_id: Optional[str] = None
    from_user_id: str
    to_user_id: str
    amount: float
    payment_status: str
    is_paid: bool
    marked_paid_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None

    @classmethod
    def from_edge(cls, edge: PaymentEdge) -> "PaymentEdgeResponse":
        return cls(
            bill_id=edge.bill_id,
            from_user_id=edge.from_user_id,
            to_user_id=edge.to_user_id,
            amount=edge.amount,
            payment_status=edge.status.value,
            is_paid=edge.is_paid,
            marked_paid_at=edge.marked_paid_at,
            confirmed_at=edge.confirmed_at,
        )
