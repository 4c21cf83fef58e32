from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime
from billsplit.models.bill import BillCategory, BillItem, SplitMethod
from billsplit.models.ledger import BillView
from billsplit.schemas.settlement import PaymentEdgeResponse, SettlementEventResponse
from billsplit.utils.money import MAX_AMOUNT

class ShareInput(BaseModel):
    user_id: str
    amount: Optional[float] = Field(default=None, ge=0, le=float(MAX_AMOUNT), allow_inf_nan=False)
    percentage: Optional[float] = Field(default=None, ge=0, le=100, allow_inf_nan=False)

class CreateBillRequest(BaseModel):
    """
    Create or replace a bill.

    `splits` carries amounts for custom splits and percentages for
    percentage splits; `items` drives item-based splits. Equal splits are
    computed from `participants`.
    """
    title: str = Field(..., min_length=1, max_length=200)
    total_amount: float = Field(..., le=float(MAX_AMOUNT), allow_inf_nan=False)
    paid_by: str
    participants: List[str]
    split_method: SplitMethod = SplitMethod.EQUAL
    splits: List[ShareInput] = []
    items: List[BillItem] = []
    description: Optional[str] = None
    category: Optional[BillCategory] = None
    group_id: Optional[str] = None

class ShareResponse(BaseModel):
    user_id: str
    amount: float
    percentage: Optional[float] = None
    payment_status: str
    settled: bool
    settled_at: Optional[datetime] = None
    marked_paid_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    history: List[SettlementEventResponse] = []

class BillResponse(BaseModel):
    id: str
    title: str
    description: str
    total_amount: float
    paid_by: str
    participants: List[str]
    split_method: SplitMethod
    category: BillCategory
    group_id: Optional[str] = None
    currency: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    splits: List[ShareResponse]
    payments: List[PaymentEdgeResponse]

    @classmethod
    def from_view(cls, view: BillView) -> "BillResponse":
        bill = view.bill
        return cls(
            id=bill.id,
            title=bill.title,
            description=bill.description,
            total_amount=bill.total_amount,
            paid_by=bill.paid_by,
            participants=bill.participants,
            split_method=bill.split_method,
            category=bill.category,
            group_id=bill.group_id,
            currency=bill.currency,
            created_by=bill.created_by,
            created_at=bill.created_at,
            updated_at=bill.updated_at,
            splits=[
                ShareResponse(
                    user_id=s.user_id,
                    amount=s.amount,
                    percentage=s.percentage,
                    payment_status=s.payment_status.value,
                    settled=s.settled,
                    settled_at=s.settled_at,
                    marked_paid_at=s.marked_paid_at,
                    confirmed_at=s.confirmed_at,
                    history=[SettlementEventResponse.model_validate(e.model_dump(mode="json")) for e in s.history],
                )
                for s in view.shares
            ],
            payments=[PaymentEdgeResponse.from_edge(p) for p in view.payments],
        )
