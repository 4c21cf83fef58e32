from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from billsplit.models.base import MongoModel
from billsplit.models.settlement import PaymentStatus, SettlementEvent
from billsplit.utils.money import MAX_AMOUNT


class SplitMethod(str, Enum):
    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"
    ITEM_BASED = "item-based"


class BillCategory(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    OTHER = "other"


class Share(MongoModel):
    """
    One participant's portion of a bill.

    Stored in its own collection so settlement writes touch a single
    document. Amounts are fixed once written; only the settlement fields
    change, and every change bumps `version`.
    """
    bill_id: Optional[str] = None
    user_id: str
    amount: float = Field(ge=0, allow_inf_nan=False)
    percentage: Optional[float] = None

    payment_status: PaymentStatus = PaymentStatus.UNPAID
    marked_paid_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    history: List[SettlementEvent] = []
    version: int = 1

    @property
    def settled(self) -> bool:
        return self.payment_status == PaymentStatus.CONFIRMED

    @property
    def settled_at(self) -> Optional[datetime]:
        return self.confirmed_at if self.settled else None


class BillItem(BaseModel):
    """A line item for item-based splits; its price is shared by assignees."""
    name: str = ""
    price: float = Field(ge=0, le=float(MAX_AMOUNT), allow_inf_nan=False)
    assigned_to: List[str] = []


class Bill(MongoModel):
    title: str
    description: str = ""
    total_amount: float = Field(ge=0, allow_inf_nan=False)
    paid_by: str
    participants: List[str] = []
    split_method: SplitMethod = SplitMethod.EQUAL
    category: BillCategory = BillCategory.OTHER
    group_id: Optional[str] = None
    currency: str = "PHP"
    created_by: str

    def involves(self, user_id: str, shares: List[Share]) -> bool:
        return self.paid_by == user_id or any(s.user_id == user_id for s in shares)
