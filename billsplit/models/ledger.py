"""
Ledger read models - derived on demand, never persisted.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from billsplit.models.bill import Bill, Share
from billsplit.models.settlement import PaymentEdge


class BillView(BaseModel):
    """A bill with its shares and the payment edges derived from them."""
    bill: Bill
    shares: List[Share] = []
    payments: List[PaymentEdge] = []

    def share_for(self, user_id: str) -> Optional[Share]:
        return next((s for s in self.shares if s.user_id == user_id), None)

    def edge_for(self, debtor_id: str) -> Optional[PaymentEdge]:
        return next((p for p in self.payments if p.from_user_id == debtor_id), None)


class BillSummary(BaseModel):
    total_owed: float = 0.0
    total_owing: float = 0.0
    total_settled: float = 0.0
    balance: float = 0.0
    bill_count: int = 0


class FriendBalance(BaseModel):
    """Positive balance: the friend owes the user. Negative: the user owes the friend."""
    friend_id: str
    balance: float = 0.0
    bill_count: int = 0
    last_activity_at: Optional[datetime] = None


class OutstandingDebt(BaseModel):
    creditor_id: str
    debtor_id: str
    bill_ids: List[str] = []
    total: float = 0.0

    @property
    def can_remind(self) -> bool:
        return bool(self.bill_ids) and self.total > 0
