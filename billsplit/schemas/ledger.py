from typing import List, Optional
from pydantic import BaseModel
from datetime import datetime

class BillSummaryResponse(BaseModel):
    user_id: str
    total_owed: float
    total_owing: float
    total_settled: float
    balance: float
    bill_count: int

class FriendBalanceResponse(BaseModel):
    friend_id: str
    balance: float
    bill_count: int
    last_activity_at: Optional[datetime] = None

class OutstandingDebtResponse(BaseModel):
    creditor_id: str
    debtor_id: str
    bill_ids: List[str]
    total: float
    can_remind: bool
