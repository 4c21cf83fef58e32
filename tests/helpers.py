from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from bson import ObjectId
from pymongo.errors import PyMongoError

from billsplit.models.bill import Bill, Share
from billsplit.schemas.bill import CreateBillRequest
from billsplit.utils.settlement_machine import TransitionResult, apply_to_share

ALICE = "user-alice"
BOB = "user-bob"
CAROL = "user-carol"
DAVE = "user-dave"


class InMemoryBillRepository:
    """Dict-backed stand-in for BillRepository with the same conditional-write rules."""

    def __init__(self):
        self.bills: Dict[str, Bill] = {}
        self.shares: Dict[str, Share] = {}
        self.fail_share_insert = False

    async def insert_bill(self, bill: Bill) -> Bill:
        bill.id = str(ObjectId())
        self.bills[bill.id] = bill.model_copy(deep=True)
        return bill

    async def get_bill(self, bill_id: str) -> Optional[Bill]:
        bill = self.bills.get(bill_id)
        return bill.model_copy(deep=True) if bill else None

    async def update_bill(self, bill_id: str, updates: dict) -> Optional[Bill]:
        bill = self.bills.get(bill_id)
        if bill is None:
            return None
        updated = bill.model_copy(update={**updates, "updated_at": datetime.now(timezone.utc)})
        self.bills[bill_id] = updated
        return updated.model_copy(deep=True)

    async def delete_bill(self, bill_id: str) -> bool:
        await self.delete_shares(bill_id)
        return self.bills.pop(bill_id, None) is not None

    async def list_bills_for_user(self, user_id: str) -> List[Bill]:
        share_bill_ids = {s.bill_id for s in self.shares.values() if s.user_id == user_id}
        bills = [
            b for b in self.bills.values()
            if b.paid_by == user_id or b.id in share_bill_ids
        ]
        bills.sort(key=lambda b: b.created_at, reverse=True)
        return [b.model_copy(deep=True) for b in bills]

    async def list_bills_by_group(self, group_id: str) -> List[Bill]:
        bills = [b for b in self.bills.values() if b.group_id == group_id]
        bills.sort(key=lambda b: b.created_at, reverse=True)
        return [b.model_copy(deep=True) for b in bills]

    async def insert_shares(self, bill_id: str, shares: Sequence[Share]) -> List[Share]:
        if self.fail_share_insert:
            raise PyMongoError("insert_many failed")
        for share in shares:
            share.bill_id = bill_id
            share.id = str(ObjectId())
            self.shares[share.id] = share.model_copy(deep=True)
        return list(shares)

    async def delete_shares(self, bill_id: str) -> int:
        doomed = [sid for sid, s in self.shares.items() if s.bill_id == bill_id]
        for sid in doomed:
            del self.shares[sid]
        return len(doomed)

    async def get_shares(self, bill_id: str) -> List[Share]:
        return [s.model_copy(deep=True) for s in self.shares.values() if s.bill_id == bill_id]

    async def get_shares_for_bills(self, bill_ids: Sequence[str]) -> Dict[str, List[Share]]:
        return {bill_id: await self.get_shares(bill_id) for bill_id in bill_ids}

    async def get_share(self, bill_id: str, user_id: str) -> Optional[Share]:
        for share in self.shares.values():
            if share.bill_id == bill_id and share.user_id == user_id:
                return share.model_copy(deep=True)
        return None

    async def apply_transition(self, share: Share, result: TransitionResult) -> Optional[Share]:
        stored = self.shares.get(share.id)
        if stored is None:
            return None
        if stored.version != share.version or stored.payment_status != share.payment_status:
            return None
        updated = apply_to_share(stored, result)
        self.shares[share.id] = updated
        return updated.model_copy(deep=True)


def make_request(**overrides) -> CreateBillRequest:
    data = {
        "title": "Dinner",
        "total_amount": 120.0,
        "paid_by": ALICE,
        "participants": [ALICE, BOB, CAROL],
        "split_method": "equal",
    }
    data.update(overrides)
    return CreateBillRequest(**data)

