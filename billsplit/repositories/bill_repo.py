"""
BillRepository - bills and their shares.

Bills live in `bills`; each participant's share is its own document in
`bill_shares` so a settlement transition writes exactly one document.
Settlement writes are conditional on the share's version and status as
last read, which turns lost updates into detectable conflicts.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from billsplit.models.base import to_bson, to_object_id
from billsplit.models.bill import Bill, Share
from billsplit.utils.settlement_machine import TransitionResult


class BillRepository:
    """Repository for bills and bill shares."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.bills = db["bills"]
        self.shares = db["bill_shares"]

    # ===== BILLS =====

    async def insert_bill(self, bill: Bill) -> Bill:
        result = await self.bills.insert_one(bill.to_document())
        bill.id = str(result.inserted_id)
        return bill

    async def get_bill(self, bill_id: str) -> Optional[Bill]:
        oid = to_object_id(bill_id)
        if oid is None:
            return None
        doc = await self.bills.find_one({"_id": oid})
        if doc:
            return Bill(**doc)
        return None

    async def update_bill(self, bill_id: str, updates: dict) -> Optional[Bill]:
        oid = to_object_id(bill_id)
        if oid is None:
            return None
        updates = {**to_bson(updates), "updated_at": datetime.now(timezone.utc)}
        doc = await self.bills.find_one_and_update(
            {"_id": oid},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Bill(**doc)
        return None

    async def delete_bill(self, bill_id: str) -> bool:
        """Hard delete a bill and its shares."""
        oid = to_object_id(bill_id)
        if oid is None:
            return False
        await self.shares.delete_many({"bill_id": bill_id})
        result = await self.bills.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def list_bills_for_user(self, user_id: str) -> List[Bill]:
        """Bills the user paid for or holds a share in, newest first."""
        share_bill_ids = await self.shares.distinct("bill_id", {"user_id": user_id})
        oids = [oid for oid in (to_object_id(b) for b in share_bill_ids) if oid is not None]

        docs = await self.bills.find({
            "$or": [
                {"paid_by": user_id},
                {"_id": {"$in": oids}}
            ]
        }).sort("created_at", -1).to_list(None)
        return [Bill(**doc) for doc in docs]

    async def list_bills_by_group(self, group_id: str) -> List[Bill]:
        docs = await self.bills.find({"group_id": group_id}).sort("created_at", -1).to_list(None)
        return [Bill(**doc) for doc in docs]

    # ===== SHARES =====

    async def insert_shares(self, bill_id: str, shares: Sequence[Share]) -> List[Share]:
        if not shares:
            return []
        docs = []
        for share in shares:
            share.bill_id = bill_id
            docs.append(share.to_document())
        result = await self.shares.insert_many(docs)
        for share, oid in zip(shares, result.inserted_ids):
            share.id = str(oid)
        return list(shares)

    async def delete_shares(self, bill_id: str) -> int:
        result = await self.shares.delete_many({"bill_id": bill_id})
        return result.deleted_count

    async def get_shares(self, bill_id: str) -> List[Share]:
        docs = await self.shares.find({"bill_id": bill_id}).sort("_id", 1).to_list(None)
        return [Share(**doc) for doc in docs]

    async def get_shares_for_bills(self, bill_ids: Sequence[str]) -> Dict[str, List[Share]]:
        grouped: Dict[str, List[Share]] = {bill_id: [] for bill_id in bill_ids}
        if not bill_ids:
            return grouped
        docs = await self.shares.find(
            {"bill_id": {"$in": list(bill_ids)}}
        ).sort("_id", 1).to_list(None)
        for doc in docs:
            share = Share(**doc)
            grouped.setdefault(share.bill_id, []).append(share)
        return grouped

    async def get_share(self, bill_id: str, user_id: str) -> Optional[Share]:
        doc = await self.shares.find_one({"bill_id": bill_id, "user_id": user_id})
        if doc:
            return Share(**doc)
        return None

    async def apply_transition(self, share: Share, result: TransitionResult) -> Optional[Share]:
        """
        Write a settlement transition if the share is unchanged since it was read.

        Returns the updated share, or None when the version/status no longer
        match (another writer got there first) or the share is gone.
        """
        oid = to_object_id(share.id)
        if oid is None:
            return None

        doc = await self.shares.find_one_and_update(
            {
                "_id": oid,
                "version": share.version,
                "payment_status": share.payment_status.value,
            },
            {
                "$set": {**to_bson(result.updates), "updated_at": result.event.at},
                "$inc": {"version": 1},
                "$push": {"history": to_bson(result.event.model_dump())},
            },
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Share(**doc)
        return None
