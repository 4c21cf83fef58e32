from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from billsplit.models.ledger import BillSummary, BillView, FriendBalance, OutstandingDebt
from billsplit.repositories.bill_repo import BillRepository
from billsplit.services.bill_service import BillService
from billsplit.utils.money import ZERO, quantize, to_decimal


class LedgerService:
    """
    Per-user aggregates over bills.

    Everything is recomputed from bills on demand. Sums are kept in Decimal
    so the result does not depend on the order bills arrive in.
    """

    def __init__(self, repo: BillRepository):
        self.bills = BillService(repo)

    @staticmethod
    def summarize(user_id: str, views: Sequence[BillView]) -> BillSummary:
        """
        - payer: others' unconfirmed shares are owed to the user,
          their confirmed shares count as settled
        - participant: the user's own unconfirmed share is owing,
          a confirmed one counts as settled
        """
        owed = owing = settled = ZERO
        bill_count = 0

        for view in views:
            bill = view.bill
            if not bill.involves(user_id, view.shares):
                continue
            bill_count += 1

            if bill.paid_by == user_id:
                for share in view.shares:
                    if share.user_id == user_id:
                        continue
                    if share.settled:
                        settled += to_decimal(share.amount)
                    else:
                        owed += to_decimal(share.amount)
            else:
                share = view.share_for(user_id)
                if share is None:
                    continue
                if share.settled:
                    settled += to_decimal(share.amount)
                else:
                    owing += to_decimal(share.amount)

        return BillSummary(
            total_owed=float(quantize(owed)),
            total_owing=float(quantize(owing)),
            total_settled=float(quantize(settled)),
            balance=float(quantize(owed - owing)),
            bill_count=bill_count,
        )

    @staticmethod
    def friend_balances(user_id: str, views: Sequence[BillView]) -> List[FriendBalance]:
        """Unsettled balance with every counterpart, largest first."""
        balances: Dict[str, Decimal] = {}
        counts: Dict[str, int] = {}
        last_activity: Dict[str, Optional[datetime]] = {}

        for view in views:
            bill = view.bill
            if not bill.involves(user_id, view.shares):
                continue

            counterparts = {s.user_id for s in view.shares} | {bill.paid_by}
            counterparts.discard(user_id)

            for friend_id in counterparts:
                balances.setdefault(friend_id, ZERO)
                counts[friend_id] = counts.get(friend_id, 0) + 1
                seen = last_activity.get(friend_id)
                if seen is None or bill.updated_at > seen:
                    last_activity[friend_id] = bill.updated_at

                if bill.paid_by == user_id:
                    share = view.share_for(friend_id)
                    if share and not share.settled:
                        balances[friend_id] += to_decimal(share.amount)
                elif bill.paid_by == friend_id:
                    share = view.share_for(user_id)
                    if share and not share.settled:
                        balances[friend_id] -= to_decimal(share.amount)

        result = [
            FriendBalance(
                friend_id=friend_id,
                balance=float(quantize(balance)),
                bill_count=counts[friend_id],
                last_activity_at=last_activity.get(friend_id),
            )
            for friend_id, balance in balances.items()
        ]
        result.sort(key=lambda fb: (-abs(fb.balance), fb.friend_id))
        return result

    @staticmethod
    def outstanding_between(creditor_id: str, debtor_id: str, views: Sequence[BillView]) -> OutstandingDebt:
        """Bills paid by creditor_id where debtor_id has not been confirmed yet."""
        bill_ids = []
        total = ZERO
        for view in views:
            if view.bill.paid_by != creditor_id or creditor_id == debtor_id:
                continue
            share = view.share_for(debtor_id)
            if share and share.amount > 0 and not share.settled:
                bill_ids.append(view.bill.id)
                total += to_decimal(share.amount)

        return OutstandingDebt(
            creditor_id=creditor_id,
            debtor_id=debtor_id,
            bill_ids=bill_ids,
            total=float(quantize(total)),
        )

    async def get_summary(self, user_id: str) -> BillSummary:
        return self.summarize(user_id, await self.bills.list_bills(user_id))

    async def get_friend_balances(self, user_id: str) -> List[FriendBalance]:
        return self.friend_balances(user_id, await self.bills.list_bills(user_id))

    async def get_outstanding(self, creditor_id: str, debtor_id: str) -> OutstandingDebt:
        return self.outstanding_between(creditor_id, debtor_id, await self.bills.list_bills(creditor_id))
