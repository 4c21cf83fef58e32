import logging
from typing import List, Union

from pymongo.errors import PyMongoError

from billsplit.core.config import settings
from billsplit.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from billsplit.models.bill import Bill, BillCategory, Share
from billsplit.models.ledger import BillView
from billsplit.models.settlement import PaymentStatus
from billsplit.repositories.bill_repo import BillRepository
from billsplit.schemas.bill import CreateBillRequest
from billsplit.utils.bill_validation import resolve_shares, validate_bill_request
from billsplit.utils.payment_graph import build_payment_edges

logger = logging.getLogger(__name__)


def _editable_fields(source: Union[CreateBillRequest, Bill]) -> dict:
    return {
        "title": source.title,
        "description": source.description or "",
        "total_amount": source.total_amount,
        "paid_by": source.paid_by,
        "participants": list(source.participants),
        "split_method": source.split_method,
        "category": source.category or BillCategory.OTHER,
        "group_id": source.group_id,
    }


def build_view(bill: Bill, shares: List[Share]) -> BillView:
    return BillView(
        bill=bill,
        shares=shares,
        payments=build_payment_edges(bill.paid_by, shares, bill_id=bill.id),
    )


class BillService:
    """Bill lifecycle: create, read, edit, delete."""

    def __init__(self, repo: BillRepository):
        self.repo = repo

    def _prepare_shares(self, request: CreateBillRequest) -> List[Share]:
        shares = resolve_shares(request)
        result = validate_bill_request(request, shares)
        if not result.is_valid:
            raise ValidationError(result.error)
        return shares

    async def create_bill(self, request: CreateBillRequest, created_by: str) -> BillView:
        """
        Create a bill and its shares.

        Shares are written after the bill; if that fails the bill is deleted
        again and the original error propagates, so no bill is left without
        its shares.
        """
        shares = self._prepare_shares(request)

        bill = Bill(
            title=request.title,
            description=request.description or "",
            total_amount=request.total_amount,
            paid_by=request.paid_by,
            participants=list(request.participants),
            split_method=request.split_method,
            category=request.category or BillCategory.OTHER,
            group_id=request.group_id,
            currency=settings.CURRENCY,
            created_by=created_by,
        )
        bill = await self.repo.insert_bill(bill)

        try:
            shares = await self.repo.insert_shares(bill.id, shares)
        except PyMongoError:
            logger.exception("Share creation failed for bill %s, removing bill", bill.id)
            await self.repo.delete_bill(bill.id)
            raise

        logger.info("Created bill %s (%s, %d shares)", bill.id, bill.split_method.value, len(shares))
        return build_view(bill, shares)

    async def get_bill(self, bill_id: str) -> BillView:
        bill = await self.repo.get_bill(bill_id)
        if bill is None:
            raise NotFoundError("Bill not found")
        shares = await self.repo.get_shares(bill.id)
        return build_view(bill, shares)

    async def _views(self, bills: List[Bill]) -> List[BillView]:
        grouped = await self.repo.get_shares_for_bills([b.id for b in bills])
        return [build_view(bill, grouped.get(bill.id, [])) for bill in bills]

    async def list_bills(self, user_id: str) -> List[BillView]:
        """Bills the user paid for or holds a share in."""
        bills = await self.repo.list_bills_for_user(user_id)
        return await self._views(bills)

    async def list_group_bills(self, group_id: str) -> List[BillView]:
        bills = await self.repo.list_bills_by_group(group_id)
        return await self._views(bills)

    async def list_unsettled_for_member(self, group_id: str, user_id: str) -> List[BillView]:
        """Group bills where the user still holds an unconfirmed share."""
        views = await self.list_group_bills(group_id)
        unsettled = []
        for view in views:
            share = view.share_for(user_id)
            if share and share.amount > 0 and share.payment_status != PaymentStatus.CONFIRMED:
                unsettled.append(view)
        return unsettled

    async def _get_owned(self, bill_id: str, user_id: str) -> Bill:
        bill = await self.repo.get_bill(bill_id)
        if bill is None:
            raise NotFoundError("Bill not found")
        if bill.created_by != user_id:
            raise AuthorizationError("Only the creator can modify this bill")
        return bill

    async def update_bill(self, bill_id: str, request: CreateBillRequest, user_id: str) -> BillView:
        """
        Edit a bill. All shares are replaced and their settlement resets to
        unpaid.

        Shares are replaced first and the bill fields written last. If any of
        those writes fails, the previous shares and bill fields are written
        back and the original error propagates, so the bill always matches
        its shares.
        """
        existing = await self._get_owned(bill_id, user_id)
        shares = self._prepare_shares(request)
        previous = await self.repo.get_shares(bill_id)

        try:
            await self.repo.delete_shares(bill_id)
            shares = await self.repo.insert_shares(bill_id, shares)
            bill = await self.repo.update_bill(bill_id, _editable_fields(request))
        except PyMongoError:
            logger.exception("Update failed for bill %s, restoring previous version", bill_id)
            await self.repo.delete_shares(bill_id)
            await self.repo.insert_shares(bill_id, previous)
            await self.repo.update_bill(bill_id, _editable_fields(existing))
            raise

        if bill is None:
            raise NotFoundError("Bill not found")

        logger.info("Updated bill %s (%d shares)", bill_id, len(shares))
        return build_view(bill, shares)

    async def delete_bill(self, bill_id: str, user_id: str) -> None:
        await self._get_owned(bill_id, user_id)
        await self.repo.delete_bill(bill_id)
        logger.info("Deleted bill %s", bill_id)
