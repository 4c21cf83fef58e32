import logging
from typing import Optional

from billsplit.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from billsplit.models.ledger import BillView
from billsplit.models.settlement import PaymentDetails, SettlementAction
from billsplit.repositories.bill_repo import BillRepository
from billsplit.services.bill_service import BillService
from billsplit.utils.settlement_machine import TransitionError, apply_transition

logger = logging.getLogger(__name__)


class SettlementService:
    """
    Drives payment edges through the settlement state machine.

    Each call reads the bill, checks the transition against the current
    share, writes it conditionally and returns the bill as re-read after
    the write.
    """

    def __init__(self, repo: BillRepository):
        self.repo = repo
        self.bills = BillService(repo)

    async def transition(
        self,
        bill_id: str,
        debtor_id: str,
        actor_id: str,
        action: SettlementAction,
        payment: Optional[PaymentDetails] = None,
    ) -> BillView:
        view = await self.bills.get_bill(bill_id)

        edge = view.edge_for(debtor_id)
        share = view.share_for(debtor_id)
        if edge is None or share is None:
            raise NotFoundError("Payment not found")

        result = apply_transition(edge, action, actor_id, payment=payment)

        if not result.ok:
            logger.warning(
                "Rejected %s on bill %s for debtor %s by %s: %s",
                action.value, bill_id, debtor_id, actor_id, result.message
            )
            if result.error == TransitionError.INVALID_STATE:
                raise ConflictError(result.message)
            raise AuthorizationError(result.message)

        if not result.changed:
            return view

        updated = await self.repo.apply_transition(share, result)
        if updated is None:
            logger.warning(
                "Concurrent modification of bill %s debtor %s during %s",
                bill_id, debtor_id, action.value
            )
            raise ConflictError("Payment was modified by someone else. Reload and try again.")

        logger.info(
            "Bill %s debtor %s: %s -> %s (%s by %s)",
            bill_id, debtor_id, result.from_status.value, result.to_status.value,
            action.value, actor_id
        )
        return await self.bills.get_bill(bill_id)

    async def mark_paid(
        self,
        bill_id: str,
        debtor_id: str,
        actor_id: str,
        payment_method: str = "manual",
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> BillView:
        """Debtor reports payment; method and reference are kept on the history event."""
        payment = PaymentDetails(method=payment_method, reference=reference, note=note)
        return await self.transition(bill_id, debtor_id, actor_id, SettlementAction.MARK_PAID, payment)

    async def cancel_payment(self, bill_id: str, debtor_id: str, actor_id: str) -> BillView:
        return await self.transition(bill_id, debtor_id, actor_id, SettlementAction.CANCEL_PAYMENT)

    async def confirm_payment(self, bill_id: str, debtor_id: str, actor_id: str) -> BillView:
        return await self.transition(bill_id, debtor_id, actor_id, SettlementAction.CONFIRM_PAYMENT)

    async def undo_confirmation(self, bill_id: str, debtor_id: str, actor_id: str) -> BillView:
        return await self.transition(bill_id, debtor_id, actor_id, SettlementAction.UNDO_CONFIRMATION)
