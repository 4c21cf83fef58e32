import asyncio

import pytest

from billsplit.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from billsplit.models.settlement import PaymentStatus, SettlementAction
from billsplit.services.bill_service import BillService
from billsplit.services.ledger_service import LedgerService
from billsplit.services.settlement_service import SettlementService
from tests.helpers import ALICE, BOB, CAROL, DAVE, InMemoryBillRepository, make_request


async def create_dinner(repo):
    return await BillService(repo).create_bill(make_request(), ALICE)


@pytest.mark.asyncio
async def test_mark_paid_then_confirm(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    pending = await service.mark_paid(dinner.bill.id, BOB, BOB)
    edge = pending.edge_for(BOB)
    assert edge.status == PaymentStatus.PENDING_CONFIRMATION
    assert edge.marked_paid_at is not None
    assert pending.edge_for(CAROL).status == PaymentStatus.UNPAID

    confirmed = await service.confirm_payment(dinner.bill.id, BOB, ALICE)
    share = confirmed.share_for(BOB)
    assert confirmed.edge_for(BOB).is_paid
    assert share.settled
    assert share.settled_at == share.confirmed_at
    assert share.version == 3
    assert [e.action for e in share.history] == [SettlementAction.MARK_PAID, SettlementAction.CONFIRM_PAYMENT]


@pytest.mark.asyncio
async def test_mark_paid_keeps_payment_method_and_reference(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    view = await service.mark_paid(dinner.bill.id, BOB, BOB, payment_method="gcash", reference="GC-1029")

    payment = view.share_for(BOB).history[0].payment
    assert payment.method == "gcash"
    assert payment.reference == "GC-1029"
    assert payment.note is None


@pytest.mark.asyncio
async def test_mark_paid_without_details_is_manual(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    view = await service.mark_paid(dinner.bill.id, CAROL, CAROL)
    view = await service.confirm_payment(dinner.bill.id, CAROL, ALICE)

    history = view.share_for(CAROL).history
    assert history[0].payment.method == "manual"
    assert history[1].payment is None


@pytest.mark.asyncio
async def test_summary_after_settlement(repo):
    dinner = await create_dinner(repo)
    service = SettlementService(repo)
    ledger = LedgerService(repo)

    await service.mark_paid(dinner.bill.id, BOB, BOB)
    await service.confirm_payment(dinner.bill.id, BOB, ALICE)

    alice = await ledger.get_summary(ALICE)
    assert alice.total_owed == 40.0
    assert alice.total_settled == 40.0
    assert alice.total_owing == 0.0
    assert alice.balance == 40.0
    assert alice.bill_count == 1

    bob = await ledger.get_summary(BOB)
    assert bob.total_owing == 0.0
    assert bob.total_settled == 40.0

    carol = await ledger.get_summary(CAROL)
    assert carol.total_owing == 40.0
    assert carol.balance == -40.0


@pytest.mark.asyncio
async def test_cancel_and_undo(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    await service.mark_paid(dinner.bill.id, BOB, BOB)
    cancelled = await service.cancel_payment(dinner.bill.id, BOB, BOB)
    assert cancelled.share_for(BOB).payment_status == PaymentStatus.UNPAID
    assert cancelled.share_for(BOB).marked_paid_at is None

    await service.mark_paid(dinner.bill.id, BOB, BOB)
    confirmed = await service.confirm_payment(dinner.bill.id, BOB, ALICE)
    marked_at = confirmed.share_for(BOB).marked_paid_at

    undone = await service.undo_confirmation(dinner.bill.id, BOB, ALICE)
    share = undone.share_for(BOB)
    assert share.payment_status == PaymentStatus.PENDING_CONFIRMATION
    assert share.confirmed_at is None
    assert share.marked_paid_at == marked_at
    assert not share.settled


@pytest.mark.asyncio
async def test_confirm_unpaid_is_conflict(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    with pytest.raises(ConflictError):
        await service.confirm_payment(dinner.bill.id, BOB, ALICE)

    assert (await repo.get_share(dinner.bill.id, BOB)).version == 1


@pytest.mark.asyncio
async def test_wrong_role_is_forbidden(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    with pytest.raises(AuthorizationError):
        await service.mark_paid(dinner.bill.id, BOB, ALICE)

    await service.mark_paid(dinner.bill.id, BOB, BOB)
    with pytest.raises(AuthorizationError):
        await service.confirm_payment(dinner.bill.id, BOB, BOB)


@pytest.mark.asyncio
async def test_other_participant_cannot_act_on_edge(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    with pytest.raises(AuthorizationError):
        await service.mark_paid(dinner.bill.id, BOB, CAROL)
    with pytest.raises(AuthorizationError):
        await service.mark_paid(dinner.bill.id, BOB, DAVE)


@pytest.mark.asyncio
async def test_repeat_is_noop(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    await service.mark_paid(dinner.bill.id, BOB, BOB)
    await service.confirm_payment(dinner.bill.id, BOB, ALICE)
    before = await repo.get_share(dinner.bill.id, BOB)

    again = await service.confirm_payment(dinner.bill.id, BOB, ALICE)

    after = again.share_for(BOB)
    assert after.confirmed_at == before.confirmed_at
    assert after.version == before.version
    assert len(after.history) == 2


@pytest.mark.asyncio
async def test_missing_edge_is_not_found(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    # the payer has no outgoing edge on their own bill
    with pytest.raises(NotFoundError):
        await service.mark_paid(dinner.bill.id, ALICE, ALICE)
    with pytest.raises(NotFoundError):
        await service.mark_paid(dinner.bill.id, DAVE, DAVE)
    with pytest.raises(NotFoundError):
        await service.mark_paid("65f000000000000000000000", BOB, BOB)


class RacingRepository(InMemoryBillRepository):
    """Lets another writer update the share between read and write."""

    def __init__(self):
        super().__init__()
        self.interloper = None

    async def apply_transition(self, share, result):
        if self.interloper is not None:
            interloper, self.interloper = self.interloper, None
            await interloper()
        return await super().apply_transition(share, result)


@pytest.mark.asyncio
async def test_concurrent_write_is_conflict():
    repo = RacingRepository()
    service = SettlementService(repo)
    dinner = await create_dinner(repo)
    await service.mark_paid(dinner.bill.id, BOB, BOB)

    async def debtor_cancels():
        await service.cancel_payment(dinner.bill.id, BOB, BOB)

    repo.interloper = debtor_cancels

    with pytest.raises(ConflictError):
        await service.confirm_payment(dinner.bill.id, BOB, ALICE)

    share = await repo.get_share(dinner.bill.id, BOB)
    assert share.payment_status == PaymentStatus.UNPAID
    assert share.confirmed_at is None


@pytest.mark.asyncio
async def test_parallel_mark_paid_applies_once(repo):
    service = SettlementService(repo)
    dinner = await create_dinner(repo)

    results = await asyncio.gather(
        service.mark_paid(dinner.bill.id, BOB, BOB),
        service.mark_paid(dinner.bill.id, BOB, BOB),
        return_exceptions=True,
    )

    share = await repo.get_share(dinner.bill.id, BOB)
    assert share.payment_status == PaymentStatus.PENDING_CONFIRMATION
    assert len(share.history) == 1
    assert all(not isinstance(r, Exception) or isinstance(r, ConflictError) for r in results)
