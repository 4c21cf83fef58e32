from typing import Optional
from fastapi import APIRouter, Depends
from billsplit.api.v1.deps import get_settlement_service
from billsplit.core.auth import get_current_user_id
from billsplit.schemas.bill import BillResponse
from billsplit.schemas.settlement import MarkPaidRequest
from billsplit.services.settlement_service import SettlementService

router = APIRouter()

@router.post("/{bill_id}/payments/{debtor_id}/mark-paid", response_model=BillResponse)
async def mark_paid(
    bill_id: str,
    debtor_id: str,
    payment_in: Optional[MarkPaidRequest] = None,
    user_id: str = Depends(get_current_user_id),
    service: SettlementService = Depends(get_settlement_service)
):
    """Debtor reports the payment as made, optionally saying how"""
    payment_in = payment_in or MarkPaidRequest()
    view = await service.mark_paid(
        bill_id, debtor_id, user_id,
        payment_method=payment_in.payment_method,
        reference=payment_in.reference,
        note=payment_in.note,
    )
    return BillResponse.from_view(view)

@router.post("/{bill_id}/payments/{debtor_id}/cancel", response_model=BillResponse)
async def cancel_payment(
    bill_id: str,
    debtor_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SettlementService = Depends(get_settlement_service)
):
    """Debtor retracts a pending payment"""
    view = await service.cancel_payment(bill_id, debtor_id, user_id)
    return BillResponse.from_view(view)

@router.post("/{bill_id}/payments/{debtor_id}/confirm", response_model=BillResponse)
async def confirm_payment(
    bill_id: str,
    debtor_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SettlementService = Depends(get_settlement_service)
):
    """Payer confirms the money arrived"""
    view = await service.confirm_payment(bill_id, debtor_id, user_id)
    return BillResponse.from_view(view)

@router.post("/{bill_id}/payments/{debtor_id}/undo-confirm", response_model=BillResponse)
async def undo_confirmation(
    bill_id: str,
    debtor_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SettlementService = Depends(get_settlement_service)
):
    """Payer takes back a confirmation"""
    view = await service.undo_confirmation(bill_id, debtor_id, user_id)
    return BillResponse.from_view(view)
