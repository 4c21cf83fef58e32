from typing import List
from fastapi import APIRouter, Depends
from billsplit.api.v1.deps import get_ledger_service
from billsplit.core.auth import get_current_user_id
from billsplit.schemas.ledger import BillSummaryResponse, FriendBalanceResponse, OutstandingDebtResponse
from billsplit.services.ledger_service import LedgerService

router = APIRouter()

@router.get("/summary", response_model=BillSummaryResponse)
async def get_my_summary(
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """Owed, owing, settled and net balance for the current user"""
    summary = await service.get_summary(user_id)
    return BillSummaryResponse(user_id=user_id, **summary.model_dump())

@router.get("/friends", response_model=List[FriendBalanceResponse])
async def get_friend_balances(
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """Unsettled balance with each person the current user shares bills with"""
    balances = await service.get_friend_balances(user_id)
    return [FriendBalanceResponse(**fb.model_dump()) for fb in balances]

@router.get("/outstanding/{debtor_id}", response_model=OutstandingDebtResponse)
async def get_outstanding(
    debtor_id: str,
    user_id: str = Depends(get_current_user_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """Unsettled bills the current user paid where debtor_id still owes"""
    debt = await service.get_outstanding(user_id, debtor_id)
    return OutstandingDebtResponse(**debt.model_dump(), can_remind=debt.can_remind)
