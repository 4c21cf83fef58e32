from typing import List
from fastapi import APIRouter, Depends
from billsplit.api.v1.deps import get_bill_service
from billsplit.core.auth import get_current_user_id
from billsplit.schemas.bill import BillResponse
from billsplit.services.bill_service import BillService

router = APIRouter()

@router.get("/{group_id}/bills", response_model=List[BillResponse])
async def list_group_bills(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """List bills of a group"""
    views = await service.list_group_bills(group_id)
    return [BillResponse.from_view(v) for v in views]

@router.get("/{group_id}/members/{member_id}/unsettled-bills", response_model=List[BillResponse])
async def list_unsettled_member_bills(
    group_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """Group bills where member_id still has an unconfirmed share"""
    views = await service.list_unsettled_for_member(group_id, member_id)
    return [BillResponse.from_view(v) for v in views]
