from typing import List
from fastapi import APIRouter, Depends, status
from billsplit.api.v1.deps import get_bill_service
from billsplit.core.auth import get_current_user_id
from billsplit.schemas.bill import BillResponse, CreateBillRequest
from billsplit.schemas.settlement import PaymentEdgeResponse
from billsplit.services.bill_service import BillService

router = APIRouter()

@router.get("/", response_model=List[BillResponse])
async def list_bills(
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """List bills the current user paid for or shares in"""
    views = await service.list_bills(user_id)
    return [BillResponse.from_view(v) for v in views]

@router.post("/", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill_in: CreateBillRequest,
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """Create a bill and its shares"""
    view = await service.create_bill(bill_in, user_id)
    return BillResponse.from_view(view)

@router.get("/{bill_id}", response_model=BillResponse)
async def get_bill(
    bill_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """Get a bill by ID"""
    view = await service.get_bill(bill_id)
    return BillResponse.from_view(view)

@router.put("/{bill_id}", response_model=BillResponse)
async def update_bill(
    bill_id: str,
    bill_in: CreateBillRequest,
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """Edit a bill; all shares are replaced"""
    view = await service.update_bill(bill_id, bill_in, user_id)
    return BillResponse.from_view(view)

@router.delete("/{bill_id}")
async def delete_bill(
    bill_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """Delete a bill"""
    await service.delete_bill(bill_id, user_id)
    return {"message": "Bill deleted successfully"}

@router.get("/{bill_id}/payments", response_model=List[PaymentEdgeResponse])
async def get_bill_payments(
    bill_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BillService = Depends(get_bill_service)
):
    """Who owes whom on this bill"""
    view = await service.get_bill(bill_id)
    return [PaymentEdgeResponse.from_edge(p) for p in view.payments]
