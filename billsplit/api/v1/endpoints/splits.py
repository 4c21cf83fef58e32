from fastapi import APIRouter, Depends
from billsplit.core.auth import get_current_user_id
from billsplit.schemas.split import SplitPreviewRequest, SplitPreviewResponse, SplitShare
from billsplit.utils.bill_validation import resolve_shares, validate_shares

router = APIRouter()

@router.post("/preview", response_model=SplitPreviewResponse)
async def preview_split(
    preview_in: SplitPreviewRequest,
    user_id: str = Depends(get_current_user_id)
):
    """Compute shares for a split method without saving anything"""
    shares = resolve_shares(preview_in)
    result = validate_shares(preview_in, shares)
    return SplitPreviewResponse(
        split_method=preview_in.split_method,
        shares=[SplitShare(user_id=s.user_id, amount=s.amount, percentage=s.percentage) for s in shares],
        is_valid=result.is_valid,
        error=result.error,
        total=result.total,
    )
