from typing import List, Optional
from pydantic import BaseModel, Field
from billsplit.models.bill import BillItem, SplitMethod
from billsplit.schemas.bill import ShareInput
from billsplit.utils.money import MAX_AMOUNT

class SplitPreviewRequest(BaseModel):
    """Run a split calculator without creating a bill."""
    total_amount: float = Field(..., ge=0, le=float(MAX_AMOUNT), allow_inf_nan=False)
    split_method: SplitMethod = SplitMethod.EQUAL
    participants: List[str] = []
    splits: List[ShareInput] = []
    items: List[BillItem] = []

class SplitShare(BaseModel):
    user_id: str
    amount: float
    percentage: Optional[float] = None

class SplitPreviewResponse(BaseModel):
    split_method: SplitMethod
    shares: List[SplitShare]
    is_valid: bool
    error: Optional[str] = None
    total: float
