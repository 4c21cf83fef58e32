from typing import List, Optional, Sequence

from billsplit.models.bill import Share
from billsplit.models.settlement import PaymentEdge
from billsplit.utils.money import round_money


def build_payment_edges(
    paid_by: str,
    shares: Sequence[Share],
    bill_id: Optional[str] = None,
) -> List[PaymentEdge]:
    """
    Derive debtor -> payer edges for one bill.

    Every positive share not held by the payer becomes one edge carrying the
    share's settlement status. Edges are never netted across bills.
    """
    edges = []
    for share in shares:
        if share.user_id == paid_by or share.amount <= 0:
            continue
        edges.append(PaymentEdge(
            bill_id=bill_id,
            from_user_id=share.user_id,
            to_user_id=paid_by,
            amount=round_money(share.amount),
            status=share.payment_status,
            marked_paid_at=share.marked_paid_at,
            confirmed_at=share.confirmed_at,
        ))
    return edges
