from fastapi import APIRouter
from billsplit.api.v1.endpoints import bills, settlements, ledger, splits, groups

api_router = APIRouter()

api_router.include_router(bills.router, prefix="/bills", tags=["bills"])
api_router.include_router(settlements.router, prefix="/bills", tags=["settlements"])
api_router.include_router(ledger.router, prefix="/ledger", tags=["ledger"])
api_router.include_router(splits.router, prefix="/splits", tags=["splits"])
api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
