from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from billsplit.db.mongo import get_db
from billsplit.repositories.bill_repo import BillRepository
from billsplit.services.bill_service import BillService
from billsplit.services.ledger_service import LedgerService
from billsplit.services.settlement_service import SettlementService


def get_bill_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> BillRepository:
    return BillRepository(db)


def get_bill_service(repo: BillRepository = Depends(get_bill_repository)) -> BillService:
    return BillService(repo)


def get_settlement_service(repo: BillRepository = Depends(get_bill_repository)) -> SettlementService:
    return SettlementService(repo)


def get_ledger_service(repo: BillRepository = Depends(get_bill_repository)) -> LedgerService:
    return LedgerService(repo)
