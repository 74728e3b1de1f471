import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Bank, BankTransfer, Transaction, TransactionTypeEnum
from ..schemas import (
    BankCreate,
    BankRead,
    BankTransferCreate,
    BankTransferRead,
    BankUpdate,
    Message,
    Page,
    TransactionRead,
)
from ..services import ledger
from ..services.common import get_or_404, paginate

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/banks", response_model=Page[BankRead])
def list_banks(
    app_user_id: int | None = Query(None, alias="appUserId"),
    active_only: bool = Query(False, alias="activeOnly"),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    stmt = select(Bank).order_by(Bank.bank_name, Bank.id)
    if app_user_id:
        stmt = stmt.where(Bank.app_user_id == app_user_id)
    if active_only:
        stmt = stmt.where(Bank.is_active.is_(True))
    return paginate(db, stmt, page, limit)


@router.post("/banks", response_model=BankRead, status_code=201)
def create_bank(payload: BankCreate, db: Session = Depends(get_db)) -> Bank:
    bank = ledger.create_bank(db, payload)
    db.commit()
    db.refresh(bank)
    return bank


@router.get("/banks/{bank_id}", response_model=BankRead)
def get_bank(bank_id: int, db: Session = Depends(get_db)) -> Bank:
    return get_or_404(db, Bank, bank_id)


@router.put("/banks/{bank_id}", response_model=BankRead)
def update_bank(bank_id: int, payload: BankUpdate, db: Session = Depends(get_db)) -> Bank:
    bank = ledger.update_bank(db, get_or_404(db, Bank, bank_id), payload)
    db.commit()
    db.refresh(bank)
    return bank


@router.delete("/banks/{bank_id}", response_model=Message)
def delete_bank(bank_id: int, db: Session = Depends(get_db)) -> dict:
    ledger.deactivate_bank(db, get_or_404(db, Bank, bank_id))
    db.commit()
    logger.info("Bank %s deactivated", bank_id)
    return {"message": "Bank deactivated"}


@router.get("/bank-transfers", response_model=Page[BankTransferRead])
def list_transfers(
    bank_id: int | None = Query(None, alias="bankId"),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    stmt = select(BankTransfer).order_by(
        BankTransfer.transfer_date.desc(), BankTransfer.id.desc()
    )
    if bank_id:
        stmt = stmt.where(
            (BankTransfer.from_bank_id == bank_id) | (BankTransfer.to_bank_id == bank_id)
        )
    return paginate(db, stmt, page, limit)


@router.post("/bank-transfers", response_model=BankTransferRead, status_code=201)
def create_transfer(
    payload: BankTransferCreate, db: Session = Depends(get_db)
) -> BankTransfer:
    transfer = ledger.create_transfer(db, payload)
    db.commit()
    db.refresh(transfer)
    return transfer


@router.get("/transactions", response_model=Page[TransactionRead])
def list_transactions(
    bank_id: int | None = Query(None, alias="bankId"),
    type: TransactionTypeEnum | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    stmt = select(Transaction).order_by(Transaction.date.desc(), Transaction.id.desc())
    if bank_id:
        stmt = stmt.where(
            (Transaction.from_bank_id == bank_id) | (Transaction.to_bank_id == bank_id)
        )
    if type:
        stmt = stmt.where(Transaction.type == type)
    return paginate(db, stmt, page, limit)


@router.get("/transactions/{transaction_id}", response_model=TransactionRead)
def get_transaction(transaction_id: int, db: Session = Depends(get_db)) -> Transaction:
    return get_or_404(db, Transaction, transaction_id)
