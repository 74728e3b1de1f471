from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Expense, Income
from ..schemas import (
    EntryCreate,
    EntryPage,
    EntryRead,
    EntryUpdate,
    IncomePage,
    IncomeRead,
    Message,
)
from ..services import ledger
from ..services.common import get_or_404, paginate

router = APIRouter()


def _entry_page(
    db: Session,
    model,
    app_user_id: int | None,
    bank_id: int | None,
    start_date: date | None,
    end_date: date | None,
    page: int,
    limit: int | None,
) -> dict:
    stmt = ledger.entry_filters(model, app_user_id, bank_id, start_date, end_date)
    result = paginate(db, stmt, page, limit)
    result["total_amount"] = ledger.entry_total(db, stmt)
    return result


# --- income -----------------------------------------------------------------


@router.get("/income", response_model=IncomePage)
def list_income(
    app_user_id: int | None = Query(None, alias="appUserId"),
    bank_id: int | None = Query(None, alias="bankId"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return _entry_page(db, Income, app_user_id, bank_id, start_date, end_date, page, limit)


@router.post("/income", response_model=IncomeRead, status_code=201)
def create_income(payload: EntryCreate, db: Session = Depends(get_db)) -> Income:
    income = ledger.create_income(db, payload)
    db.commit()
    db.refresh(income)
    return income


@router.get("/income/{income_id}", response_model=IncomeRead)
def get_income(income_id: int, db: Session = Depends(get_db)) -> Income:
    return get_or_404(db, Income, income_id)


@router.put("/income/{income_id}", response_model=IncomeRead)
def update_income(
    income_id: int, payload: EntryUpdate, db: Session = Depends(get_db)
) -> Income:
    income = get_or_404(db, Income, income_id)
    ledger.ensure_income_editable(income)
    income = ledger.update_income(db, income, payload)
    db.commit()
    db.refresh(income)
    return income


@router.delete("/income/{income_id}", response_model=Message)
def delete_income(income_id: int, db: Session = Depends(get_db)) -> dict:
    income = get_or_404(db, Income, income_id)
    ledger.ensure_income_editable(income)
    ledger.delete_income(db, income)
    db.commit()
    return {"message": "Income deleted"}


# --- expenses ---------------------------------------------------------------


@router.get("/expenses", response_model=EntryPage)
def list_expenses(
    app_user_id: int | None = Query(None, alias="appUserId"),
    bank_id: int | None = Query(None, alias="bankId"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return _entry_page(db, Expense, app_user_id, bank_id, start_date, end_date, page, limit)


@router.post("/expenses", response_model=EntryRead, status_code=201)
def create_expense(payload: EntryCreate, db: Session = Depends(get_db)) -> Expense:
    expense = ledger.create_expense(db, payload)
    db.commit()
    db.refresh(expense)
    return expense


@router.get("/expenses/{expense_id}", response_model=EntryRead)
def get_expense(expense_id: int, db: Session = Depends(get_db)) -> Expense:
    return get_or_404(db, Expense, expense_id)


@router.put("/expenses/{expense_id}", response_model=EntryRead)
def update_expense(
    expense_id: int, payload: EntryUpdate, db: Session = Depends(get_db)
) -> Expense:
    expense = get_or_404(db, Expense, expense_id)
    ledger.ensure_expense_editable(db, expense)
    expense = ledger.update_expense(db, expense, payload)
    db.commit()
    db.refresh(expense)
    return expense


@router.delete("/expenses/{expense_id}", response_model=Message)
def delete_expense(expense_id: int, db: Session = Depends(get_db)) -> dict:
    expense = get_or_404(db, Expense, expense_id)
    ledger.ensure_expense_editable(db, expense)
    ledger.delete_expense(db, expense)
    db.commit()
    return {"message": "Expense deleted"}
