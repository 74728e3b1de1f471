from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import DriverBudget
from ..schemas import DriverBudgetCreate, DriverBudgetRead, Message, Page
from ..services import budget as budget_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[DriverBudgetRead])
def list_budgets(
    driver_id: int | None = Query(None, alias="driverId"),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    stmt = select(DriverBudget).order_by(DriverBudget.date.desc(), DriverBudget.id.desc())
    if driver_id:
        stmt = stmt.where(DriverBudget.driver_id == driver_id)
    return paginate(db, stmt, page, limit)


@router.post("", response_model=DriverBudgetRead, status_code=201)
def allocate_budget(
    payload: DriverBudgetCreate, db: Session = Depends(get_db)
) -> DriverBudget:
    budget = budget_service.allocate(db, payload)
    db.commit()
    db.refresh(budget)
    return budget


@router.get("/latest/{driver_id}", response_model=DriverBudgetRead)
def latest_budget(driver_id: int, db: Session = Depends(get_db)) -> DriverBudget:
    return budget_service.latest_for_driver(db, driver_id)


@router.get("/{budget_id}", response_model=DriverBudgetRead)
def get_budget(budget_id: int, db: Session = Depends(get_db)) -> DriverBudget:
    return get_or_404(db, DriverBudget, budget_id)


@router.delete("/{budget_id}", response_model=Message)
def delete_budget(budget_id: int, db: Session = Depends(get_db)) -> dict:
    budget_service.delete_budget(db, get_or_404(db, DriverBudget, budget_id, lock=True))
    db.commit()
    return {"message": "Driver budget deleted"}
