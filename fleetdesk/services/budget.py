from decimal import Decimal
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models import (
    AppUser,
    Driver,
    DriverBudget,
    Expense,
    RelatedEntityTypeEnum,
    TransactionTypeEnum,
    Trip,
)
from ..schemas import DriverBudgetCreate
from . import ledger
from .common import ZERO, _money, get_or_404

logger = logging.getLogger(__name__)

BUDGET_CATEGORY = "Driver Budget"


def chain_head(db: Session, driver_id: int, *, lock: bool = False) -> DriverBudget | None:
    stmt = (
        select(DriverBudget)
        .where(DriverBudget.driver_id == driver_id)
        .order_by(DriverBudget.id.desc())
        .limit(1)
    )
    if lock:
        stmt = stmt.with_for_update()
    return db.scalars(stmt).first()


def latest_for_driver(db: Session, driver_id: int) -> DriverBudget:
    budget = chain_head(db, driver_id)
    if budget is None:
        raise NotFoundError("DriverBudget", driver_id)
    return budget


def allocate(db: Session, payload: DriverBudgetCreate) -> DriverBudget:
    amount = _money(payload.daily_budget_amount)
    get_or_404(db, AppUser, payload.app_user_id)
    driver = get_or_404(db, Driver, payload.driver_id)
    bank = ledger.lock_bank(db, payload.bank_id)
    # Only the new portion leaves the bank; the carry-forward was paid earlier.
    ledger.ensure_funds(bank, amount)

    previous = chain_head(db, driver.id, lock=True)
    carry_forward = _money(previous.remaining_budget_amount) if previous else ZERO
    budget = DriverBudget(
        app_user_id=payload.app_user_id,
        bank_id=bank.id,
        driver_id=driver.id,
        previous_id=previous.id if previous else None,
        allocated_amount=amount,
        carried_forward=carry_forward,
        daily_budget_amount=amount + carry_forward,
        remaining_budget_amount=amount + carry_forward,
        date=payload.date,
        description=payload.description,
        payment_type=payload.payment_type,
    )
    db.add(budget)
    if previous is not None:
        previous.remaining_budget_amount = ZERO
        logger.debug(
            "Budget %s hands %s over to the next allocation of driver %s",
            previous.id,
            carry_forward,
            driver.id,
        )
    db.flush()

    description = payload.description or f"Daily budget for {driver.name}"
    ledger.debit(db, bank, amount)
    transaction = ledger.post_transaction(
        db,
        type=TransactionTypeEnum.DRIVER_BUDGET,
        amount=amount,
        app_user_id=budget.app_user_id,
        description=description,
        from_bank=bank,
        related_entity_type=RelatedEntityTypeEnum.DRIVER_BUDGET,
        related_entity_id=budget.id,
        category=BUDGET_CATEGORY,
        date=budget.date,
    )
    # The expense row reports the allocation; the money moved with the
    # DRIVER_BUDGET transaction above.
    expense = Expense(
        app_user_id=budget.app_user_id,
        bank_id=bank.id,
        category=BUDGET_CATEGORY,
        amount=amount,
        description=description,
        date=budget.date,
        transaction_id=transaction.id,
    )
    db.add(expense)
    db.flush()
    budget.transaction_id = transaction.id
    budget.expense_id = expense.id
    db.flush()
    logger.info(
        "Budget %s for driver %s: %s allocated, %s carried forward, bank %s balance %s",
        budget.id,
        driver.id,
        amount,
        carry_forward,
        bank.id,
        bank.balance,
    )
    return budget


def delete_budget(db: Session, budget: DriverBudget) -> None:
    head = chain_head(db, budget.driver_id, lock=True)
    if head is None or head.id != budget.id:
        raise ValidationError("Only the latest budget of a driver can be deleted", "id")
    in_use = db.execute(
        select(func.count(Trip.id)).where(Trip.driver_budget_id == budget.id)
    ).scalar_one()
    if in_use:
        raise ValidationError("Budget is referenced by trips and cannot be deleted", "id")

    if budget.previous_id is not None:
        previous = get_or_404(db, DriverBudget, budget.previous_id, lock=True)
        previous.remaining_budget_amount = _money(previous.remaining_budget_amount) + _money(
            budget.carried_forward
        )

    bank = ledger.lock_bank(db, budget.bank_id)
    ledger.credit(db, bank, budget.allocated_amount)
    transaction_id, expense_id = budget.transaction_id, budget.expense_id
    budget.transaction_id = None
    budget.expense_id = None
    db.flush()
    if expense_id is not None:
        expense = db.get(Expense, expense_id)
        if expense is not None:
            expense.transaction_id = None
            db.flush()
            db.delete(expense)
    ledger.remove_transaction(db, transaction_id)
    db.delete(budget)
    db.flush()
    logger.info(
        "Budget %s deleted, %s refunded to bank %s", budget.id, budget.allocated_amount, bank.id
    )


def deduct_trip_expenses(db: Session, driver_id: int, amount: Decimal) -> DriverBudget | None:
    """Charge trip expenses to the driver's current allocation.

    The allocation itself (``daily_budget_amount``) is reduced along with the
    open remainder. Returns ``None`` when the driver has no budget yet.
    """
    budget = chain_head(db, driver_id, lock=True)
    if budget is None:
        return None
    amount = _money(amount)
    budget.daily_budget_amount = _money(budget.daily_budget_amount) - amount
    budget.remaining_budget_amount = _money(budget.remaining_budget_amount) - amount
    db.flush()
    return budget


def restore_trip_expenses(db: Session, budget_id: int, amount: Decimal) -> None:
    budget = db.get(DriverBudget, budget_id)
    if budget is None:
        return
    amount = _money(amount)
    budget.daily_budget_amount = _money(budget.daily_budget_amount) + amount
    # Whatever is left open has moved to the driver's newest allocation.
    head = chain_head(db, budget.driver_id, lock=True)
    head.remaining_budget_amount = _money(head.remaining_budget_amount) + amount
    db.flush()
