"""Bank balances and the transaction audit log.

Every balance movement goes through :func:`credit` or :func:`debit` on a bank
row locked with ``SELECT ... FOR UPDATE`` and is recorded by exactly one
non-mirror :class:`Transaction`. Functions here only flush; the caller owns
the commit.
"""

from datetime import datetime, time
from decimal import Decimal
import logging

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session

from ..errors import DuplicateKeyError, InsufficientBalanceError, ValidationError
from ..models import (
    AppUser,
    Bank,
    BankTransfer,
    DriverBudget,
    Expense,
    Income,
    Maintenance,
    RelatedEntityTypeEnum,
    Transaction,
    TransactionTypeEnum,
)
from ..models.base import utcnow
from ..schemas import BankCreate, BankTransferCreate, BankUpdate, EntryCreate, EntryUpdate
from .common import ZERO, _money, get_or_404
from .sequences import generate_transaction_no

logger = logging.getLogger(__name__)


def lock_bank(db: Session, bank_id: int) -> Bank:
    return get_or_404(db, Bank, bank_id, lock=True)


def ensure_funds(bank: Bank, amount: Decimal) -> None:
    if _money(amount) > _money(bank.balance):
        raise InsufficientBalanceError(bank.id, _money(bank.balance), _money(amount))


def credit(db: Session, bank: Bank, amount: Decimal) -> Decimal:
    bank.balance = _money(bank.balance) + _money(amount)
    db.flush()
    return bank.balance


def debit(db: Session, bank: Bank, amount: Decimal) -> Decimal:
    ensure_funds(bank, amount)
    bank.balance = _money(bank.balance) - _money(amount)
    db.flush()
    return bank.balance


def post_transaction(
    db: Session,
    *,
    type: TransactionTypeEnum,
    amount: Decimal,
    app_user_id: int,
    description: str,
    from_bank: Bank | None = None,
    to_bank: Bank | None = None,
    related_entity_type: RelatedEntityTypeEnum | None = None,
    related_entity_id: int | None = None,
    category: str | None = None,
    date: datetime | None = None,
    mirror_of: Transaction | None = None,
) -> Transaction:
    snapshot = from_bank if from_bank is not None else to_bank
    transaction = Transaction(
        transaction_no=generate_transaction_no(db),
        type=type,
        description=description,
        amount=_money(amount),
        from_bank_id=from_bank.id if from_bank is not None else None,
        to_bank_id=to_bank.id if to_bank is not None else None,
        app_user_id=app_user_id,
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
        category=category,
        balance_after=snapshot.balance if snapshot is not None else None,
        mirror=mirror_of is not None,
        mirror_of_id=mirror_of.id if mirror_of is not None else None,
        date=date or utcnow(),
    )
    db.add(transaction)
    db.flush()
    return transaction


def remove_transaction(db: Session, transaction_id: int | None) -> None:
    if transaction_id is None:
        return
    db.execute(delete(Transaction).where(Transaction.mirror_of_id == transaction_id))
    db.execute(delete(Transaction).where(Transaction.id == transaction_id))
    db.flush()


def replay_balance(db: Session, bank_id: int) -> Decimal:
    """Rebuild a bank balance from the audit log alone."""
    get_or_404(db, Bank, bank_id)
    balance = ZERO
    transactions = db.scalars(
        select(Transaction)
        .where(
            Transaction.mirror.is_(False),
            (Transaction.from_bank_id == bank_id) | (Transaction.to_bank_id == bank_id),
        )
        .order_by(Transaction.id)
    ).all()
    for transaction in transactions:
        if transaction.from_bank_id == bank_id:
            balance -= _money(transaction.amount)
        if transaction.to_bank_id == bank_id:
            balance += _money(transaction.amount)
    return balance


def _require_app_user(db: Session, app_user_id: int) -> AppUser:
    return get_or_404(db, AppUser, app_user_id)


# --- banks -------------------------------------------------------------


def create_bank(db: Session, payload: BankCreate) -> Bank:
    _require_app_user(db, payload.app_user_id)
    account_number = payload.account_number.strip()
    _check_account_number(db, account_number)
    opening = _money(payload.balance)
    bank = Bank(
        bank_name=payload.bank_name.strip(),
        account_number=account_number,
        balance=opening,
        opening_balance=opening,
        app_user_id=payload.app_user_id,
        is_active=True,
    )
    db.add(bank)
    db.flush()
    if opening > ZERO:
        post_transaction(
            db,
            type=TransactionTypeEnum.BANK_UPDATE,
            amount=opening,
            app_user_id=bank.app_user_id,
            description=f"Opening balance for {bank.bank_name}",
            to_bank=bank,
            related_entity_type=RelatedEntityTypeEnum.BANK,
            related_entity_id=bank.id,
            category="Initial Balance",
        )
    logger.info("Bank %s created with opening balance %s", bank.id, opening)
    return bank


def update_bank(db: Session, bank: Bank, payload: BankUpdate) -> Bank:
    data = payload.model_dump(exclude_unset=True)
    if data.get("account_number"):
        account_number = data["account_number"].strip()
        if account_number != bank.account_number:
            _check_account_number(db, account_number)
        bank.account_number = account_number
    if data.get("bank_name"):
        bank.bank_name = data["bank_name"].strip()
    if data.get("is_active") is not None:
        bank.is_active = data["is_active"]
    db.flush()
    return bank


def deactivate_bank(db: Session, bank: Bank) -> Bank:
    bank.is_active = False
    db.flush()
    return bank


def _check_account_number(db: Session, account_number: str) -> None:
    exists = db.scalars(
        select(Bank.id).where(Bank.account_number == account_number)
    ).first()
    if exists is not None:
        raise DuplicateKeyError("accountNumber", account_number)


# --- transfers ---------------------------------------------------------


def create_transfer(db: Session, payload: BankTransferCreate) -> BankTransfer:
    amount = _money(payload.amount)
    if amount <= ZERO:
        raise ValidationError("Transfer amount must be greater than zero", "amount")
    if payload.from_bank_id == payload.to_bank_id:
        raise ValidationError("Cannot transfer to the same bank", "toBankId")

    # Lock in id order so two opposite transfers cannot deadlock.
    first, second = sorted((payload.from_bank_id, payload.to_bank_id))
    locked = {first: lock_bank(db, first), second: lock_bank(db, second)}
    source = locked[payload.from_bank_id]
    destination = locked[payload.to_bank_id]
    if not source.is_active or not destination.is_active:
        raise ValidationError("Both banks must be active", "bankId")

    debit(db, source, amount)
    credit(db, destination, amount)
    transfer_date = payload.transfer_date or utcnow()
    transfer = BankTransfer(
        from_bank_id=source.id,
        to_bank_id=destination.id,
        amount=amount,
        description=payload.description,
        transfer_date=transfer_date,
    )
    db.add(transfer)
    db.flush()
    transaction = post_transaction(
        db,
        type=TransactionTypeEnum.TRANSFER,
        amount=amount,
        app_user_id=source.app_user_id,
        description=payload.description
        or f"Transfer from {source.bank_name} to {destination.bank_name}",
        from_bank=source,
        to_bank=destination,
        related_entity_type=RelatedEntityTypeEnum.TRANSFER,
        related_entity_id=transfer.id,
        category="Bank Transfer",
        date=transfer_date,
    )
    transfer.transaction_id = transaction.id
    db.flush()
    logger.info(
        "Transferred %s from bank %s to bank %s", amount, source.id, destination.id
    )
    return transfer


# --- income / expense --------------------------------------------------


def entry_filters(
    model,
    app_user_id: int | None = None,
    bank_id: int | None = None,
    start_date=None,
    end_date=None,
) -> Select:
    stmt = select(model)
    if app_user_id:
        stmt = stmt.where(model.app_user_id == app_user_id)
    if bank_id:
        stmt = stmt.where(model.bank_id == bank_id)
    if start_date:
        stmt = stmt.where(model.date >= datetime.combine(start_date, time.min))
    if end_date:
        stmt = stmt.where(model.date <= datetime.combine(end_date, time.max))
    return stmt.order_by(model.date.desc(), model.id.desc())


def entry_total(db: Session, stmt: Select) -> Decimal:
    subquery = stmt.order_by(None).subquery()
    return _money(db.execute(select(func.sum(subquery.c.amount))).scalar())


def create_income(
    db: Session,
    payload: EntryCreate,
    *,
    trip_id: int | None = None,
    route_number: int | None = None,
) -> Income:
    _require_app_user(db, payload.app_user_id)
    bank = lock_bank(db, payload.bank_id)
    amount = _money(payload.amount)
    income = Income(
        app_user_id=payload.app_user_id,
        bank_id=bank.id,
        category=payload.category,
        amount=amount,
        description=payload.description,
        date=payload.date,
        trip_id=trip_id,
        route_number=route_number,
    )
    db.add(income)
    db.flush()
    credit(db, bank, amount)
    transaction = post_transaction(
        db,
        type=TransactionTypeEnum.INCOME,
        amount=amount,
        app_user_id=income.app_user_id,
        description=income.description or f"Income - {income.category}",
        to_bank=bank,
        related_entity_type=RelatedEntityTypeEnum.INCOME,
        related_entity_id=income.id,
        category=income.category,
        date=income.date,
    )
    income.transaction_id = transaction.id
    db.flush()
    logger.info(
        "Income %s of %s credited to bank %s (balance %s)",
        income.id,
        amount,
        bank.id,
        bank.balance,
    )
    return income


def update_income(db: Session, income: Income, payload: EntryUpdate) -> Income:
    data = payload.model_dump(exclude_unset=True)
    if data.get("app_user_id") is not None:
        _require_app_user(db, data["app_user_id"])
    new_bank_id = data.get("bank_id") or income.bank_id
    new_amount = _money(data["amount"]) if data.get("amount") is not None else _money(income.amount)

    old_bank = lock_bank(db, income.bank_id)
    new_bank = old_bank if new_bank_id == old_bank.id else lock_bank(db, new_bank_id)
    if new_bank is old_bank:
        delta = new_amount - _money(income.amount)
        if delta < ZERO:
            debit(db, old_bank, -delta)
        elif delta > ZERO:
            credit(db, old_bank, delta)
    else:
        debit(db, old_bank, income.amount)
        credit(db, new_bank, new_amount)

    for field in ("app_user_id", "category", "description", "date"):
        if field in data and data[field] is not None:
            setattr(income, field, data[field])
    income.bank_id = new_bank.id
    income.amount = new_amount
    _rewrite_transaction(db, income.transaction_id, income, to_bank=new_bank)
    db.flush()
    return income


def delete_income(db: Session, income: Income) -> None:
    bank = lock_bank(db, income.bank_id)
    debit(db, bank, income.amount)
    transaction_id = income.transaction_id
    income.transaction_id = None
    db.flush()
    remove_transaction(db, transaction_id)
    db.delete(income)
    db.flush()
    logger.info("Income %s removed, bank %s balance %s", income.id, bank.id, bank.balance)


def create_expense(
    db: Session,
    payload: EntryCreate,
    *,
    transaction_type: TransactionTypeEnum = TransactionTypeEnum.EXPENSE,
) -> Expense:
    _require_app_user(db, payload.app_user_id)
    bank = lock_bank(db, payload.bank_id)
    amount = _money(payload.amount)
    ensure_funds(bank, amount)
    expense = Expense(
        app_user_id=payload.app_user_id,
        bank_id=bank.id,
        category=payload.category,
        amount=amount,
        description=payload.description,
        date=payload.date,
    )
    db.add(expense)
    db.flush()
    debit(db, bank, amount)
    transaction = post_transaction(
        db,
        type=transaction_type,
        amount=amount,
        app_user_id=expense.app_user_id,
        description=expense.description or f"Expense - {expense.category}",
        from_bank=bank,
        related_entity_type=RelatedEntityTypeEnum.EXPENSE,
        related_entity_id=expense.id,
        category=expense.category,
        date=expense.date,
    )
    expense.transaction_id = transaction.id
    db.flush()
    logger.info(
        "Expense %s of %s debited from bank %s (balance %s)",
        expense.id,
        amount,
        bank.id,
        bank.balance,
    )
    return expense


def update_expense(db: Session, expense: Expense, payload: EntryUpdate) -> Expense:
    data = payload.model_dump(exclude_unset=True)
    if data.get("app_user_id") is not None:
        _require_app_user(db, data["app_user_id"])
    new_bank_id = data.get("bank_id") or expense.bank_id
    new_amount = _money(data["amount"]) if data.get("amount") is not None else _money(expense.amount)

    old_bank = lock_bank(db, expense.bank_id)
    new_bank = old_bank if new_bank_id == old_bank.id else lock_bank(db, new_bank_id)
    if new_bank is old_bank:
        delta = new_amount - _money(expense.amount)
        if delta > ZERO:
            debit(db, old_bank, delta)
        elif delta < ZERO:
            credit(db, old_bank, -delta)
    else:
        ensure_funds(new_bank, new_amount)
        credit(db, old_bank, expense.amount)
        debit(db, new_bank, new_amount)

    for field in ("app_user_id", "category", "description", "date"):
        if field in data and data[field] is not None:
            setattr(expense, field, data[field])
    expense.bank_id = new_bank.id
    expense.amount = new_amount
    _rewrite_transaction(db, expense.transaction_id, expense, from_bank=new_bank)
    db.flush()
    return expense


def delete_expense(db: Session, expense: Expense) -> None:
    bank = lock_bank(db, expense.bank_id)
    credit(db, bank, expense.amount)
    transaction_id = expense.transaction_id
    expense.transaction_id = None
    db.flush()
    remove_transaction(db, transaction_id)
    db.delete(expense)
    db.flush()
    logger.info(
        "Expense %s removed, bank %s balance %s", expense.id, bank.id, bank.balance
    )


def _rewrite_transaction(
    db: Session,
    transaction_id: int | None,
    entry: Income | Expense,
    *,
    from_bank: Bank | None = None,
    to_bank: Bank | None = None,
) -> None:
    if transaction_id is None:
        return
    transaction = db.get(Transaction, transaction_id)
    if transaction is None:
        return
    snapshot = from_bank if from_bank is not None else to_bank
    transaction.amount = _money(entry.amount)
    transaction.from_bank_id = from_bank.id if from_bank is not None else None
    transaction.to_bank_id = to_bank.id if to_bank is not None else None
    transaction.app_user_id = entry.app_user_id
    transaction.category = entry.category
    transaction.date = entry.date
    if entry.description:
        transaction.description = entry.description
    transaction.balance_after = snapshot.balance


def ensure_income_editable(income: Income) -> None:
    if income.trip_id is not None:
        raise ValidationError("Income belongs to a trip; change the trip instead", "tripId")


def ensure_expense_editable(db: Session, expense: Expense) -> None:
    owner = db.scalars(
        select(DriverBudget.id).where(DriverBudget.expense_id == expense.id)
    ).first()
    if owner is None:
        owner = db.scalars(
            select(Maintenance.id).where(Maintenance.expense_id == expense.id)
        ).first()
    if owner is not None:
        raise ValidationError(
            "Expense is managed by a budget allocation or maintenance record", "id"
        )
