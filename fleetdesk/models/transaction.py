from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import MONEY, Base, utcnow


class TransactionTypeEnum(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    FUEL = "FUEL"
    DRIVER_BUDGET = "DRIVER_BUDGET"
    BANK_UPDATE = "BANK_UPDATE"


class TransactionStatusEnum(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class RelatedEntityTypeEnum(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER = "Transfer"
    FUEL_TRACKING = "FuelTracking"
    DRIVER_BUDGET = "DriverBudget"
    BANK = "Bank"


class Transaction(Base):
    """Audit record for one balance movement.

    ``balance_after`` is a snapshot of the affected bank (the source bank for
    debits and transfers) taken right after the movement was applied.
    Rows flagged ``mirror`` restate a movement already recorded by another
    row and are skipped when the ledger is replayed.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_from_bank_id", "from_bank_id"),
        Index("ix_transactions_to_bank_id", "to_bank_id"),
        Index("ix_transactions_related", "related_entity_type", "related_entity_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    transaction_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    type: Mapped[TransactionTypeEnum] = mapped_column(
        SAEnum(TransactionTypeEnum, native_enum=False, create_constraint=False),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    from_bank_id: Mapped[int | None] = mapped_column(ForeignKey("banks.id"))
    to_bank_id: Mapped[int | None] = mapped_column(ForeignKey("banks.id"))
    app_user_id: Mapped[int] = mapped_column(ForeignKey("app_users.id"), nullable=False)
    related_entity_id: Mapped[int | None] = mapped_column(Integer)
    related_entity_type: Mapped[RelatedEntityTypeEnum | None] = mapped_column(
        SAEnum(RelatedEntityTypeEnum, native_enum=False, create_constraint=False)
    )
    category: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[TransactionStatusEnum] = mapped_column(
        SAEnum(TransactionStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=TransactionStatusEnum.COMPLETED,
    )
    balance_after: Mapped[Decimal | None] = mapped_column(MONEY)
    mirror: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    mirror_of_id: Mapped[int | None] = mapped_column(ForeignKey("transactions.id"))
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
