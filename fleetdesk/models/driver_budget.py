from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import MONEY, Base, PaymentTypeEnum, utcnow


class DriverBudget(Base):
    __tablename__ = "driver_budgets"
    __table_args__ = (Index("ix_driver_budgets_driver_id", "driver_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    app_user_id: Mapped[int] = mapped_column(ForeignKey("app_users.id"), nullable=False)
    bank_id: Mapped[int] = mapped_column(ForeignKey("banks.id"), nullable=False)
    driver_id: Mapped[int] = mapped_column(ForeignKey("drivers.id"), nullable=False)
    previous_id: Mapped[int | None] = mapped_column(ForeignKey("driver_budgets.id"))
    allocated_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    carried_forward: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    daily_budget_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    remaining_budget_amount: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))
    payment_type: Mapped[PaymentTypeEnum] = mapped_column(
        SAEnum(PaymentTypeEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=PaymentTypeEnum.CASH,
    )
    transaction_id: Mapped[int | None] = mapped_column(ForeignKey("transactions.id"))
    expense_id: Mapped[int | None] = mapped_column(ForeignKey("expenses.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
