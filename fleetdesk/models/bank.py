from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import MONEY, Base, utcnow


class Bank(Base):
    __tablename__ = "banks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bank_name: Mapped[str] = mapped_column(String(120), nullable=False)
    account_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    balance: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    opening_balance: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    app_user_id: Mapped[int] = mapped_column(
        ForeignKey("app_users.id"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )


class TransferStatusEnum(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class BankTransfer(Base):
    __tablename__ = "bank_transfers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    from_bank_id: Mapped[int] = mapped_column(ForeignKey("banks.id"), nullable=False)
    to_bank_id: Mapped[int] = mapped_column(ForeignKey("banks.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))
    transfer_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[TransferStatusEnum] = mapped_column(
        SAEnum(TransferStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=TransferStatusEnum.COMPLETED,
    )
    transaction_id: Mapped[int | None] = mapped_column(ForeignKey("transactions.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
