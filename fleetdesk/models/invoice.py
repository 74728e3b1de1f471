from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import MONEY, Base, utcnow


class InvoiceStatusEnum(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"
    PENDING = "Pending"


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_status", "status"),
        Index("ix_invoices_trip_id", "trip_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lr_no: Mapped[str] = mapped_column(String(60), unique=True, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    from_location: Mapped[str] = mapped_column(String(255), nullable=False)
    to_location: Mapped[str] = mapped_column(String(255), nullable=False)
    taluka: Mapped[str | None] = mapped_column(String(100))
    dist: Mapped[str | None] = mapped_column(String(100))
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    consignor: Mapped[str | None] = mapped_column(String(255))
    consignee: Mapped[str | None] = mapped_column(String(255))
    remarks: Mapped[str | None] = mapped_column(String(255))
    tax_percent: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    advance_amount: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    remaining_amount: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    status: Mapped[InvoiceStatusEnum] = mapped_column(
        SAEnum(InvoiceStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=InvoiceStatusEnum.PENDING,
    )
    trip_id: Mapped[int | None] = mapped_column(ForeignKey("trips.id"))
    route_number: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    rows: Mapped[list["InvoiceRow"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceRow.id",
    )
