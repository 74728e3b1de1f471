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

from .base import MONEY, QUANTITY, RATIO, Base, PaymentTypeEnum, utcnow


class FuelTracking(Base):
    """One fill-up of one vehicle.

    Fill-ups of a vehicle form a chain through ``previous_id``; the row with
    the highest id is the chain head. ``carried_forward`` is the quantity this
    row took over from ``previous_id`` when it was recorded.
    """

    __tablename__ = "fuel_tracking"
    __table_args__ = (Index("ix_fuel_tracking_vehicle_id", "vehicle_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    app_user_id: Mapped[int] = mapped_column(ForeignKey("app_users.id"), nullable=False)
    bank_id: Mapped[int] = mapped_column(ForeignKey("banks.id"), nullable=False)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), nullable=False)
    previous_id: Mapped[int | None] = mapped_column(ForeignKey("fuel_tracking.id"))
    start_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    end_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    fuel_quantity: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    carried_forward: Mapped[Decimal] = mapped_column(
        QUANTITY, nullable=False, default=Decimal("0")
    )
    remaining_fuel_quantity: Mapped[Decimal] = mapped_column(
        QUANTITY, nullable=False, default=Decimal("0")
    )
    fuel_rate: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    truck_average: Mapped[Decimal] = mapped_column(RATIO, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))
    payment_type: Mapped[PaymentTypeEnum] = mapped_column(
        SAEnum(PaymentTypeEnum, native_enum=False, create_constraint=False),
        nullable=False,
    )
    transaction_id: Mapped[int | None] = mapped_column(ForeignKey("transactions.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
