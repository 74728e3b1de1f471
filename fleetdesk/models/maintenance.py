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

from .base import MONEY, QUANTITY, Base, utcnow


class MaintenanceStatusEnum(str, Enum):
    PENDING = "Pending"
    DUE = "Due"
    OVERDUE = "Overdue"
    COMPLETED = "Completed"


class NotificationStatusEnum(str, Enum):
    ACCEPTED = "Accepted"
    DECLINED = "Declined"


class Maintenance(Base):
    """Kilometre accumulator for one service category of one vehicle.

    Rows with ``is_alert`` set are notifications spawned by the monitor
    sweep; ``schedule_id`` points back at the accumulator that raised them.
    """

    __tablename__ = "maintenance"
    __table_args__ = (
        Index("ix_maintenance_vehicle_status", "vehicle_id", "status"),
        Index("ix_maintenance_status_notified", "status", "is_notification_sent"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    app_user_id: Mapped[int] = mapped_column(ForeignKey("app_users.id"), nullable=False)
    bank_id: Mapped[int] = mapped_column(ForeignKey("banks.id"), nullable=False)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), nullable=False)
    mechanic_id: Mapped[int | None] = mapped_column(ForeignKey("mechanics.id"))
    schedule_id: Mapped[int | None] = mapped_column(ForeignKey("maintenance.id"))
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    category_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    start_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    target_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    end_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False, default=Decimal("0"))
    total_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False, default=Decimal("0"))
    status: Mapped[MaintenanceStatusEnum] = mapped_column(
        SAEnum(MaintenanceStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=MaintenanceStatusEnum.PENDING,
    )
    is_alert: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_notification_sent: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notification_status: Mapped[NotificationStatusEnum | None] = mapped_column(
        SAEnum(NotificationStatusEnum, native_enum=False, create_constraint=False)
    )
    last_checked_at: Mapped[datetime | None] = mapped_column(DateTime)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    declined_at: Mapped[datetime | None] = mapped_column(DateTime)
    expense_id: Mapped[int | None] = mapped_column(ForeignKey("expenses.id"))
    transaction_id: Mapped[int | None] = mapped_column(ForeignKey("transactions.id"))
    created_by: Mapped[int] = mapped_column(ForeignKey("app_users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
