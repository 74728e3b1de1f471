from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import MONEY, QUANTITY, Base, PaymentTypeEnum, utcnow


class TripStatusEnum(str, Enum):
    DRAFT = "Draft"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class RouteStatusEnum(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class Trip(Base):
    __tablename__ = "trips"
    __table_args__ = (
        Index("ix_trips_status", "status"),
        Index("ix_trips_driver_id", "driver_id"),
        Index("ix_trips_vehicle_id", "vehicle_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    trip_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    driver_id: Mapped[int] = mapped_column(ForeignKey("drivers.id"), nullable=False)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), nullable=False)
    start_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    end_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    total_km: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    status: Mapped[TripStatusEnum] = mapped_column(
        SAEnum(TripStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=TripStatusEnum.DRAFT,
    )
    remarks: Mapped[str | None] = mapped_column(String(255))
    trip_route_cost: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    trip_expenses: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    trip_diesel_cost: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    remaining_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    fuel_needed: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    # Fuel drawn from the vehicle's open remaining quantity; may be less than
    # fuel_needed when the remaining quantity ran out.
    fuel_drawn: Mapped[Decimal] = mapped_column(
        QUANTITY, nullable=False, default=Decimal("0")
    )
    fuel_tracking_id: Mapped[int | None] = mapped_column(ForeignKey("fuel_tracking.id"))
    fuel_consumed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    driver_budget_id: Mapped[int | None] = mapped_column(ForeignKey("driver_budgets.id"))
    budget_deducted: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    created_by: Mapped[int] = mapped_column(ForeignKey("app_users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    dates: Mapped[list["TripDate"]] = relationship(
        back_populates="trip", cascade="all, delete-orphan", order_by="TripDate.date"
    )
    routes: Mapped[list["TripRoute"]] = relationship(
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="TripRoute.route_number",
    )
    driver: Mapped["Driver"] = relationship("Driver")
    vehicle: Mapped["Vehicle"] = relationship("Vehicle")


class TripDate(Base):
    __tablename__ = "trip_dates"
    __table_args__ = (UniqueConstraint("trip_id", "date", name="uq_trip_dates_trip_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    trip_id: Mapped[int] = mapped_column(
        ForeignKey("trips.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    trip: Mapped[Trip] = relationship(back_populates="dates")


class TripRoute(Base):
    __tablename__ = "trip_routes"
    __table_args__ = (
        UniqueConstraint("trip_id", "route_number", name="uq_trip_routes_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    trip_id: Mapped[int] = mapped_column(
        ForeignKey("trips.id", ondelete="CASCADE"), nullable=False
    )
    route_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_location: Mapped[str] = mapped_column(String(255), nullable=False)
    end_location: Mapped[str] = mapped_column(String(255), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    weight: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    rate: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    route_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    advance_amount: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    total_expense: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("app_users.id"), nullable=False)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False)
    bank_id: Mapped[int] = mapped_column(ForeignKey("banks.id"), nullable=False)
    payment_type: Mapped[PaymentTypeEnum] = mapped_column(
        SAEnum(PaymentTypeEnum, native_enum=False, create_constraint=False),
        nullable=False,
    )
    route_status: Mapped[RouteStatusEnum] = mapped_column(
        SAEnum(RouteStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=RouteStatusEnum.PENDING,
    )

    trip: Mapped[Trip] = relationship(back_populates="routes")
    customer: Mapped["Customer"] = relationship("Customer")
    expenses: Mapped[list["RouteExpense"]] = relationship(
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="RouteExpense.id",
    )


class RouteExpense(Base):
    __tablename__ = "route_expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    route_id: Mapped[int] = mapped_column(
        ForeignKey("trip_routes.id", ondelete="CASCADE"), nullable=False
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))

    route: Mapped[TripRoute] = relationship(back_populates="expenses")
