from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import QUANTITY, Base, utcnow


class VehicleTypeEnum(str, Enum):
    TRUCK = "truck"
    VAN = "van"
    BUS = "bus"
    CAR = "car"
    MOTORCYCLE = "motorcycle"


class VehicleStatusEnum(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in-use"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    registration_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    vehicle_type: Mapped[VehicleTypeEnum] = mapped_column(
        SAEnum(VehicleTypeEnum, native_enum=False, create_constraint=False),
        nullable=False,
    )
    vehicle_weight: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False)
    vehicle_status: Mapped[VehicleStatusEnum] = mapped_column(
        SAEnum(VehicleStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=VehicleStatusEnum.AVAILABLE,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
