from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import DateTime, Enum as SAEnum, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class DriverStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on-leave"


class MechanicStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Driver(Base):
    __tablename__ = "drivers"
    __table_args__ = (
        sa.UniqueConstraint("mobile_no", name="uq_drivers_mobile_no"),
        sa.Index("ix_drivers_name", "name"),
        sa.Index("ix_drivers_status", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    mobile_no: Mapped[str] = mapped_column(String(30), nullable=False)
    license_number: Mapped[str | None] = mapped_column(String(50))
    address: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[DriverStatusEnum] = mapped_column(
        SAEnum(DriverStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=DriverStatusEnum.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Mechanic(Base):
    __tablename__ = "mechanics"
    __table_args__ = (
        sa.UniqueConstraint("phone", name="uq_mechanics_phone"),
        sa.Index("ix_mechanics_name", "name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[MechanicStatusEnum] = mapped_column(
        SAEnum(MechanicStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=MechanicStatusEnum.ACTIVE,
    )
    certifications: Mapped[list[str]] = mapped_column(
        sa.JSON, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (
        sa.UniqueConstraint("location_name", name="uq_locations_location_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    location_name: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )
