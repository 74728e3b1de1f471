from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class AppUserStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AppUser(Base):
    __tablename__ = "app_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    mobile_no: Mapped[str] = mapped_column(String(30), nullable=False)
    gstin: Mapped[str | None] = mapped_column(String(30))
    address: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[AppUserStatusEnum] = mapped_column(
        SAEnum(AppUserStatusEnum, native_enum=False, create_constraint=False),
        nullable=False,
        default=AppUserStatusEnum.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
