from datetime import datetime

from pydantic import Field

from ..models import MaintenanceStatusEnum, NotificationStatusEnum
from .common import CamelModel, Money, Quantity


class MaintenanceCreate(CamelModel):
    app_user_id: int
    bank_id: int
    vehicle_id: int
    mechanic_id: int | None = None
    category: str = Field(min_length=1)
    category_amount: Money = Field(gt=0)
    target_km: Quantity = Field(gt=0)
    start_km: Quantity = Field(default=0, ge=0)
    end_km: Quantity | None = Field(default=None, ge=0)
    created_by: int | None = None


class MaintenanceUpdate(CamelModel):
    bank_id: int | None = None
    mechanic_id: int | None = None
    category: str | None = Field(default=None, min_length=1)
    category_amount: Money | None = Field(default=None, gt=0)
    target_km: Quantity | None = Field(default=None, gt=0)
    start_km: Quantity | None = Field(default=None, ge=0)
    end_km: Quantity | None = Field(default=None, ge=0)


class MaintenanceRead(CamelModel):
    id: int
    app_user_id: int
    bank_id: int
    vehicle_id: int
    mechanic_id: int | None
    schedule_id: int | None
    category: str
    category_amount: Money
    start_km: Quantity
    target_km: Quantity
    end_km: Quantity
    total_km: Quantity
    status: MaintenanceStatusEnum
    is_alert: bool
    is_notification_sent: bool
    is_completed: bool
    notification_status: NotificationStatusEnum | None
    last_checked_at: datetime | None
    completed_at: datetime | None
    declined_at: datetime | None
    expense_id: int | None
    transaction_id: int | None
    created_by: int


class MonitorResult(CamelModel):
    message: str
    total_checked: int
    updated_records: list[MaintenanceRead]
    poll_seconds: int
