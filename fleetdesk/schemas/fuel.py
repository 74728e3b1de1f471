from datetime import datetime

from pydantic import Field

from ..models import PaymentTypeEnum
from .common import CamelModel, Money, Quantity


class FuelTrackingCreate(CamelModel):
    app_user_id: int
    bank_id: int
    vehicle_id: int
    start_km: Quantity = Field(ge=0)
    end_km: Quantity = Field(ge=0)
    fuel_quantity: Quantity
    fuel_rate: Money
    date: datetime
    payment_type: PaymentTypeEnum
    description: str | None = None


class FuelTrackingUpdate(CamelModel):
    app_user_id: int | None = None
    bank_id: int | None = None
    vehicle_id: int | None = None
    start_km: Quantity | None = Field(default=None, ge=0)
    end_km: Quantity | None = Field(default=None, ge=0)
    fuel_quantity: Quantity | None = None
    fuel_rate: Money | None = None
    date: datetime | None = None
    payment_type: PaymentTypeEnum | None = None
    description: str | None = None


class FuelTrackingRead(CamelModel):
    id: int
    app_user_id: int
    bank_id: int
    vehicle_id: int
    previous_id: int | None
    start_km: Quantity
    end_km: Quantity
    fuel_quantity: Quantity
    carried_forward: Quantity
    remaining_fuel_quantity: Quantity
    fuel_rate: Money
    total_amount: Money
    truck_average: Quantity
    date: datetime
    payment_type: PaymentTypeEnum
    description: str | None
    transaction_id: int | None


class LatestFuelRead(FuelTrackingRead):
    mileage: Quantity
