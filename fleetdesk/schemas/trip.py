from datetime import date, datetime

from pydantic import Field, field_validator

from ..models import PaymentTypeEnum, RouteStatusEnum, TripStatusEnum
from .common import CamelModel, Money, Quantity


class RouteExpenseIn(CamelModel):
    category: str = Field(min_length=1)
    amount: Money = Field(ge=0)
    quantity: Quantity = Field(default=1, ge=0)
    total: Money | None = Field(default=None, ge=0)
    description: str | None = None


class RouteExpenseRead(CamelModel):
    id: int
    category: str
    amount: Money
    quantity: Quantity
    total: Money
    description: str | None


class TripRouteIn(CamelModel):
    """One leg of a trip as sent by clients.

    Required leg fields are checked by the trip service so that the error
    names every missing field of the leg at once.
    """

    route_number: int | None = None
    start_location: str | None = None
    end_location: str | None = None
    product_name: str | None = None
    weight: Quantity | None = Field(default=None, ge=0)
    rate: Money | None = Field(default=None, ge=0)
    route_amount: Money | None = Field(default=None, ge=0)
    advance_amount: Money = Field(default=0, ge=0)
    user_id: int | None = None
    customer_id: int | None = None
    bank_id: int | None = None
    payment_type: PaymentTypeEnum | None = None
    route_status: RouteStatusEnum = RouteStatusEnum.PENDING
    expenses: list[RouteExpenseIn] = []


class TripRouteRead(CamelModel):
    id: int
    route_number: int
    start_location: str
    end_location: str
    product_name: str
    weight: Quantity
    rate: Money
    route_amount: Money
    advance_amount: Money
    total_expense: Money
    user_id: int
    customer_id: int
    bank_id: int
    payment_type: PaymentTypeEnum
    route_status: RouteStatusEnum
    expenses: list[RouteExpenseRead]


class TripCreate(CamelModel):
    vehicle_id: int
    driver_id: int
    start_km: Quantity = Field(ge=0)
    end_km: Quantity = Field(ge=0)
    dates: list[date] = Field(alias="date", min_length=1)
    status: TripStatusEnum = TripStatusEnum.DRAFT
    remarks: str | None = None
    routes: list[TripRouteIn] = Field(alias="routeWiseExpenseBreakdown")
    created_by: int | None = None


class TripUpdate(CamelModel):
    vehicle_id: int | None = None
    driver_id: int | None = None
    start_km: Quantity | None = Field(default=None, ge=0)
    end_km: Quantity | None = Field(default=None, ge=0)
    dates: list[date] | None = Field(default=None, alias="date", min_length=1)
    status: TripStatusEnum | None = None
    remarks: str | None = None
    routes: list[TripRouteIn] | None = Field(
        default=None, alias="routeWiseExpenseBreakdown"
    )


class TripRead(CamelModel):
    id: int
    trip_no: str
    dates: list[date] = Field(serialization_alias="date")
    start_km: Quantity
    end_km: Quantity
    total_km: Quantity
    driver_id: int
    vehicle_id: int
    status: TripStatusEnum
    remarks: str | None
    routes: list[TripRouteRead] = Field(serialization_alias="routeWiseExpenseBreakdown")
    trip_route_cost: Money
    trip_expenses: Money
    trip_diesel_cost: Money
    remaining_amount: Money
    fuel_needed: Quantity
    fuel_tracking_id: int | None
    fuel_consumed: bool
    driver_budget_id: int | None
    budget_deducted: Money
    created_by: int
    created_at: datetime

    @field_validator("dates", mode="before")
    @classmethod
    def unwrap_dates(cls, value):
        return [getattr(item, "date", item) for item in value]
