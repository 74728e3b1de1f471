from datetime import datetime

from pydantic import Field

from ..models import PaymentTypeEnum
from .common import CamelModel, Money


class DriverBudgetCreate(CamelModel):
    app_user_id: int
    bank_id: int
    driver_id: int
    # The newly allocated amount; any carry-forward is added on top.
    daily_budget_amount: Money = Field(gt=0)
    date: datetime
    description: str | None = None
    payment_type: PaymentTypeEnum = PaymentTypeEnum.CASH


class DriverBudgetRead(CamelModel):
    id: int
    app_user_id: int
    bank_id: int
    driver_id: int
    previous_id: int | None
    allocated_amount: Money
    carried_forward: Money
    daily_budget_amount: Money
    remaining_budget_amount: Money
    date: datetime
    description: str | None
    payment_type: PaymentTypeEnum
    transaction_id: int | None
    expense_id: int | None
