from datetime import datetime

from pydantic import Field

from ..models import (
    RelatedEntityTypeEnum,
    TransactionStatusEnum,
    TransactionTypeEnum,
    TransferStatusEnum,
)
from .common import CamelModel, Money, Page


class BankCreate(CamelModel):
    bank_name: str = Field(min_length=1)
    account_number: str = Field(min_length=1)
    balance: Money = Field(default=0, ge=0)
    app_user_id: int


class BankUpdate(CamelModel):
    bank_name: str | None = Field(default=None, min_length=1)
    account_number: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class BankRead(CamelModel):
    id: int
    bank_name: str
    account_number: str
    balance: Money
    opening_balance: Money
    app_user_id: int
    is_active: bool
    created_at: datetime


class BankTransferCreate(CamelModel):
    from_bank_id: int
    to_bank_id: int
    amount: Money
    description: str | None = None
    transfer_date: datetime | None = None


class BankTransferRead(CamelModel):
    id: int
    from_bank_id: int
    to_bank_id: int
    amount: Money
    description: str | None
    transfer_date: datetime
    status: TransferStatusEnum
    transaction_id: int | None


class TransactionRead(CamelModel):
    id: int
    transaction_no: str
    type: TransactionTypeEnum
    description: str
    amount: Money
    from_bank_id: int | None
    to_bank_id: int | None
    app_user_id: int
    related_entity_id: int | None
    related_entity_type: RelatedEntityTypeEnum | None
    category: str | None
    status: TransactionStatusEnum
    balance_after: Money | None
    mirror: bool
    date: datetime


class EntryCreate(CamelModel):
    app_user_id: int
    bank_id: int
    category: str = Field(min_length=1)
    amount: Money = Field(gt=0)
    description: str | None = None
    date: datetime


class EntryUpdate(CamelModel):
    app_user_id: int | None = None
    bank_id: int | None = None
    category: str | None = Field(default=None, min_length=1)
    amount: Money | None = Field(default=None, gt=0)
    description: str | None = None
    date: datetime | None = None


class EntryRead(CamelModel):
    id: int
    app_user_id: int
    bank_id: int
    category: str
    amount: Money
    description: str | None
    date: datetime
    transaction_id: int | None


class IncomeRead(EntryRead):
    trip_id: int | None
    route_number: int | None


class EntryPage(Page[EntryRead]):
    total_amount: Money


class IncomePage(Page[IncomeRead]):
    total_amount: Money
