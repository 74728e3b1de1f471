from datetime import date as date_type
from datetime import datetime

from pydantic import Field

from ..models import InvoiceStatusEnum
from .common import CamelModel, Money, Quantity


class InvoiceRowIn(CamelModel):
    product: str = Field(min_length=1)
    truck_no: str = Field(min_length=1)
    articles: str | None = None
    weight: Quantity = Field(default=0, ge=0)
    rate: Money = Field(default=0, ge=0)
    total: Money | None = Field(default=None, ge=0)
    remarks: str | None = None


class InvoiceRowRead(CamelModel):
    id: int
    product: str
    truck_no: str
    articles: str | None
    weight: Quantity
    rate: Money
    total: Money
    remarks: str | None


class InvoiceCreate(CamelModel):
    lr_no: str | None = None
    date: date_type | None = None
    from_location: str = Field(alias="from", min_length=1)
    to_location: str = Field(alias="to", min_length=1)
    taluka: str | None = None
    dist: str | None = None
    customer_name: str = Field(min_length=1)
    consignor: str | None = None
    consignee: str | None = None
    remarks: str | None = None
    tax_percent: Money = Field(default=0, ge=0, le=100)
    advance_amount: Money = Field(default=0, ge=0)
    status: InvoiceStatusEnum = InvoiceStatusEnum.PENDING
    rows: list[InvoiceRowIn] = Field(min_length=1)


class InvoiceUpdate(CamelModel):
    lr_no: str | None = Field(default=None, min_length=1)
    date: date_type | None = None
    from_location: str | None = Field(default=None, alias="from", min_length=1)
    to_location: str | None = Field(default=None, alias="to", min_length=1)
    taluka: str | None = None
    dist: str | None = None
    customer_name: str | None = Field(default=None, min_length=1)
    consignor: str | None = None
    consignee: str | None = None
    remarks: str | None = None
    tax_percent: Money | None = Field(default=None, ge=0, le=100)
    advance_amount: Money | None = Field(default=None, ge=0)
    status: InvoiceStatusEnum | None = None
    rows: list[InvoiceRowIn] | None = Field(default=None, min_length=1)


class InvoiceRead(CamelModel):
    id: int
    lr_no: str
    date: date_type
    from_location: str = Field(serialization_alias="from")
    to_location: str = Field(serialization_alias="to")
    taluka: str | None
    dist: str | None
    customer_name: str
    consignor: str | None
    consignee: str | None
    remarks: str | None
    total: Money
    tax_percent: Money
    tax_amount: Money
    advance_amount: Money
    remaining_amount: Money
    status: InvoiceStatusEnum
    trip_id: int | None
    rows: list[InvoiceRowRead]
    created_at: datetime


class BulkStatusUpdate(CamelModel):
    invoice_ids: list[int] = Field(min_length=1)
    status: InvoiceStatusEnum
    bank_id: int | None = None
    app_user_id: int | None = None
    category: str = "Invoice Payment"
    description: str | None = None
    date: datetime | None = None


class BulkStatusResult(CamelModel):
    message: str
    updated: int
    total_credited: Money
