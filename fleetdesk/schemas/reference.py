from datetime import datetime

from pydantic import Field, field_validator

from ..models import (
    AppUserStatusEnum,
    DriverStatusEnum,
    MechanicStatusEnum,
    VehicleStatusEnum,
    VehicleTypeEnum,
)
from .common import CamelModel, Money, Quantity


class AppUserCreate(CamelModel):
    name: str = Field(min_length=1)
    mobile_no: str = Field(min_length=1)
    gstin: str | None = None
    address: str | None = None
    status: AppUserStatusEnum = AppUserStatusEnum.ACTIVE


class AppUserUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    mobile_no: str | None = Field(default=None, min_length=1)
    gstin: str | None = None
    address: str | None = None
    status: AppUserStatusEnum | None = None


class AppUserRead(CamelModel):
    id: int
    name: str
    mobile_no: str
    gstin: str | None
    address: str | None
    status: AppUserStatusEnum
    created_at: datetime


class VehicleCreate(CamelModel):
    registration_number: str = Field(min_length=1)
    vehicle_type: VehicleTypeEnum
    vehicle_weight: Quantity = Field(ge=0)
    vehicle_status: VehicleStatusEnum = VehicleStatusEnum.AVAILABLE

    @field_validator("registration_number")
    @classmethod
    def normalise_registration(cls, value: str) -> str:
        return value.strip().upper()


class VehicleUpdate(CamelModel):
    registration_number: str | None = Field(default=None, min_length=1)
    vehicle_type: VehicleTypeEnum | None = None
    vehicle_weight: Quantity | None = Field(default=None, ge=0)
    vehicle_status: VehicleStatusEnum | None = None

    @field_validator("registration_number")
    @classmethod
    def normalise_registration(cls, value: str | None) -> str | None:
        return value.strip().upper() if value else value


class VehicleRead(CamelModel):
    id: int
    registration_number: str
    vehicle_type: VehicleTypeEnum
    vehicle_weight: Quantity
    vehicle_status: VehicleStatusEnum
    created_at: datetime


class DriverCreate(CamelModel):
    name: str = Field(min_length=1)
    mobile_no: str = Field(min_length=1)
    license_number: str | None = None
    address: str | None = None
    status: DriverStatusEnum = DriverStatusEnum.ACTIVE


class DriverUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    mobile_no: str | None = Field(default=None, min_length=1)
    license_number: str | None = None
    address: str | None = None
    status: DriverStatusEnum | None = None


class DriverRead(CamelModel):
    id: int
    name: str
    mobile_no: str
    license_number: str | None
    address: str | None
    status: DriverStatusEnum


class MechanicCreate(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    status: MechanicStatusEnum = MechanicStatusEnum.ACTIVE
    certifications: list[str] = []


class MechanicUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, min_length=1)
    status: MechanicStatusEnum | None = None
    certifications: list[str] | None = None


class MechanicRead(CamelModel):
    id: int
    name: str
    phone: str
    status: MechanicStatusEnum
    certifications: list[str]


class LocationCreate(CamelModel):
    location_name: str = Field(min_length=1)


class LocationRead(CamelModel):
    id: int
    location_name: str


class ProductCategoryIn(CamelModel):
    category_name: str = Field(min_length=1)
    category_rate: Money = Field(ge=0)


class ProductCategoryRead(ProductCategoryIn):
    id: int


class CustomerProductIn(CamelModel):
    product_name: str = Field(min_length=1)
    product_rate: Money = Field(ge=0)
    categories: list[ProductCategoryIn] = []


class CustomerProductRead(CamelModel):
    id: int
    product_name: str
    product_rate: Money
    categories: list[ProductCategoryRead]


class CustomerCreate(CamelModel):
    customer_name: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    mobile_no: str = Field(min_length=1)
    gstin: str | None = None
    address: str | None = None
    products: list[CustomerProductIn] = []


class CustomerUpdate(CamelModel):
    customer_name: str | None = Field(default=None, min_length=1)
    company_name: str | None = Field(default=None, min_length=1)
    mobile_no: str | None = Field(default=None, min_length=1)
    gstin: str | None = None
    address: str | None = None
    products: list[CustomerProductIn] | None = None


class CustomerRead(CamelModel):
    id: int
    customer_name: str
    company_name: str
    mobile_no: str
    gstin: str | None
    address: str | None
    products: list[CustomerProductRead]
