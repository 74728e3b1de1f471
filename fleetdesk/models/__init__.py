from .app_user import AppUser, AppUserStatusEnum
from .attendance import Attendance, AttendanceStatusEnum
from .bank import Bank, BankTransfer, TransferStatusEnum
from .base import Base, PaymentTypeEnum
from .customer import Customer, CustomerProduct, ProductCategory
from .driver_budget import DriverBudget
from .expense import Expense
from .fuel_tracking import FuelTracking
from .income import Income
from .invoice import Invoice, InvoiceStatusEnum
from .invoice_row import InvoiceRow
from .lookups import Driver, DriverStatusEnum, Location, Mechanic, MechanicStatusEnum
from .maintenance import Maintenance, MaintenanceStatusEnum, NotificationStatusEnum
from .sequence import DocumentSequence
from .transaction import (
    RelatedEntityTypeEnum,
    Transaction,
    TransactionStatusEnum,
    TransactionTypeEnum,
)
from .trip import RouteExpense, RouteStatusEnum, Trip, TripDate, TripRoute, TripStatusEnum
from .vehicle import Vehicle, VehicleStatusEnum, VehicleTypeEnum

__all__ = [
    "Base",
    "PaymentTypeEnum",
    "AppUser",
    "AppUserStatusEnum",
    "Attendance",
    "AttendanceStatusEnum",
    "Bank",
    "BankTransfer",
    "TransferStatusEnum",
    "Customer",
    "CustomerProduct",
    "ProductCategory",
    "DriverBudget",
    "Expense",
    "FuelTracking",
    "Income",
    "Invoice",
    "InvoiceRow",
    "InvoiceStatusEnum",
    "Driver",
    "DriverStatusEnum",
    "Location",
    "Mechanic",
    "MechanicStatusEnum",
    "Maintenance",
    "MaintenanceStatusEnum",
    "NotificationStatusEnum",
    "DocumentSequence",
    "RelatedEntityTypeEnum",
    "Transaction",
    "TransactionStatusEnum",
    "TransactionTypeEnum",
    "RouteExpense",
    "RouteStatusEnum",
    "Trip",
    "TripDate",
    "TripRoute",
    "TripStatusEnum",
    "Vehicle",
    "VehicleStatusEnum",
    "VehicleTypeEnum",
]
