from .attendance import AttendanceCreate, AttendanceRead, AttendanceUpdate
from .budget import DriverBudgetCreate, DriverBudgetRead
from .common import CamelModel, Message, Money, Page, Quantity
from .fuel import FuelTrackingCreate, FuelTrackingRead, FuelTrackingUpdate, LatestFuelRead
from .invoice import (
    BulkStatusResult,
    BulkStatusUpdate,
    InvoiceCreate,
    InvoiceRead,
    InvoiceRowIn,
    InvoiceUpdate,
)
from .ledger import (
    BankCreate,
    BankRead,
    BankTransferCreate,
    BankTransferRead,
    BankUpdate,
    EntryCreate,
    EntryPage,
    EntryRead,
    EntryUpdate,
    IncomePage,
    IncomeRead,
    TransactionRead,
)
from .maintenance import MaintenanceCreate, MaintenanceRead, MaintenanceUpdate, MonitorResult
from .reference import (
    AppUserCreate,
    AppUserRead,
    AppUserUpdate,
    CustomerCreate,
    CustomerProductRead,
    CustomerRead,
    CustomerUpdate,
    DriverCreate,
    DriverRead,
    DriverUpdate,
    LocationCreate,
    LocationRead,
    MechanicCreate,
    MechanicRead,
    MechanicUpdate,
    VehicleCreate,
    VehicleRead,
    VehicleUpdate,
)
from .trip import TripCreate, TripRead, TripRouteIn, TripUpdate
