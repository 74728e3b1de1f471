import logging

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from ..errors import DuplicateKeyError, ValidationError
from ..models import (
    AppUser,
    Bank,
    Customer,
    CustomerProduct,
    Driver,
    DriverBudget,
    FuelTracking,
    Location,
    Maintenance,
    Mechanic,
    ProductCategory,
    Trip,
    TripRoute,
    Vehicle,
)
from ..schemas import (
    AppUserCreate,
    AppUserUpdate,
    CustomerCreate,
    CustomerUpdate,
    DriverCreate,
    DriverUpdate,
    LocationCreate,
    MechanicCreate,
    MechanicUpdate,
    VehicleCreate,
    VehicleUpdate,
)

logger = logging.getLogger(__name__)


def _ensure_unique(
    db: Session, model, column, value, field: str, exclude_id: int | None = None
) -> None:
    stmt = select(model.id).where(func.lower(column) == func.lower(value))
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if db.scalars(stmt).first() is not None:
        raise DuplicateKeyError(field, value)


def _ensure_unused(db: Session, checks: list[tuple[object, str]]) -> None:
    for column_match, label in checks:
        count = db.execute(select(func.count()).where(column_match)).scalar_one()
        if count:
            raise ValidationError(f"Cannot delete: in use by {label}.")


def _apply(record, data: dict) -> None:
    for field, value in data.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        setattr(record, field, value)


def _like(stmt: Select, q: str | None, *columns) -> Select:
    if not q:
        return stmt
    like = f"%{q.lower()}%"
    return stmt.where(or_(*(func.lower(column).like(like) for column in columns)))


# --- app users ------------------------------------------------------------


def app_user_query(q: str | None = None) -> Select:
    return _like(select(AppUser), q, AppUser.name).order_by(AppUser.name)


def create_app_user(db: Session, payload: AppUserCreate) -> AppUser:
    user = AppUser()
    _apply(user, payload.model_dump())
    db.add(user)
    db.flush()
    return user


def update_app_user(db: Session, user: AppUser, payload: AppUserUpdate) -> AppUser:
    _apply(user, payload.model_dump(exclude_unset=True))
    db.flush()
    return user


def delete_app_user(db: Session, user: AppUser) -> None:
    _ensure_unused(db, [(Bank.app_user_id == user.id, "banks")])
    db.delete(user)
    db.flush()


def banks_for_user(db: Session, user: AppUser) -> list[Bank]:
    return list(
        db.scalars(
            select(Bank)
            .where(Bank.app_user_id == user.id, Bank.is_active.is_(True))
            .order_by(Bank.bank_name)
        )
    )


# --- vehicles -------------------------------------------------------------


def vehicle_query(q: str | None = None, status: str | None = None) -> Select:
    stmt = _like(select(Vehicle), q, Vehicle.registration_number)
    if status:
        stmt = stmt.where(Vehicle.vehicle_status == status)
    return stmt.order_by(Vehicle.registration_number)


def create_vehicle(db: Session, payload: VehicleCreate) -> Vehicle:
    _ensure_unique(
        db, Vehicle, Vehicle.registration_number, payload.registration_number,
        "registrationNumber",
    )
    vehicle = Vehicle()
    _apply(vehicle, payload.model_dump())
    db.add(vehicle)
    db.flush()
    logger.info("Vehicle %s registered", vehicle.registration_number)
    return vehicle


def update_vehicle(db: Session, vehicle: Vehicle, payload: VehicleUpdate) -> Vehicle:
    data = payload.model_dump(exclude_unset=True)
    if data.get("registration_number"):
        _ensure_unique(
            db, Vehicle, Vehicle.registration_number, data["registration_number"],
            "registrationNumber", exclude_id=vehicle.id,
        )
    _apply(vehicle, data)
    db.flush()
    return vehicle


def delete_vehicle(db: Session, vehicle: Vehicle) -> None:
    _ensure_unused(
        db,
        [
            (Trip.vehicle_id == vehicle.id, "trips"),
            (FuelTracking.vehicle_id == vehicle.id, "fuel records"),
            (Maintenance.vehicle_id == vehicle.id, "maintenance"),
        ],
    )
    db.delete(vehicle)
    db.flush()


# --- drivers --------------------------------------------------------------


def driver_query(q: str | None = None, status: str | None = None) -> Select:
    stmt = _like(select(Driver), q, Driver.name, Driver.mobile_no)
    if status:
        stmt = stmt.where(Driver.status == status)
    return stmt.order_by(Driver.name)


def create_driver(db: Session, payload: DriverCreate) -> Driver:
    _ensure_unique(db, Driver, Driver.mobile_no, payload.mobile_no.strip(), "mobileNo")
    driver = Driver()
    _apply(driver, payload.model_dump())
    db.add(driver)
    db.flush()
    return driver


def update_driver(db: Session, driver: Driver, payload: DriverUpdate) -> Driver:
    data = payload.model_dump(exclude_unset=True)
    if data.get("mobile_no"):
        _ensure_unique(
            db, Driver, Driver.mobile_no, data["mobile_no"].strip(), "mobileNo",
            exclude_id=driver.id,
        )
    _apply(driver, data)
    db.flush()
    return driver


def delete_driver(db: Session, driver: Driver) -> None:
    _ensure_unused(
        db,
        [
            (Trip.driver_id == driver.id, "trips"),
            (DriverBudget.driver_id == driver.id, "driver budgets"),
        ],
    )
    db.delete(driver)
    db.flush()


# --- mechanics ------------------------------------------------------------


def mechanic_query(q: str | None = None) -> Select:
    return _like(select(Mechanic), q, Mechanic.name, Mechanic.phone).order_by(Mechanic.name)


def create_mechanic(db: Session, payload: MechanicCreate) -> Mechanic:
    _ensure_unique(db, Mechanic, Mechanic.phone, payload.phone.strip(), "phone")
    mechanic = Mechanic(
        name=payload.name.strip(),
        phone=payload.phone.strip(),
        status=payload.status,
        certifications=[c.strip() for c in payload.certifications if c.strip()],
    )
    db.add(mechanic)
    db.flush()
    return mechanic


def update_mechanic(db: Session, mechanic: Mechanic, payload: MechanicUpdate) -> Mechanic:
    data = payload.model_dump(exclude_unset=True)
    if data.get("phone"):
        _ensure_unique(
            db, Mechanic, Mechanic.phone, data["phone"].strip(), "phone",
            exclude_id=mechanic.id,
        )
    certifications = data.pop("certifications", None)
    _apply(mechanic, data)
    if certifications is not None:
        mechanic.certifications = [c.strip() for c in certifications if c.strip()]
    db.flush()
    return mechanic


def delete_mechanic(db: Session, mechanic: Mechanic) -> None:
    _ensure_unused(db, [(Maintenance.mechanic_id == mechanic.id, "maintenance")])
    db.delete(mechanic)
    db.flush()


# --- locations ------------------------------------------------------------


def location_query(q: str | None = None) -> Select:
    return _like(select(Location), q, Location.location_name).order_by(Location.location_name)


def create_location(db: Session, payload: LocationCreate) -> Location:
    name = " ".join(payload.location_name.split())
    _ensure_unique(db, Location, Location.location_name, name, "locationName")
    location = Location(location_name=name)
    db.add(location)
    db.flush()
    return location


def update_location(db: Session, location: Location, payload: LocationCreate) -> Location:
    name = " ".join(payload.location_name.split())
    _ensure_unique(
        db, Location, Location.location_name, name, "locationName", exclude_id=location.id
    )
    location.location_name = name
    db.flush()
    return location


def delete_location(db: Session, location: Location) -> None:
    db.delete(location)
    db.flush()


# --- customers ------------------------------------------------------------


def customer_query(q: str | None = None) -> Select:
    stmt = _like(select(Customer), q, Customer.customer_name, Customer.company_name)
    return stmt.order_by(Customer.customer_name)


def _build_products(products) -> list[CustomerProduct]:
    return [
        CustomerProduct(
            product_name=product.product_name.strip(),
            product_rate=product.product_rate,
            categories=[
                ProductCategory(
                    category_name=category.category_name.strip(),
                    category_rate=category.category_rate,
                )
                for category in product.categories
            ],
        )
        for product in products
    ]


def create_customer(db: Session, payload: CustomerCreate) -> Customer:
    customer = Customer()
    _apply(customer, payload.model_dump(exclude={"products"}))
    customer.products = _build_products(payload.products)
    db.add(customer)
    db.flush()
    logger.info(
        "Customer %s created with %s products", customer.id, len(customer.products)
    )
    return customer


def update_customer(db: Session, customer: Customer, payload: CustomerUpdate) -> Customer:
    _apply(customer, payload.model_dump(exclude_unset=True, exclude={"products"}))
    if payload.products is not None:
        customer.products.clear()
        db.flush()
        customer.products.extend(_build_products(payload.products))
    db.flush()
    return customer


def delete_customer(db: Session, customer: Customer) -> None:
    _ensure_unused(db, [(TripRoute.customer_id == customer.id, "trips")])
    db.delete(customer)
    db.flush()
