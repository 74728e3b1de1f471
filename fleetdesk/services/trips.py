"""Trip orchestration.

Creating or changing a trip fans out into the other ledgers:

* the vehicle's fuel ledger gives the truck average and fuel rate used to
  price the trip, and gives up the fuel the trip needs;
* the driver's current budget allocation is charged with the route expenses;
* every route gets a lorry-receipt invoice ``LR{trip_no}{route_number}``;
* every Completed route credits its bank with an Income (the advance when
  one was taken, otherwise the full route amount) recorded by an INCOME
  transaction plus a mirror BANK_UPDATE transaction;
* the driver is marked On Trip once a route completes, on every trip date
  that has no attendance of its own.

All of it runs in the caller's database transaction; nothing here commits.
"""

from datetime import datetime, time
from decimal import Decimal
import logging

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from ..errors import DuplicateKeyError, NoFuelRecordError, ValidationError
from ..models import (
    AppUser,
    Bank,
    Customer,
    Driver,
    FuelTracking,
    Income,
    Invoice,
    InvoiceRow,
    InvoiceStatusEnum,
    RelatedEntityTypeEnum,
    RouteExpense,
    RouteStatusEnum,
    Transaction,
    TransactionTypeEnum,
    Trip,
    TripDate,
    TripRoute,
    TripStatusEnum,
    Vehicle,
)
from ..schemas import EntryCreate, TripCreate, TripRouteIn, TripUpdate
from . import attendance as attendance_service
from . import budget as budget_service
from . import fuel as fuel_service
from . import invoices as invoice_service
from . import ledger
from . import maintenance as maintenance_service
from .common import ZERO, _money, _quantity, get_or_404
from .sequences import generate_trip_no

logger = logging.getLogger(__name__)

TRIP_INCOME_CATEGORY = "Trip Income"

REQUIRED_ROUTE_FIELDS = (
    ("customer_id", "customerId"),
    ("user_id", "userId"),
    ("bank_id", "bankId"),
    ("payment_type", "paymentType"),
    ("start_location", "startLocation"),
    ("end_location", "endLocation"),
    ("product_name", "productName"),
    ("weight", "weight"),
    ("rate", "rate"),
)


def trip_query(
    status: str | None = None,
    driver_id: int | None = None,
    vehicle_id: int | None = None,
) -> Select:
    stmt = select(Trip)
    if status and status != "all":
        stmt = stmt.where(Trip.status == status)
    if driver_id:
        stmt = stmt.where(Trip.driver_id == driver_id)
    if vehicle_id:
        stmt = stmt.where(Trip.vehicle_id == vehicle_id)
    return stmt.order_by(Trip.created_at.desc(), Trip.id.desc())


def latest_for_vehicle(db: Session, vehicle_id: int) -> Trip | None:
    return db.scalars(
        select(Trip).where(Trip.vehicle_id == vehicle_id).order_by(Trip.id.desc()).limit(1)
    ).first()


# --- building ----------------------------------------------------------


def _validate_routes(routes: list[TripRouteIn]) -> None:
    if not routes:
        raise ValidationError(
            "At least one route is required", "routeWiseExpenseBreakdown"
        )
    for index, route in enumerate(routes, start=1):
        missing = [
            wire_name
            for attr, wire_name in REQUIRED_ROUTE_FIELDS
            if getattr(route, attr) in (None, "")
        ]
        if missing:
            raise ValidationError(
                f"Route {index} missing: {', '.join(missing)}",
                "routeWiseExpenseBreakdown",
            )


def _build_routes(db: Session, routes: list[TripRouteIn]) -> list[TripRoute]:
    built = []
    seen: set[int] = set()
    for index, route in enumerate(routes, start=1):
        get_or_404(db, Customer, route.customer_id)
        get_or_404(db, AppUser, route.user_id)
        get_or_404(db, Bank, route.bank_id)
        number = route.route_number or index
        if number in seen:
            raise ValidationError(
                f"Route number {number} is used twice", "routeWiseExpenseBreakdown"
            )
        seen.add(number)

        expenses = [
            RouteExpense(
                category=expense.category,
                amount=_money(expense.amount),
                quantity=_quantity(expense.quantity),
                total=_money(
                    expense.total
                    if expense.total is not None
                    else _money(expense.amount) * _quantity(expense.quantity)
                ),
                description=expense.description,
            )
            for expense in route.expenses
        ]
        weight = _quantity(route.weight)
        rate = _money(route.rate)
        built.append(
            TripRoute(
                route_number=number,
                start_location=route.start_location.strip(),
                end_location=route.end_location.strip(),
                product_name=route.product_name.strip(),
                weight=weight,
                rate=rate,
                route_amount=_money(
                    route.route_amount if route.route_amount is not None else weight * rate
                ),
                advance_amount=_money(route.advance_amount),
                total_expense=sum((expense.total for expense in expenses), ZERO),
                user_id=route.user_id,
                customer_id=route.customer_id,
                bank_id=route.bank_id,
                payment_type=route.payment_type,
                route_status=route.route_status,
                expenses=expenses,
            )
        )
    return built


def _price_fuel(trip: Trip, record: FuelTracking) -> Decimal:
    """Set distance and fuel figures from ``record``; return the diesel cost."""
    total_km = _quantity(trip.end_km) - _quantity(trip.start_km)
    if total_km < ZERO:
        raise ValidationError("End KM must not be less than Start KM", "endKm")
    average = _quantity(record.truck_average) or Decimal("1")
    trip.total_km = total_km
    trip.fuel_tracking_id = record.id
    trip.fuel_needed = _quantity(total_km / average)
    return _money(trip.fuel_needed * _money(record.fuel_rate))


def _apply_totals(trip: Trip, diesel_cost: Decimal) -> None:
    trip.trip_route_cost = sum((_money(r.route_amount) for r in trip.routes), ZERO)
    trip.trip_expenses = sum((_money(r.total_expense) for r in trip.routes), ZERO)
    trip.trip_diesel_cost = diesel_cost
    trip.remaining_amount = trip.trip_route_cost - trip.trip_expenses - diesel_cost


def _set_route_statuses(trip: Trip, status: RouteStatusEnum) -> None:
    for route in trip.routes:
        route.route_status = status


# --- fuel and budget bookkeeping ----------------------------------------


def _consume_fuel(db: Session, trip: Trip) -> None:
    record = get_or_404(db, FuelTracking, trip.fuel_tracking_id, lock=True)
    trip.fuel_drawn = fuel_service.draw_fuel(db, record, trip.fuel_needed)
    trip.fuel_consumed = True


def _release_fuel(db: Session, trip: Trip) -> None:
    if not trip.fuel_consumed or trip.fuel_tracking_id is None:
        return
    record = get_or_404(db, FuelTracking, trip.fuel_tracking_id, lock=True)
    fuel_service.return_fuel(db, record, trip.fuel_needed, trip.fuel_drawn)
    trip.fuel_drawn = ZERO
    trip.fuel_consumed = False


def _charge_budget(db: Session, trip: Trip) -> None:
    budget = budget_service.deduct_trip_expenses(db, trip.driver_id, trip.trip_expenses)
    trip.driver_budget_id = budget.id if budget is not None else None
    trip.budget_deducted = _money(trip.trip_expenses) if budget is not None else ZERO


def _refund_budget(db: Session, trip: Trip) -> None:
    if trip.driver_budget_id is not None:
        budget_service.restore_trip_expenses(db, trip.driver_budget_id, trip.budget_deducted)
    trip.driver_budget_id = None
    trip.budget_deducted = ZERO


# --- cascade ------------------------------------------------------------


def _first_day(trip: Trip) -> datetime:
    return datetime.combine(trip.dates[0].date, time.min)


def _sync_invoices(db: Session, trip: Trip) -> None:
    vehicle = get_or_404(db, Vehicle, trip.vehicle_id)
    route_numbers = {route.route_number for route in trip.routes}
    stale = db.scalars(
        select(Invoice).where(
            Invoice.trip_id == trip.id, Invoice.route_number.not_in(route_numbers)
        )
    )
    for invoice in stale:
        db.delete(invoice)

    for route in trip.routes:
        lr_no = f"LR{trip.trip_no}{route.route_number}"
        invoice = db.scalars(select(Invoice).where(Invoice.lr_no == lr_no)).first()
        if invoice is not None and invoice.trip_id != trip.id:
            raise DuplicateKeyError("lrNo", lr_no)
        completed = route.route_status == RouteStatusEnum.COMPLETED
        if invoice is not None and completed and invoice.status == InvoiceStatusEnum.PAID:
            continue
        if invoice is None:
            invoice = Invoice(lr_no=lr_no, trip_id=trip.id, route_number=route.route_number)
            db.add(invoice)

        customer = get_or_404(db, Customer, route.customer_id)
        invoice.date = trip.dates[0].date
        invoice.from_location = route.start_location
        invoice.to_location = route.end_location
        invoice.customer_name = customer.customer_name
        invoice.tax_percent = ZERO
        invoice.advance_amount = _money(route.advance_amount)
        if not invoice.rows:
            invoice.rows.append(InvoiceRow(product=route.product_name, truck_no=""))
        row = invoice.rows[0]
        row.product = route.product_name
        row.truck_no = vehicle.registration_number
        row.weight = route.weight
        row.rate = route.rate
        row.total = _money(route.route_amount)
        invoice_service.apply_totals(invoice)

        if not completed:
            invoice.status = InvoiceStatusEnum.PENDING
        elif invoice.advance_amount > ZERO:
            invoice.status = InvoiceStatusEnum.UNPAID
        else:
            invoice.status = InvoiceStatusEnum.PAID
    db.flush()


def _route_income_amount(route: TripRoute) -> Decimal:
    advance = _money(route.advance_amount)
    return advance if advance > ZERO else _money(route.route_amount)


def _credit_route(db: Session, trip: Trip, route: TripRoute) -> Income:
    amount = _route_income_amount(route)
    prefix = "Advance income" if _money(route.advance_amount) > ZERO else "Income"
    day = _first_day(trip)
    income = ledger.create_income(
        db,
        EntryCreate(
            app_user_id=route.user_id,
            bank_id=route.bank_id,
            category=TRIP_INCOME_CATEGORY,
            amount=amount,
            description=f"{prefix} from trip {trip.trip_no} - Route {route.route_number}",
            date=day,
        ),
        trip_id=trip.id,
        route_number=route.route_number,
    )
    bank = ledger.lock_bank(db, route.bank_id)
    ledger.post_transaction(
        db,
        type=TransactionTypeEnum.BANK_UPDATE,
        amount=amount,
        app_user_id=route.user_id,
        description=f"Bank balance update for trip {trip.trip_no} - Route {route.route_number}",
        to_bank=bank,
        related_entity_type=RelatedEntityTypeEnum.BANK,
        related_entity_id=bank.id,
        category="Bank Update",
        date=day,
        mirror_of=db.get(Transaction, income.transaction_id),
    )
    return income


def _sync_income(db: Session, trip: Trip) -> None:
    existing = {
        income.route_number: income
        for income in db.scalars(select(Income).where(Income.trip_id == trip.id))
    }
    for route in trip.routes:
        income = existing.pop(route.route_number, None)
        wanted = route.route_status == RouteStatusEnum.COMPLETED
        if income is not None and (
            not wanted
            or _money(income.amount) != _route_income_amount(route)
            or income.bank_id != route.bank_id
        ):
            ledger.delete_income(db, income)
            income = None
        if wanted and income is None and _route_income_amount(route) > ZERO:
            _credit_route(db, trip, route)
    for income in existing.values():
        ledger.delete_income(db, income)


def _run_cascade(db: Session, trip: Trip) -> None:
    _sync_invoices(db, trip)
    _sync_income(db, trip)
    if any(route.route_status == RouteStatusEnum.COMPLETED for route in trip.routes):
        attendance_service.sync_for_trip(db, trip)
    else:
        attendance_service.clear_for_trip(db, trip.id)


def _remove_trip_records(db: Session, trip: Trip) -> None:
    for income in db.scalars(select(Income).where(Income.trip_id == trip.id)).all():
        ledger.delete_income(db, income)
    for invoice in db.scalars(select(Invoice).where(Invoice.trip_id == trip.id)).all():
        db.delete(invoice)
    attendance_service.clear_for_trip(db, trip.id)
    db.flush()


# --- operations ---------------------------------------------------------


def create_trip(db: Session, payload: TripCreate) -> Trip:
    if not payload.created_by:
        raise ValidationError("createdBy field is required", "createdBy")
    _validate_routes(payload.routes)
    get_or_404(db, AppUser, payload.created_by)
    driver = get_or_404(db, Driver, payload.driver_id)
    vehicle = get_or_404(db, Vehicle, payload.vehicle_id)

    record = fuel_service.chain_head(db, vehicle.id, lock=True)
    if record is None:
        raise NoFuelRecordError(vehicle.id)

    trip = Trip(
        trip_no=generate_trip_no(db),
        driver_id=driver.id,
        vehicle_id=vehicle.id,
        start_km=_quantity(payload.start_km),
        end_km=_quantity(payload.end_km),
        status=payload.status,
        remarks=payload.remarks,
        created_by=payload.created_by,
        dates=[TripDate(date=day) for day in sorted(set(payload.dates))],
        routes=_build_routes(db, payload.routes),
    )
    if trip.status == TripStatusEnum.COMPLETED:
        _set_route_statuses(trip, RouteStatusEnum.COMPLETED)
    _apply_totals(trip, _price_fuel(trip, record))
    db.add(trip)
    db.flush()

    _charge_budget(db, trip)
    _consume_fuel(db, trip)
    _run_cascade(db, trip)
    if trip.status == TripStatusEnum.COMPLETED:
        maintenance_service.monitor(db, vehicle_id=trip.vehicle_id)
    db.flush()
    logger.info(
        "Trip %s created: route cost %s, expenses %s, diesel %s, remaining %s",
        trip.trip_no,
        trip.trip_route_cost,
        trip.trip_expenses,
        trip.trip_diesel_cost,
        trip.remaining_amount,
    )
    return trip


def update_trip(db: Session, trip: Trip, payload: TripUpdate) -> Trip:
    data = payload.model_dump(exclude_unset=True)
    if payload.routes is not None:
        _validate_routes(payload.routes)

    was_completed = trip.status == TripStatusEnum.COMPLETED
    new_status = payload.status or trip.status
    leaving_completed = was_completed and new_status != TripStatusEnum.COMPLETED
    should_consume = trip.fuel_consumed
    if leaving_completed:
        should_consume = False
    elif new_status == TripStatusEnum.COMPLETED and not was_completed:
        should_consume = True

    old_vehicle_id = trip.vehicle_id
    old_driver_id = trip.driver_id
    old_km = (_quantity(trip.start_km), _quantity(trip.end_km))

    if leaving_completed:
        _remove_trip_records(db, trip)

    if data.get("vehicle_id") is not None:
        trip.vehicle_id = get_or_404(db, Vehicle, data["vehicle_id"]).id
    if data.get("driver_id") is not None:
        trip.driver_id = get_or_404(db, Driver, data["driver_id"]).id
    if data.get("start_km") is not None:
        trip.start_km = _quantity(data["start_km"])
    if data.get("end_km") is not None:
        trip.end_km = _quantity(data["end_km"])
    if "remarks" in data:
        trip.remarks = data["remarks"]
    if payload.dates is not None:
        trip.dates.clear()
        db.flush()
        trip.dates.extend(TripDate(date=day) for day in sorted(set(payload.dates)))
    if payload.routes is not None:
        new_routes = _build_routes(db, payload.routes)
        trip.routes.clear()
        db.flush()
        trip.routes.extend(new_routes)

    trip.status = new_status
    if new_status == TripStatusEnum.COMPLETED:
        _set_route_statuses(trip, RouteStatusEnum.COMPLETED)
    elif leaving_completed:
        _set_route_statuses(trip, RouteStatusEnum.PENDING)

    vehicle_changed = trip.vehicle_id != old_vehicle_id
    km_changed = (_quantity(trip.start_km), _quantity(trip.end_km)) != old_km
    if trip.fuel_consumed and (vehicle_changed or km_changed or not should_consume):
        _release_fuel(db, trip)

    if vehicle_changed or trip.fuel_tracking_id is None:
        record = fuel_service.chain_head(db, trip.vehicle_id, lock=True)
        if record is None:
            raise NoFuelRecordError(trip.vehicle_id)
    else:
        record = get_or_404(db, FuelTracking, trip.fuel_tracking_id)
    _apply_totals(trip, _price_fuel(trip, record))

    if should_consume and not trip.fuel_consumed:
        _consume_fuel(db, trip)
    if trip.driver_id != old_driver_id or _money(trip.trip_expenses) != _money(
        trip.budget_deducted
    ):
        _refund_budget(db, trip)
        _charge_budget(db, trip)
    db.flush()

    _run_cascade(db, trip)
    if new_status == TripStatusEnum.COMPLETED:
        maintenance_service.monitor(db, vehicle_id=trip.vehicle_id)
    db.flush()
    logger.info(
        "Trip %s updated: status %s, remaining %s",
        trip.trip_no,
        trip.status.value,
        trip.remaining_amount,
    )
    return trip


def delete_trip(db: Session, trip: Trip) -> None:
    _remove_trip_records(db, trip)
    _release_fuel(db, trip)
    _refund_budget(db, trip)
    db.flush()
    db.delete(trip)
    db.flush()
    logger.info("Trip %s deleted", trip.trip_no)
