"""Per-vehicle fuel ledger.

Fill-ups of a vehicle form a chain through ``FuelTracking.previous_id``. When
a fill-up is recorded the chain head hands its remaining quantity over to the
new row (``carried_forward``) and drops to zero, so at most one row of a
vehicle holds an open remaining quantity: the head.
"""

from decimal import Decimal
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models import (
    AppUser,
    FuelTracking,
    RelatedEntityTypeEnum,
    Transaction,
    TransactionTypeEnum,
    Trip,
    Vehicle,
)
from ..schemas import FuelTrackingCreate, FuelTrackingUpdate
from . import ledger
from .common import ZERO, _money, _quantity, _ratio, get_or_404

logger = logging.getLogger(__name__)


def chain_head(
    db: Session, vehicle_id: int, *, lock: bool = False
) -> FuelTracking | None:
    stmt = (
        select(FuelTracking)
        .where(FuelTracking.vehicle_id == vehicle_id)
        .order_by(FuelTracking.id.desc())
        .limit(1)
    )
    if lock:
        stmt = stmt.with_for_update()
    return db.scalars(stmt).first()


def latest_for_vehicle(db: Session, vehicle_id: int) -> FuelTracking:
    record = chain_head(db, vehicle_id)
    if record is None:
        raise NotFoundError("FuelTracking", vehicle_id)
    return record


def _validate_readings(
    start_km: Decimal, end_km: Decimal, fuel_quantity: Decimal, fuel_rate: Decimal
) -> None:
    if end_km <= start_km:
        raise ValidationError("End KM must be greater than Start KM", "endKm")
    if fuel_quantity <= ZERO:
        raise ValidationError("Fuel quantity must be greater than zero", "fuelQuantity")
    if fuel_rate <= ZERO:
        raise ValidationError("Fuel rate must be greater than zero", "fuelRate")


def _truck_average(start_km, end_km, total_fuel) -> Decimal:
    return _ratio((_quantity(end_km) - _quantity(start_km)) / _quantity(total_fuel))


def _pick(data: dict, key: str, current):
    value = data.get(key)
    return current if value is None else value


def _is_consumed_by_trips(db: Session, record: FuelTracking) -> bool:
    count = db.execute(
        select(func.count(Trip.id)).where(Trip.fuel_tracking_id == record.id)
    ).scalar_one()
    return count > 0


def record_fill_up(db: Session, payload: FuelTrackingCreate) -> FuelTracking:
    start_km = _quantity(payload.start_km)
    end_km = _quantity(payload.end_km)
    fuel_quantity = _quantity(payload.fuel_quantity)
    fuel_rate = _money(payload.fuel_rate)
    _validate_readings(start_km, end_km, fuel_quantity, fuel_rate)
    get_or_404(db, AppUser, payload.app_user_id)
    get_or_404(db, Vehicle, payload.vehicle_id)

    bank = ledger.lock_bank(db, payload.bank_id)
    total_amount = _money(fuel_quantity * fuel_rate)
    ledger.ensure_funds(bank, total_amount)

    previous = chain_head(db, payload.vehicle_id, lock=True)
    carry_forward = _quantity(previous.remaining_fuel_quantity) if previous else ZERO
    total_fuel = fuel_quantity + carry_forward

    record = FuelTracking(
        app_user_id=payload.app_user_id,
        bank_id=bank.id,
        vehicle_id=payload.vehicle_id,
        previous_id=previous.id if previous else None,
        start_km=start_km,
        end_km=end_km,
        fuel_quantity=fuel_quantity,
        carried_forward=carry_forward,
        remaining_fuel_quantity=total_fuel,
        fuel_rate=fuel_rate,
        total_amount=total_amount,
        truck_average=_truck_average(start_km, end_km, total_fuel),
        date=payload.date,
        description=payload.description,
        payment_type=payload.payment_type,
    )
    db.add(record)
    if previous is not None:
        previous.remaining_fuel_quantity = ZERO
        logger.debug(
            "Fill-up %s hands %s over to the next fill-up of vehicle %s",
            previous.id,
            carry_forward,
            payload.vehicle_id,
        )
    db.flush()

    ledger.debit(db, bank, total_amount)
    transaction = ledger.post_transaction(
        db,
        type=TransactionTypeEnum.FUEL,
        amount=total_amount,
        app_user_id=record.app_user_id,
        description=payload.description or f"Fuel purchase - {fuel_quantity} L",
        from_bank=bank,
        related_entity_type=RelatedEntityTypeEnum.FUEL_TRACKING,
        related_entity_id=record.id,
        category="Fuel",
        date=record.date,
    )
    record.transaction_id = transaction.id
    db.flush()
    logger.info(
        "Fill-up %s for vehicle %s: %s L bought, %s L carried forward, average %s",
        record.id,
        record.vehicle_id,
        fuel_quantity,
        carry_forward,
        record.truck_average,
    )
    return record


def update_fill_up(
    db: Session, record: FuelTracking, payload: FuelTrackingUpdate
) -> FuelTracking:
    data = payload.model_dump(exclude_unset=True)
    start_km = _quantity(_pick(data, "start_km", record.start_km))
    end_km = _quantity(_pick(data, "end_km", record.end_km))
    fuel_quantity = _quantity(_pick(data, "fuel_quantity", record.fuel_quantity))
    fuel_rate = _money(_pick(data, "fuel_rate", record.fuel_rate))
    _validate_readings(start_km, end_km, fuel_quantity, fuel_rate)
    if data.get("app_user_id") is not None:
        get_or_404(db, AppUser, data["app_user_id"])

    new_vehicle_id = data.get("vehicle_id") or record.vehicle_id
    vehicle_changed = new_vehicle_id != record.vehicle_id
    quantity_changed = fuel_quantity != _quantity(record.fuel_quantity)
    readings_changed = (
        quantity_changed
        or fuel_rate != _money(record.fuel_rate)
        or start_km != _quantity(record.start_km)
        or end_km != _quantity(record.end_km)
    )

    if (vehicle_changed or readings_changed) and _is_consumed_by_trips(db, record):
        raise ValidationError(
            "Fill-up is already consumed by trips and cannot be changed", "id"
        )
    head = chain_head(db, record.vehicle_id, lock=True)
    is_head = head is not None and head.id == record.id
    if (vehicle_changed or quantity_changed) and not is_head:
        raise ValidationError(
            "Only the latest fill-up of a vehicle can change vehicle or quantity",
            "vehicleId" if vehicle_changed else "fuelQuantity",
        )

    old_bank = ledger.lock_bank(db, record.bank_id)
    new_bank_id = data.get("bank_id") or record.bank_id
    new_bank = old_bank if new_bank_id == old_bank.id else ledger.lock_bank(db, new_bank_id)
    new_total = _money(fuel_quantity * fuel_rate)
    if new_bank is old_bank:
        delta = new_total - _money(record.total_amount)
        if delta > ZERO:
            ledger.debit(db, old_bank, delta)
        elif delta < ZERO:
            ledger.credit(db, old_bank, -delta)
    else:
        ledger.ensure_funds(new_bank, new_total)
        ledger.credit(db, old_bank, record.total_amount)
        ledger.debit(db, new_bank, new_total)

    if quantity_changed:
        delta = fuel_quantity - _quantity(record.fuel_quantity)
        record.remaining_fuel_quantity = max(
            ZERO, _quantity(record.remaining_fuel_quantity) + delta
        )

    if vehicle_changed:
        get_or_404(db, Vehicle, new_vehicle_id)
        _move_to_vehicle(db, record, new_vehicle_id)

    record.start_km = start_km
    record.end_km = end_km
    record.fuel_quantity = fuel_quantity
    record.fuel_rate = fuel_rate
    record.total_amount = new_total
    record.truck_average = _truck_average(
        start_km, end_km, fuel_quantity + _quantity(record.carried_forward)
    )
    record.bank_id = new_bank.id
    for field in ("app_user_id", "date", "description", "payment_type"):
        if data.get(field) is not None:
            setattr(record, field, data[field])
    db.flush()

    transaction = db.get(Transaction, record.transaction_id) if record.transaction_id else None
    if transaction is not None:
        transaction.amount = new_total
        transaction.from_bank_id = new_bank.id
        transaction.app_user_id = record.app_user_id
        transaction.balance_after = new_bank.balance
        transaction.date = record.date
        transaction.description = record.description or f"Fuel purchase - {fuel_quantity} L"
    db.flush()
    logger.info("Fill-up %s updated, total amount %s", record.id, new_total)
    return record


def _move_to_vehicle(db: Session, record: FuelTracking, vehicle_id: int) -> None:
    target_head = chain_head(db, vehicle_id, lock=True)
    if target_head is not None and target_head.id > record.id:
        raise ValidationError(
            "Target vehicle has a newer fill-up; record a new fill-up instead",
            "vehicleId",
        )

    # Give the carry-forward back to the old vehicle's previous fill-up.
    old_carry = _quantity(record.carried_forward)
    if record.previous_id is not None:
        previous = get_or_404(db, FuelTracking, record.previous_id, lock=True)
        previous.remaining_fuel_quantity = _quantity(previous.remaining_fuel_quantity) + old_carry

    new_carry = _quantity(target_head.remaining_fuel_quantity) if target_head else ZERO
    if target_head is not None:
        target_head.remaining_fuel_quantity = ZERO
    record.remaining_fuel_quantity = (
        max(ZERO, _quantity(record.remaining_fuel_quantity) - old_carry) + new_carry
    )
    record.previous_id = target_head.id if target_head else None
    record.carried_forward = new_carry
    logger.debug(
        "Fill-up %s moved from vehicle %s to %s (carry %s -> %s)",
        record.id,
        record.vehicle_id,
        vehicle_id,
        old_carry,
        new_carry,
    )
    record.vehicle_id = vehicle_id


def delete_fill_up(db: Session, record: FuelTracking) -> None:
    head = chain_head(db, record.vehicle_id, lock=True)
    if head is None or head.id != record.id:
        raise ValidationError("Only the latest fill-up of a vehicle can be deleted", "id")
    if _is_consumed_by_trips(db, record):
        raise ValidationError("Fill-up is referenced by trips and cannot be deleted", "id")

    if record.previous_id is not None:
        previous = get_or_404(db, FuelTracking, record.previous_id, lock=True)
        previous.remaining_fuel_quantity = _quantity(
            previous.remaining_fuel_quantity
        ) + _quantity(record.carried_forward)

    bank = ledger.lock_bank(db, record.bank_id)
    ledger.credit(db, bank, record.total_amount)
    transaction_id = record.transaction_id
    record.transaction_id = None
    db.flush()
    ledger.remove_transaction(db, transaction_id)
    db.delete(record)
    db.flush()
    logger.info(
        "Fill-up %s deleted, %s refunded to bank %s", record.id, record.total_amount, bank.id
    )


def draw_fuel(db: Session, record: FuelTracking, amount: Decimal) -> Decimal:
    """Consume ``amount`` litres for a trip; return what came off the open remainder."""
    amount = _quantity(amount)
    record.fuel_quantity = _quantity(record.fuel_quantity) - amount
    head = chain_head(db, record.vehicle_id, lock=True)
    drawn = ZERO
    if head is not None:
        drawn = min(_quantity(head.remaining_fuel_quantity), amount)
        drawn = max(drawn, ZERO)
        head.remaining_fuel_quantity = _quantity(head.remaining_fuel_quantity) - drawn
    db.flush()
    return drawn


def return_fuel(db: Session, record: FuelTracking, amount: Decimal, drawn: Decimal) -> None:
    record.fuel_quantity = _quantity(record.fuel_quantity) + _quantity(amount)
    head = chain_head(db, record.vehicle_id, lock=True)
    if head is not None:
        head.remaining_fuel_quantity = _quantity(head.remaining_fuel_quantity) + _quantity(
            drawn
        )
    db.flush()
