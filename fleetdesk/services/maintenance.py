"""Kilometre-based maintenance tracking.

A schedule row accumulates kilometres for one service category of one
vehicle. The monitor sweep refreshes ``total_km`` from the vehicle's latest
completed trip, or from the schedule's own ``end_km`` when that is further,
and moves the row Pending -> Due -> Overdue. The first time a schedule
becomes Due an alert row (``is_alert``) is spawned for the
accept/decline workflow; alerts never spawn alerts of their own.
"""

from decimal import Decimal
import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import InvalidStateError
from ..models import (
    AppUser,
    Bank,
    Maintenance,
    MaintenanceStatusEnum,
    Mechanic,
    NotificationStatusEnum,
    Trip,
    TripStatusEnum,
    Vehicle,
)
from ..models.base import utcnow
from ..schemas import EntryCreate, MaintenanceCreate, MaintenanceUpdate
from . import ledger
from .common import ZERO, _decimal, _quantity, get_or_404

logger = logging.getLogger(__name__)

OPEN_STATUSES = (
    MaintenanceStatusEnum.PENDING,
    MaintenanceStatusEnum.DUE,
    MaintenanceStatusEnum.OVERDUE,
)


def status_for(total_km: Decimal, target_km: Decimal) -> MaintenanceStatusEnum:
    total_km = _decimal(total_km)
    target_km = _decimal(target_km)
    if total_km > target_km * _decimal(settings.maintenance_overdue_factor):
        return MaintenanceStatusEnum.OVERDUE
    if total_km >= target_km:
        return MaintenanceStatusEnum.DUE
    return MaintenanceStatusEnum.PENDING


def create_schedule(db: Session, payload: MaintenanceCreate) -> Maintenance:
    get_or_404(db, AppUser, payload.app_user_id)
    get_or_404(db, Bank, payload.bank_id)
    get_or_404(db, Vehicle, payload.vehicle_id)
    if payload.mechanic_id is not None:
        get_or_404(db, Mechanic, payload.mechanic_id)

    start_km = _quantity(payload.start_km)
    end_km = _quantity(payload.end_km) if payload.end_km is not None else start_km
    total_km = max(ZERO, end_km - start_km)
    status = (
        MaintenanceStatusEnum.DUE
        if total_km >= _decimal(payload.target_km)
        else MaintenanceStatusEnum.PENDING
    )
    schedule = Maintenance(
        app_user_id=payload.app_user_id,
        bank_id=payload.bank_id,
        vehicle_id=payload.vehicle_id,
        mechanic_id=payload.mechanic_id,
        category=payload.category.strip(),
        category_amount=payload.category_amount,
        start_km=start_km,
        target_km=_quantity(payload.target_km),
        end_km=end_km,
        total_km=total_km,
        status=status,
        created_by=payload.created_by or payload.app_user_id,
    )
    db.add(schedule)
    db.flush()
    logger.info(
        "Maintenance %s (%s) scheduled for vehicle %s, status %s",
        schedule.id,
        schedule.category,
        schedule.vehicle_id,
        schedule.status.value,
    )
    return schedule


def update_schedule(
    db: Session, record: Maintenance, payload: MaintenanceUpdate
) -> Maintenance:
    if record.status == MaintenanceStatusEnum.COMPLETED:
        raise InvalidStateError("Completed maintenance cannot be edited")
    data = payload.model_dump(exclude_unset=True)
    if data.get("bank_id") is not None:
        get_or_404(db, Bank, data["bank_id"])
    if data.get("mechanic_id") is not None:
        get_or_404(db, Mechanic, data["mechanic_id"])
    for field, value in data.items():
        if value is not None:
            setattr(record, field, value)
    record.total_km = max(ZERO, _quantity(record.end_km) - _quantity(record.start_km))
    record.status = status_for(record.total_km, record.target_km)
    db.flush()
    return record


def delete_schedule(db: Session, record: Maintenance) -> None:
    db.execute(delete(Maintenance).where(Maintenance.schedule_id == record.id))
    db.delete(record)
    db.flush()


def pending_notifications(db: Session) -> list[Maintenance]:
    return list(
        db.scalars(
            select(Maintenance)
            .where(
                Maintenance.is_alert.is_(True),
                Maintenance.status.in_(
                    [MaintenanceStatusEnum.DUE, MaintenanceStatusEnum.OVERDUE]
                ),
                Maintenance.notification_status.is_(None),
            )
            .order_by(Maintenance.created_at.desc(), Maintenance.id.desc())
        )
    )


def _latest_vehicle_km(db: Session, vehicle_id: int) -> Decimal | None:
    return db.scalars(
        select(Trip.end_km)
        .where(Trip.vehicle_id == vehicle_id, Trip.status == TripStatusEnum.COMPLETED)
        .order_by(Trip.id.desc())
        .limit(1)
    ).first()


def monitor(db: Session, vehicle_id: int | None = None) -> tuple[int, list[Maintenance]]:
    """Refresh open schedules; return how many were checked and which changed."""
    stmt = (
        select(Maintenance)
        .where(
            Maintenance.is_alert.is_(False),
            Maintenance.is_completed.is_(False),
            Maintenance.status.in_(OPEN_STATUSES),
        )
        .order_by(Maintenance.id)
        .with_for_update()
    )
    if vehicle_id is not None:
        stmt = stmt.where(Maintenance.vehicle_id == vehicle_id)
    schedules = list(db.scalars(stmt))

    now = utcnow()
    updated: list[Maintenance] = []
    km_by_vehicle: dict[int, Decimal | None] = {}
    for schedule in schedules:
        if schedule.vehicle_id not in km_by_vehicle:
            km_by_vehicle[schedule.vehicle_id] = _latest_vehicle_km(db, schedule.vehicle_id)
        current_km = km_by_vehicle[schedule.vehicle_id]
        schedule.last_checked_at = now
        # The schedule's own reading counts until a completed trip passes it.
        if current_km is None or _quantity(current_km) < _quantity(schedule.end_km):
            current_km = schedule.end_km

        total_km = max(ZERO, _quantity(current_km) - _quantity(schedule.start_km))
        new_status = status_for(total_km, schedule.target_km)
        if new_status == MaintenanceStatusEnum.PENDING:
            # Kilometres only move forward; a schedule is never pulled back.
            new_status = schedule.status
        changed = new_status != schedule.status or total_km != _quantity(schedule.total_km)
        schedule.end_km = _quantity(current_km)
        schedule.total_km = total_km

        if (
            new_status != MaintenanceStatusEnum.PENDING
            and not schedule.is_notification_sent
        ):
            alert = _spawn_alert(db, schedule, new_status)
            schedule.is_notification_sent = True
            updated.append(alert)
        elif new_status == MaintenanceStatusEnum.OVERDUE:
            _escalate_open_alerts(db, schedule)

        schedule.status = new_status
        if changed:
            updated.append(schedule)
    db.flush()
    logger.info(
        "Maintenance sweep checked %s schedules, %s records changed",
        len(schedules),
        len(updated),
    )
    return len(schedules), updated


def _spawn_alert(
    db: Session, schedule: Maintenance, status: MaintenanceStatusEnum
) -> Maintenance:
    alert = Maintenance(
        app_user_id=schedule.app_user_id,
        bank_id=schedule.bank_id,
        vehicle_id=schedule.vehicle_id,
        mechanic_id=schedule.mechanic_id,
        schedule_id=schedule.id,
        category=schedule.category,
        category_amount=schedule.category_amount,
        start_km=schedule.start_km,
        target_km=schedule.target_km,
        end_km=schedule.end_km,
        total_km=schedule.total_km,
        status=status,
        is_alert=True,
        is_notification_sent=True,
        created_by=schedule.created_by,
    )
    db.add(alert)
    db.flush()
    logger.info(
        "Maintenance %s is %s at %s km, alert %s raised",
        schedule.id,
        status.value,
        schedule.total_km,
        alert.id,
    )
    return alert


def _escalate_open_alerts(db: Session, schedule: Maintenance) -> None:
    alerts = db.scalars(
        select(Maintenance).where(
            Maintenance.schedule_id == schedule.id,
            Maintenance.status == MaintenanceStatusEnum.DUE,
            Maintenance.notification_status.is_(None),
        )
    )
    for alert in alerts:
        alert.status = MaintenanceStatusEnum.OVERDUE
        alert.end_km = schedule.end_km
        alert.total_km = schedule.total_km


def accept(db: Session, record: Maintenance) -> Maintenance:
    record = get_or_404(db, Maintenance, record.id, lock=True)
    if record.status == MaintenanceStatusEnum.COMPLETED or record.is_completed:
        raise InvalidStateError("Maintenance is already completed")

    expense = ledger.create_expense(
        db,
        EntryCreate(
            app_user_id=record.app_user_id,
            bank_id=record.bank_id,
            category=f"Maintenance - {record.category}",
            amount=record.category_amount,
            description=f"Maintenance service for vehicle {record.vehicle_id}",
            date=utcnow(),
        ),
    )
    now = utcnow()
    record.status = MaintenanceStatusEnum.COMPLETED
    record.is_completed = True
    record.completed_at = now
    record.notification_status = NotificationStatusEnum.ACCEPTED
    record.is_notification_sent = True
    record.expense_id = expense.id
    record.transaction_id = expense.transaction_id

    if record.schedule_id is not None:
        # Service done: the schedule starts counting again from here.
        schedule = get_or_404(db, Maintenance, record.schedule_id, lock=True)
        if not schedule.is_completed:
            schedule.start_km = record.end_km
            schedule.end_km = record.end_km
            schedule.total_km = ZERO
            schedule.status = MaintenanceStatusEnum.PENDING
            schedule.is_notification_sent = False
    db.flush()
    logger.info(
        "Maintenance %s accepted, expense %s of %s",
        record.id,
        expense.id,
        expense.amount,
    )
    return record


def decline(db: Session, record: Maintenance) -> Maintenance:
    record = get_or_404(db, Maintenance, record.id, lock=True)
    if record.status == MaintenanceStatusEnum.COMPLETED or record.is_completed:
        raise InvalidStateError("Maintenance is already completed")

    record.status = MaintenanceStatusEnum.PENDING
    record.notification_status = NotificationStatusEnum.DECLINED
    record.is_notification_sent = False
    record.declined_at = utcnow()
    if record.schedule_id is not None:
        schedule = get_or_404(db, Maintenance, record.schedule_id, lock=True)
        if not schedule.is_completed:
            schedule.status = MaintenanceStatusEnum.PENDING
            schedule.is_notification_sent = False
    db.flush()
    logger.info("Maintenance %s declined", record.id)
    return record
