from datetime import date
import logging

from sqlalchemy import Select, delete, select
from sqlalchemy.orm import Session

from ..errors import DuplicateKeyError, ValidationError
from ..models import Attendance, AttendanceStatusEnum, Driver, Trip
from ..schemas import AttendanceCreate, AttendanceUpdate
from .common import get_or_404

logger = logging.getLogger(__name__)


def attendance_query(driver_id: int | None = None, month: str | None = None) -> Select:
    stmt = select(Attendance)
    if driver_id:
        stmt = stmt.where(Attendance.driver_id == driver_id)
    if month:
        try:
            year, month_no = (int(part) for part in month.split("-", 1))
            first = date(year, month_no, 1)
        except ValueError as exc:
            raise ValidationError("month must look like YYYY-MM", "month") from exc
        following = date(year + month_no // 12, month_no % 12 + 1, 1)
        stmt = stmt.where(Attendance.date >= first, Attendance.date < following)
    return stmt.order_by(Attendance.date.desc(), Attendance.id.desc())


def _find(db: Session, driver_id: int, day: date) -> Attendance | None:
    return db.scalars(
        select(Attendance).where(Attendance.driver_id == driver_id, Attendance.date == day)
    ).first()


def create_attendance(db: Session, payload: AttendanceCreate) -> Attendance:
    get_or_404(db, Driver, payload.driver_id)
    if _find(db, payload.driver_id, payload.date) is not None:
        raise DuplicateKeyError("date", payload.date.isoformat())
    record = Attendance(**payload.model_dump())
    db.add(record)
    db.flush()
    return record


def update_attendance(db: Session, record: Attendance, payload: AttendanceUpdate) -> Attendance:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(record, field, value)
    db.flush()
    return record


def sync_for_trip(db: Session, trip: Trip) -> list[Attendance]:
    """Keep the trip's On Trip rows in step with its driver and dates.

    Only rows tagged with this trip are changed or removed. A date that
    already has a row of its own (entered by hand or by another trip) is left
    alone.
    """
    wanted = {(trip.driver_id, trip_date.date) for trip_date in trip.dates}
    owned = db.scalars(select(Attendance).where(Attendance.trip_id == trip.id)).all()
    for record in owned:
        if (record.driver_id, record.date) not in wanted:
            db.delete(record)
    db.flush()

    records = []
    for driver_id, day in sorted(wanted, key=lambda key: key[1]):
        record = _find(db, driver_id, day)
        if record is None:
            record = Attendance(
                driver_id=driver_id,
                date=day,
                status=AttendanceStatusEnum.ON_TRIP,
                trip_id=trip.id,
                remarks=f"On Trip {trip.trip_no}",
                created_by=trip.created_by,
            )
            db.add(record)
        elif record.trip_id != trip.id:
            continue
        records.append(record)
    db.flush()
    logger.debug("Driver %s marked on trip for %s days", trip.driver_id, len(records))
    return records


def clear_for_trip(db: Session, trip_id: int) -> None:
    db.execute(delete(Attendance).where(Attendance.trip_id == trip_id))
    db.flush()
