from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Attendance
from ..schemas import AttendanceCreate, AttendanceRead, AttendanceUpdate, Message, Page
from ..services import attendance as attendance_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[AttendanceRead])
def list_attendance(
    driver_id: int | None = Query(None, alias="driverId"),
    month: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, attendance_service.attendance_query(driver_id, month), page, limit)


@router.post("", response_model=AttendanceRead, status_code=201)
def create_attendance(
    payload: AttendanceCreate, db: Session = Depends(get_db)
) -> Attendance:
    record = attendance_service.create_attendance(db, payload)
    db.commit()
    db.refresh(record)
    return record


@router.get("/{record_id}", response_model=AttendanceRead)
def get_attendance(record_id: int, db: Session = Depends(get_db)) -> Attendance:
    return get_or_404(db, Attendance, record_id)


@router.put("/{record_id}", response_model=AttendanceRead)
def update_attendance(
    record_id: int, payload: AttendanceUpdate, db: Session = Depends(get_db)
) -> Attendance:
    record = attendance_service.update_attendance(
        db, get_or_404(db, Attendance, record_id), payload
    )
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{record_id}", response_model=Message)
def delete_attendance(record_id: int, db: Session = Depends(get_db)) -> dict:
    db.delete(get_or_404(db, Attendance, record_id))
    db.commit()
    return {"message": "Attendance deleted"}
