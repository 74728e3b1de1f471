from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..models import Maintenance, MaintenanceStatusEnum
from ..schemas import (
    MaintenanceCreate,
    MaintenanceRead,
    MaintenanceUpdate,
    Message,
    MonitorResult,
    Page,
)
from ..services import maintenance as maintenance_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[MaintenanceRead])
def list_maintenance(
    vehicle_id: int | None = Query(None, alias="vehicleId"),
    status: MaintenanceStatusEnum | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    stmt = select(Maintenance).order_by(Maintenance.created_at.desc(), Maintenance.id.desc())
    if vehicle_id:
        stmt = stmt.where(Maintenance.vehicle_id == vehicle_id)
    if status:
        stmt = stmt.where(Maintenance.status == status)
    return paginate(db, stmt, page, limit)


@router.post("", response_model=MaintenanceRead, status_code=201)
def create_maintenance(
    payload: MaintenanceCreate, db: Session = Depends(get_db)
) -> Maintenance:
    record = maintenance_service.create_schedule(db, payload)
    db.commit()
    db.refresh(record)
    return record


@router.get("/notifications", response_model=list[MaintenanceRead])
def notifications(db: Session = Depends(get_db)) -> list:
    return maintenance_service.pending_notifications(db)


@router.get("/monitor", response_model=MonitorResult)
def monitor(
    vehicle_id: int | None = Query(None, alias="vehicleId"),
    db: Session = Depends(get_db),
) -> dict:
    checked, updated = maintenance_service.monitor(db, vehicle_id=vehicle_id)
    db.commit()
    return {
        "message": "Maintenance check completed",
        "total_checked": checked,
        "updated_records": updated,
        "poll_seconds": settings.maintenance_poll_seconds,
    }


@router.get("/{record_id}", response_model=MaintenanceRead)
def get_maintenance(record_id: int, db: Session = Depends(get_db)) -> Maintenance:
    return get_or_404(db, Maintenance, record_id)


@router.put("/{record_id}", response_model=MaintenanceRead)
def update_maintenance(
    record_id: int, payload: MaintenanceUpdate, db: Session = Depends(get_db)
) -> Maintenance:
    record = maintenance_service.update_schedule(
        db, get_or_404(db, Maintenance, record_id, lock=True), payload
    )
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{record_id}", response_model=Message)
def delete_maintenance(record_id: int, db: Session = Depends(get_db)) -> dict:
    maintenance_service.delete_schedule(db, get_or_404(db, Maintenance, record_id))
    db.commit()
    return {"message": "Maintenance deleted"}


@router.post("/{record_id}/accept", response_model=MaintenanceRead)
def accept_maintenance(record_id: int, db: Session = Depends(get_db)) -> Maintenance:
    record = maintenance_service.accept(db, get_or_404(db, Maintenance, record_id))
    db.commit()
    db.refresh(record)
    return record


@router.post("/{record_id}/decline", response_model=MaintenanceRead)
def decline_maintenance(record_id: int, db: Session = Depends(get_db)) -> Maintenance:
    record = maintenance_service.decline(db, get_or_404(db, Maintenance, record_id))
    db.commit()
    db.refresh(record)
    return record
