from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import FuelTracking
from ..schemas import (
    FuelTrackingCreate,
    FuelTrackingRead,
    FuelTrackingUpdate,
    LatestFuelRead,
    Message,
    Page,
)
from ..services import fuel as fuel_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[FuelTrackingRead])
def list_fill_ups(
    vehicle_id: int | None = Query(None, alias="vehicleId"),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    stmt = select(FuelTracking).order_by(FuelTracking.date.desc(), FuelTracking.id.desc())
    if vehicle_id:
        stmt = stmt.where(FuelTracking.vehicle_id == vehicle_id)
    return paginate(db, stmt, page, limit)


@router.post("", response_model=FuelTrackingRead, status_code=201)
def create_fill_up(
    payload: FuelTrackingCreate, db: Session = Depends(get_db)
) -> FuelTracking:
    record = fuel_service.record_fill_up(db, payload)
    db.commit()
    db.refresh(record)
    return record


@router.get("/latest/{vehicle_id}", response_model=LatestFuelRead)
def latest_fill_up(vehicle_id: int, db: Session = Depends(get_db)) -> LatestFuelRead:
    record = fuel_service.latest_for_vehicle(db, vehicle_id)
    data = FuelTrackingRead.model_validate(record).model_dump()
    return LatestFuelRead(**data, mileage=record.truck_average)


@router.get("/{record_id}", response_model=FuelTrackingRead)
def get_fill_up(record_id: int, db: Session = Depends(get_db)) -> FuelTracking:
    return get_or_404(db, FuelTracking, record_id)


@router.put("/{record_id}", response_model=FuelTrackingRead)
def update_fill_up(
    record_id: int, payload: FuelTrackingUpdate, db: Session = Depends(get_db)
) -> FuelTracking:
    record = fuel_service.update_fill_up(
        db, get_or_404(db, FuelTracking, record_id, lock=True), payload
    )
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{record_id}", response_model=Message)
def delete_fill_up(record_id: int, db: Session = Depends(get_db)) -> dict:
    fuel_service.delete_fill_up(db, get_or_404(db, FuelTracking, record_id, lock=True))
    db.commit()
    return {"message": "Fuel record deleted"}
