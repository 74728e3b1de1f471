from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Vehicle, VehicleStatusEnum
from ..schemas import Message, Page, VehicleCreate, VehicleRead, VehicleUpdate
from ..services import reference as reference_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[VehicleRead])
def list_vehicles(
    q: str | None = None,
    status: VehicleStatusEnum | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, reference_service.vehicle_query(q, status), page, limit)


@router.post("", response_model=VehicleRead, status_code=201)
def create_vehicle(payload: VehicleCreate, db: Session = Depends(get_db)) -> Vehicle:
    vehicle = reference_service.create_vehicle(db, payload)
    db.commit()
    db.refresh(vehicle)
    return vehicle


@router.get("/{vehicle_id}", response_model=VehicleRead)
def get_vehicle(vehicle_id: int, db: Session = Depends(get_db)) -> Vehicle:
    return get_or_404(db, Vehicle, vehicle_id)


@router.put("/{vehicle_id}", response_model=VehicleRead)
def update_vehicle(
    vehicle_id: int, payload: VehicleUpdate, db: Session = Depends(get_db)
) -> Vehicle:
    vehicle = reference_service.update_vehicle(
        db, get_or_404(db, Vehicle, vehicle_id), payload
    )
    db.commit()
    db.refresh(vehicle)
    return vehicle


@router.delete("/{vehicle_id}", response_model=Message)
def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db)) -> dict:
    reference_service.delete_vehicle(db, get_or_404(db, Vehicle, vehicle_id))
    db.commit()
    return {"message": "Vehicle deleted"}
