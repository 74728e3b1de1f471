import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFoundError
from ..models import Trip, TripStatusEnum
from ..schemas import Message, Page, TripCreate, TripRead, TripUpdate
from ..services import trips as trip_service
from ..services.common import get_or_404, paginate

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=Page[TripRead])
def list_trips(
    status: TripStatusEnum | None = None,
    driver_id: int | None = Query(None, alias="driverId"),
    vehicle_id: int | None = Query(None, alias="vehicleId"),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    stmt = trip_service.trip_query(status, driver_id, vehicle_id)
    return paginate(db, stmt, page, limit)


@router.post("", response_model=TripRead, status_code=201)
def create_trip(payload: TripCreate, db: Session = Depends(get_db)) -> Trip:
    trip = trip_service.create_trip(db, payload)
    db.commit()
    db.refresh(trip)
    return trip


@router.get("/latest/{vehicle_id}", response_model=TripRead)
def latest_trip(vehicle_id: int, db: Session = Depends(get_db)) -> Trip:
    trip = trip_service.latest_for_vehicle(db, vehicle_id)
    if trip is None:
        raise NotFoundError("Trip", vehicle_id)
    return trip


@router.get("/{trip_id}", response_model=TripRead)
def get_trip(trip_id: int, db: Session = Depends(get_db)) -> Trip:
    return get_or_404(db, Trip, trip_id)


@router.put("/{trip_id}", response_model=TripRead)
def update_trip(trip_id: int, payload: TripUpdate, db: Session = Depends(get_db)) -> Trip:
    trip = trip_service.update_trip(db, get_or_404(db, Trip, trip_id, lock=True), payload)
    db.commit()
    db.refresh(trip)
    return trip


@router.delete("/{trip_id}", response_model=Message)
def delete_trip(trip_id: int, db: Session = Depends(get_db)) -> dict:
    trip = get_or_404(db, Trip, trip_id, lock=True)
    trip_no = trip.trip_no
    trip_service.delete_trip(db, trip)
    db.commit()
    logger.info("Trip %s and its ledger entries removed", trip_no)
    return {"message": f"Trip {trip_no} deleted"}
