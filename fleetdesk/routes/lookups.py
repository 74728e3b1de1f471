from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Driver, DriverStatusEnum, Location, Mechanic
from ..schemas import (
    DriverCreate,
    DriverRead,
    DriverUpdate,
    LocationCreate,
    LocationRead,
    MechanicCreate,
    MechanicRead,
    MechanicUpdate,
    Message,
    Page,
)
from ..services import reference as reference_service
from ..services.common import get_or_404, paginate

router = APIRouter()


# --- drivers ----------------------------------------------------------------


@router.get("/drivers", response_model=Page[DriverRead])
def list_drivers(
    q: str | None = None,
    status: DriverStatusEnum | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, reference_service.driver_query(q, status), page, limit)


@router.post("/drivers", response_model=DriverRead, status_code=201)
def create_driver(payload: DriverCreate, db: Session = Depends(get_db)) -> Driver:
    driver = reference_service.create_driver(db, payload)
    db.commit()
    db.refresh(driver)
    return driver


@router.get("/drivers/{driver_id}", response_model=DriverRead)
def get_driver(driver_id: int, db: Session = Depends(get_db)) -> Driver:
    return get_or_404(db, Driver, driver_id)


@router.put("/drivers/{driver_id}", response_model=DriverRead)
def update_driver(
    driver_id: int, payload: DriverUpdate, db: Session = Depends(get_db)
) -> Driver:
    driver = reference_service.update_driver(db, get_or_404(db, Driver, driver_id), payload)
    db.commit()
    db.refresh(driver)
    return driver


@router.delete("/drivers/{driver_id}", response_model=Message)
def delete_driver(driver_id: int, db: Session = Depends(get_db)) -> dict:
    reference_service.delete_driver(db, get_or_404(db, Driver, driver_id))
    db.commit()
    return {"message": "Driver deleted"}


# --- mechanics --------------------------------------------------------------


@router.get("/mechanics", response_model=Page[MechanicRead])
def list_mechanics(
    q: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, reference_service.mechanic_query(q), page, limit)


@router.post("/mechanics", response_model=MechanicRead, status_code=201)
def create_mechanic(payload: MechanicCreate, db: Session = Depends(get_db)) -> Mechanic:
    mechanic = reference_service.create_mechanic(db, payload)
    db.commit()
    db.refresh(mechanic)
    return mechanic


@router.get("/mechanics/{mechanic_id}", response_model=MechanicRead)
def get_mechanic(mechanic_id: int, db: Session = Depends(get_db)) -> Mechanic:
    return get_or_404(db, Mechanic, mechanic_id)


@router.put("/mechanics/{mechanic_id}", response_model=MechanicRead)
def update_mechanic(
    mechanic_id: int, payload: MechanicUpdate, db: Session = Depends(get_db)
) -> Mechanic:
    mechanic = reference_service.update_mechanic(
        db, get_or_404(db, Mechanic, mechanic_id), payload
    )
    db.commit()
    db.refresh(mechanic)
    return mechanic


@router.delete("/mechanics/{mechanic_id}", response_model=Message)
def delete_mechanic(mechanic_id: int, db: Session = Depends(get_db)) -> dict:
    reference_service.delete_mechanic(db, get_or_404(db, Mechanic, mechanic_id))
    db.commit()
    return {"message": "Mechanic deleted"}


# --- locations --------------------------------------------------------------


@router.get("/locations", response_model=Page[LocationRead])
def list_locations(
    q: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, reference_service.location_query(q), page, limit)


@router.post("/locations", response_model=LocationRead, status_code=201)
def create_location(payload: LocationCreate, db: Session = Depends(get_db)) -> Location:
    location = reference_service.create_location(db, payload)
    db.commit()
    db.refresh(location)
    return location


@router.get("/locations/{location_id}", response_model=LocationRead)
def get_location(location_id: int, db: Session = Depends(get_db)) -> Location:
    return get_or_404(db, Location, location_id)


@router.put("/locations/{location_id}", response_model=LocationRead)
def update_location(
    location_id: int, payload: LocationCreate, db: Session = Depends(get_db)
) -> Location:
    location = reference_service.update_location(
        db, get_or_404(db, Location, location_id), payload
    )
    db.commit()
    db.refresh(location)
    return location


@router.delete("/locations/{location_id}", response_model=Message)
def delete_location(location_id: int, db: Session = Depends(get_db)) -> dict:
    reference_service.delete_location(db, get_or_404(db, Location, location_id))
    db.commit()
    return {"message": "Location deleted"}
