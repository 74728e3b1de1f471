from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import NotFoundError
from ..models import Bank, FuelTracking, Trip, TripStatusEnum
from ..services import ledger
from ..services.common import ZERO, _money, _quantity

router = APIRouter()


@router.get("/debug/integrity")
def debug_integrity(db: Session = Depends(get_db)) -> dict:
    if not settings.debug:
        raise NotFoundError("Page")

    balance_drift = []
    for bank in db.scalars(select(Bank).order_by(Bank.id)):
        replayed = ledger.replay_balance(db, bank.id)
        if replayed != _money(bank.balance):
            balance_drift.append(
                {"bankId": bank.id, "balance": str(bank.balance), "replayed": str(replayed)}
            )

    negative_fuel = [
        {"fuelTrackingId": record.id, "remaining": str(record.remaining_fuel_quantity)}
        for record in db.scalars(
            select(FuelTracking).where(FuelTracking.remaining_fuel_quantity < ZERO)
        )
    ]

    fuel_mismatch = [
        {"tripId": trip.id, "fuelNeeded": str(trip.fuel_needed)}
        for trip in db.scalars(
            select(Trip).where(
                Trip.status == TripStatusEnum.COMPLETED, Trip.fuel_consumed.is_(False)
            )
        )
        if _quantity(trip.fuel_needed) > ZERO
    ]

    return {
        "balanceDrift": balance_drift,
        "negativeFuel": negative_fuel,
        "fuelMismatch": fuel_mismatch,
    }
