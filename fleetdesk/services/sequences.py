from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import DocumentSequence
from ..models.base import utcnow


def next_number(db: Session, prefix: str, period: str) -> int:
    """Allocate the next number of a ``(prefix, period)`` counter.

    The counter row is locked for the rest of the caller's transaction.
    """
    sequence = db.scalars(
        select(DocumentSequence)
        .where(DocumentSequence.prefix == prefix, DocumentSequence.period == period)
        .with_for_update()
    ).first()
    if sequence is None:
        sequence = DocumentSequence(prefix=prefix, period=period, last_number=0)
        db.add(sequence)
    sequence.last_number += 1
    sequence.updated_at = utcnow()
    db.flush()
    return sequence.last_number


def generate_trip_no(db: Session, now: datetime | None = None) -> str:
    day = (now or utcnow()).strftime("%Y%m%d")
    return f"TRIP{day}{next_number(db, 'TRIP', day):03d}"


def generate_transaction_no(db: Session, now: datetime | None = None) -> str:
    year = str((now or utcnow()).year)
    return f"TXN{year}{next_number(db, 'TXN', year):06d}"


def generate_lr_no(db: Session, now: datetime | None = None) -> str:
    day = (now or utcnow()).strftime("%Y%m%d")
    return f"LR{day}{next_number(db, 'LR', day):03d}"
