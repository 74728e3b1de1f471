from decimal import Decimal, ROUND_HALF_UP
import math
from typing import TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NotFoundError

ModelT = TypeVar("ModelT")

ZERO = Decimal("0")


def _decimal(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value))


def _money(value) -> Decimal:
    return _decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _quantity(value) -> Decimal:
    return _decimal(value).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)


def _ratio(value) -> Decimal:
    return _decimal(value).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def get_or_404(
    db: Session, model: type[ModelT], entity_id: int, *, lock: bool = False
) -> ModelT:
    if lock:
        instance = db.scalars(
            select(model).where(model.id == entity_id).with_for_update()
        ).first()
    else:
        instance = db.get(model, entity_id)
    if instance is None:
        raise NotFoundError(model.__name__, entity_id)
    return instance


def paginate(
    db: Session, stmt: Select, page: int = 1, limit: int | None = None
) -> dict:
    page = max(page, 1)
    limit = min(max(limit or settings.default_page_size, 1), 100)
    total = db.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()
    rows = db.scalars(stmt.limit(limit).offset((page - 1) * limit)).all()
    return {
        "data": list(rows),
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }
