from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Numeric
from sqlalchemy.orm import DeclarativeBase

MONEY = Numeric(14, 2)
QUANTITY = Numeric(12, 3)
RATIO = Numeric(12, 4)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PaymentTypeEnum(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    NET_BANKING = "Net Banking"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    CHEQUE = "Cheque"


class Base(DeclarativeBase):
    pass
