"""
Typed errors raised by the service layer.

Every error carries a machine-readable ``code`` and the HTTP ``status_code``
it maps to. Route handlers never build error responses by hand; the
exception handlers registered in ``fleetdesk.main`` render these as::

    {"error": "<message>", "code": "<CODE>", ...details}

Hierarchy::

    FleetDeskError                    UNEXPECTED_ERROR      500
    +-- ValidationError               VALIDATION_ERROR      400
    +-- NotFoundError                 NOT_FOUND             404
    +-- InsufficientBalanceError      INSUFFICIENT_BALANCE  400
    +-- DuplicateKeyError             DUPLICATE_KEY         400
    +-- NoFuelRecordError             NO_FUEL_RECORD        400
    +-- InvalidStateError             INVALID_STATE         400

Business-rule errors are raised before the first write of an operation.
"""

from decimal import Decimal
from typing import Any


class FleetDeskError(Exception):
    code: str = "UNEXPECTED_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.details()}


class ValidationError(FleetDeskError):
    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    def details(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


class NotFoundError(FleetDeskError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any = None) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity, "entityId": self.entity_id}


class InsufficientBalanceError(FleetDeskError):
    code = "INSUFFICIENT_BALANCE"
    status_code = 400

    def __init__(self, bank_id: int, balance: Decimal, requested: Decimal) -> None:
        super().__init__("Insufficient balance in bank account")
        self.bank_id = bank_id
        self.balance = balance
        self.requested = requested

    def details(self) -> dict[str, Any]:
        return {
            "bankId": self.bank_id,
            "balance": str(self.balance),
            "requested": str(self.requested),
        }


class DuplicateKeyError(FleetDeskError):
    code = "DUPLICATE_KEY"
    status_code = 400

    def __init__(self, field: str, value: Any = None) -> None:
        super().__init__(f"{field} already exists")
        self.field = field
        self.value = value

    def details(self) -> dict[str, Any]:
        return {"field": self.field}


class NoFuelRecordError(FleetDeskError):
    code = "NO_FUEL_RECORD"
    status_code = 400

    def __init__(self, vehicle_id: int) -> None:
        super().__init__("No fuel tracking record found for this vehicle")
        self.vehicle_id = vehicle_id

    def details(self) -> dict[str, Any]:
        return {"vehicleId": self.vehicle_id}


class InvalidStateError(FleetDeskError):
    code = "INVALID_STATE"
    status_code = 400
