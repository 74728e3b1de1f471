from datetime import date

from ..models import AttendanceStatusEnum
from .common import CamelModel


class AttendanceCreate(CamelModel):
    driver_id: int
    date: date
    status: AttendanceStatusEnum
    trip_id: int | None = None
    remarks: str | None = None
    created_by: int | None = None


class AttendanceUpdate(CamelModel):
    status: AttendanceStatusEnum | None = None
    remarks: str | None = None


class AttendanceRead(CamelModel):
    id: int
    driver_id: int
    date: date
    status: AttendanceStatusEnum
    trip_id: int | None
    remarks: str | None
