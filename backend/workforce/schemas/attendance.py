from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

AttendanceStatus = Literal["not_checked", "present", "late", "half_day", "absent"]


class Location(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class CheckInRequest(BaseModel):
    type: str = "office"
    notes: str | None = Field(default=None, max_length=2000)
    location: Location | None = None
    timestamp: datetime | None = None


class CheckOutRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)
    location: Location | None = None
    timestamp: datetime | None = None
    method: Literal["manual", "qr", "biometric"] = "manual"


class AttendanceRecordResponse(BaseModel):
    id: int
    subject_id: UUID
    organization_id: UUID
    work_date: date
    check_in_time: datetime | None
    check_in_method: str | None
    check_in_location: Location | None
    check_out_time: datetime | None
    check_out_method: str | None
    check_out_location: Location | None
    status: AttendanceStatus
    working_hours: float
    overtime_hours: float
    notes: str | None

    model_config = {"from_attributes": True}


class AttendanceStatusResponse(BaseModel):
    is_checked_in: bool
    can_check_in: bool
    can_check_out: bool
    current_status: AttendanceStatus
    last_check_in: datetime | None
    last_check_out: datetime | None
    today_hours: float

    model_config = {"from_attributes": True}


class AttendancePage(BaseModel):
    total: int
    page: int
    per_page: int
    pages: int
    items: list[AttendanceRecordResponse]
