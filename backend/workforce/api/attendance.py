import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.clock import Clock, get_clock
from workforce.core.middleware import require_administrator, require_subject
from workforce.db.models import User
from workforce.db.session import get_db
from workforce.schemas.attendance import (
    AttendancePage,
    AttendanceRecordResponse,
    AttendanceStatus,
    AttendanceStatusResponse,
    CheckInRequest,
    CheckOutRequest,
)
from workforce.services import attendance as ledger
from workforce.services.queries import Page, list_attendance

router = APIRouter()


def _to_page(page: Page) -> AttendancePage:
    return AttendancePage(
        total=page.total,
        page=page.page,
        per_page=page.per_page,
        pages=page.pages,
        items=[AttendanceRecordResponse.model_validate(r) for r in page.items],
    )


@router.post(
    "/checkin",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Check in for today",
)
async def check_in(
    body: CheckInRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_subject),
) -> AttendanceRecordResponse:
    record = await ledger.check_in(
        db,
        current_user,
        current_user.organization_id,
        body.type,
        clock,
        notes=body.notes,
        location=body.location.model_dump() if body.location else None,
        timestamp=body.timestamp,
    )
    return AttendanceRecordResponse.model_validate(record)


@router.post(
    "/checkout",
    response_model=AttendanceRecordResponse,
    summary="Check out of today's open session",
)
async def check_out(
    body: CheckOutRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_subject),
) -> AttendanceRecordResponse:
    record = await ledger.check_out(
        db,
        current_user,
        clock,
        notes=body.notes,
        location=body.location.model_dump() if body.location else None,
        timestamp=body.timestamp,
        method=body.method,
    )
    return AttendanceRecordResponse.model_validate(record)


@router.get(
    "/status",
    response_model=AttendanceStatusResponse,
    summary="Today's attendance state for the current subject",
)
async def get_status(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_subject),
) -> AttendanceStatusResponse:
    state = await ledger.current_status(db, current_user, clock)
    return AttendanceStatusResponse.model_validate(state)


@router.get(
    "/",
    response_model=AttendancePage,
    summary="Own attendance history, newest first",
)
async def my_history(
    status_filter: AttendanceStatus | None = Query(default=None, alias="status"),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_subject),
) -> AttendancePage:
    result = await list_attendance(
        db,
        current_user,
        subject_id=current_user.id,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        page=page,
        per_page=per_page,
    )
    return _to_page(result)


@router.get(
    "/records",
    response_model=AttendancePage,
    summary="Organization attendance records (administrators)",
)
async def list_records(
    organization_id: uuid.UUID | None = Query(default=None),
    subject_id: uuid.UUID | None = Query(default=None),
    status_filter: AttendanceStatus | None = Query(default=None, alias="status"),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> AttendancePage:
    result = await list_attendance(
        db,
        current_user,
        organization_id=organization_id,
        subject_id=subject_id,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        page=page,
        per_page=per_page,
    )
    return _to_page(result)


@router.delete(
    "/records/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an attendance record (administrators)",
)
async def delete_record(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> None:
    await ledger.delete_record(db, current_user, record_id)
