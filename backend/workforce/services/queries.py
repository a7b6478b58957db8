"""
Read-side listings over the attendance ledger and the approval queue.

Pure projections: nothing here writes. Pagination is offset/limit over a
stable sort key (work_date DESC, id DESC for attendance; created_at ASC,
id ASC for approvals). Each page is read with a single SELECT, so a page
never mixes pre- and post-transition states of one item.
"""

import math
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.config import settings
from workforce.core.errors import Forbidden, ValidationError
from workforce.db.models import (
    APPROVAL_STATUSES,
    APPROVAL_TYPES,
    ATTENDANCE_STATUSES,
    SUBJECT_ROLES,
    ApprovalItem,
    AttendanceRecord,
    User,
)
from workforce.services.scope import organization_scope


@dataclass(frozen=True)
class Page:
    items: list[Any]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.total > 0 else 1


def _bounded(page: int, per_page: int | None) -> tuple[int, int]:
    if page < 1:
        raise ValidationError("page must be >= 1")
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    if per_page < 1:
        raise ValidationError("per_page must be >= 1")
    return page, min(per_page, settings.MAX_PAGE_SIZE)


async def _paginate(db: AsyncSession, stmt: Select, page: int, per_page: int) -> Page:
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    result = await db.execute(stmt.offset((page - 1) * per_page).limit(per_page))
    return Page(items=list(result.scalars().all()), total=int(total or 0), page=page, per_page=per_page)


def attendance_query(
    organization_id: uuid.UUID | None,
    *,
    subject_id: uuid.UUID | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> Select:
    if status is not None and status not in ATTENDANCE_STATUSES:
        raise ValidationError(f"Unknown attendance status '{status}'")
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")

    stmt = select(AttendanceRecord)
    if organization_id is not None:
        stmt = stmt.where(AttendanceRecord.organization_id == organization_id)
    if subject_id is not None:
        stmt = stmt.where(AttendanceRecord.subject_id == subject_id)
    if status is not None:
        stmt = stmt.where(AttendanceRecord.status == status)
    if date_from is not None:
        stmt = stmt.where(AttendanceRecord.work_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(AttendanceRecord.work_date <= date_to)
    return stmt.order_by(AttendanceRecord.work_date.desc(), AttendanceRecord.id.desc())


def approval_query(
    organization_id: uuid.UUID | None,
    *,
    type: str | None = None,
    status: str | None = None,
    subject_id: uuid.UUID | None = None,
) -> Select:
    if type is not None and type not in APPROVAL_TYPES:
        raise ValidationError(f"Unknown approval type '{type}'")
    if status is not None and status not in APPROVAL_STATUSES:
        raise ValidationError(f"Unknown approval status '{status}'")

    stmt = select(ApprovalItem)
    if organization_id is not None:
        stmt = stmt.where(ApprovalItem.organization_id == organization_id)
    if type is not None:
        stmt = stmt.where(ApprovalItem.type == type)
    if status is not None:
        stmt = stmt.where(ApprovalItem.status == status)
    if subject_id is not None:
        stmt = stmt.where(ApprovalItem.subject_id == subject_id)
    # oldest first so stale items surface at the top
    return stmt.order_by(ApprovalItem.created_at.asc(), ApprovalItem.id.asc())


async def list_attendance(
    db: AsyncSession,
    actor: User,
    *,
    organization_id: uuid.UUID | None = None,
    subject_id: uuid.UUID | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = 1,
    per_page: int | None = None,
) -> Page:
    scope = organization_scope(actor, organization_id)
    if actor.role in SUBJECT_ROLES:
        if subject_id is not None and subject_id != actor.id:
            raise Forbidden("Subjects can only read their own attendance")
        subject_id = actor.id

    page, per_page = _bounded(page, per_page)
    stmt = attendance_query(
        scope,
        subject_id=subject_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )
    return await _paginate(db, stmt, page, per_page)


async def list_approvals(
    db: AsyncSession,
    actor: User,
    *,
    organization_id: uuid.UUID | None = None,
    type: str | None = None,
    status: str | None = None,
    page: int = 1,
    per_page: int | None = None,
) -> Page:
    scope = organization_scope(actor, organization_id)
    subject_id = actor.id if actor.role in SUBJECT_ROLES else None

    page, per_page = _bounded(page, per_page)
    stmt = approval_query(scope, type=type, status=status, subject_id=subject_id)
    return await _paginate(db, stmt, page, per_page)
