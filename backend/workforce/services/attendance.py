"""
Attendance ledger.

One AttendanceRecord per (subject, working day). A check-in creates the
day's record and classifies it present/late against the subject's scheduled
start plus the grace window; a check-out closes it, computes working and
overtime hours and may downgrade the status to half_day or absent.

Concurrency: a second check-in for the same day loses on the
uq_attendance_subject_day constraint, and the check-out is a compare-and-set
on ``check_out_time IS NULL``, so both surface as typed conflicts rather than
double writes.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.clock import Clock, parse_hhmm, resolve_timezone, to_local, working_day
from workforce.core.config import settings
from workforce.core.errors import (
    AlreadyCheckedIn,
    Forbidden,
    NotCheckedIn,
    NotFound,
    ValidationError,
)
from workforce.db.models import AttendanceRecord, Organization, User, utcnow
from workforce.services.scope import ensure_in_scope

logger = logging.getLogger(__name__)

# Client-facing check-in type -> stored method
CHECK_IN_TYPES: dict[str, str] = {
    "office": "manual",
    "remote": "manual",
    "manual": "manual",
    "qr": "qr",
    "biometric": "biometric",
}


@dataclass(frozen=True)
class AttendancePolicy:
    scheduled_start: time
    grace: timedelta
    standard_shift_hours: float
    half_day_threshold_hours: float
    absent_threshold_hours: float

    @classmethod
    def for_subject(cls, subject: User) -> "AttendancePolicy":
        return cls(
            scheduled_start=parse_hhmm(subject.scheduled_start or settings.SCHEDULED_START_TIME),
            grace=timedelta(minutes=settings.LATE_GRACE_MINUTES),
            standard_shift_hours=settings.STANDARD_SHIFT_HOURS,
            half_day_threshold_hours=settings.HALF_DAY_THRESHOLD_HOURS,
            absent_threshold_hours=settings.ABSENT_THRESHOLD_MINUTES / 60,
        )


@dataclass(frozen=True)
class CurrentStatus:
    is_checked_in: bool
    can_check_in: bool
    can_check_out: bool
    current_status: str
    last_check_in: datetime | None
    last_check_out: datetime | None
    today_hours: float


def classify_check_in(local_check_in: datetime, policy: AttendancePolicy) -> str:
    """present when at or before scheduled start + grace, late otherwise."""
    deadline = datetime.combine(
        local_check_in.date(), policy.scheduled_start, tzinfo=local_check_in.tzinfo
    ) + policy.grace
    return "present" if local_check_in <= deadline else "late"


def compute_hours(
    check_in: datetime, check_out: datetime, policy: AttendancePolicy
) -> tuple[float, float]:
    """Return (working_hours, overtime_hours), both clamped at zero."""
    worked = max((check_out - check_in).total_seconds() / 3600, 0.0)
    overtime = max(worked - policy.standard_shift_hours, 0.0)
    return worked, overtime


def classify_check_out(check_in_status: str, working_hours: float, policy: AttendancePolicy) -> str:
    if working_hours < policy.absent_threshold_hours:
        return "absent"
    if working_hours < policy.half_day_threshold_hours:
        return "half_day"
    return check_in_status


def _merge_notes(existing: str | None, extra: str | None) -> str | None:
    extra = (extra or "").strip() or None
    if not extra:
        return existing
    if not existing:
        return extra
    return f"{existing}\n{extra}"


async def _organization_timezone(db: AsyncSession, organization_id: uuid.UUID | None) -> ZoneInfo:
    if organization_id is None:
        raise ValidationError("Subject is not attached to an organization")
    org = await db.get(Organization, organization_id)
    if org is None:
        raise NotFound("Organization not found")
    return resolve_timezone(org.timezone)


def _resolve_instant(timestamp: datetime | None, clock: Clock, tz: ZoneInfo) -> datetime:
    """
    Action instant as an aware datetime.

    Naive timestamps are read as organization-local wall-clock time. The
    instant must fall on the current working day and not run ahead of the
    clock by more than the allowed skew.
    """
    now = clock.now()
    if timestamp is None:
        return now
    instant = to_local(timestamp, tz)
    if instant - now > timedelta(seconds=settings.CLOCK_SKEW_SECONDS):
        raise ValidationError("Timestamp is in the future")
    if working_day(instant, tz) != working_day(now, tz):
        raise ValidationError("Timestamp is outside the current working day")
    return instant


async def _record_for_day(
    db: AsyncSession, subject_id: uuid.UUID, work_date: date
) -> AttendanceRecord | None:
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.subject_id == subject_id,
            AttendanceRecord.work_date == work_date,
        )
    )
    return result.scalar_one_or_none()


async def check_in(
    db: AsyncSession,
    subject: User,
    organization_id: uuid.UUID,
    check_type: str,
    clock: Clock,
    *,
    notes: str | None = None,
    location: dict | None = None,
    timestamp: datetime | None = None,
) -> AttendanceRecord:
    # the subject is expired by a rollback on the conflict path
    subject_id = subject.id
    if subject.organization_id != organization_id:
        raise Forbidden("Cannot check in for another organization")

    method = CHECK_IN_TYPES.get((check_type or "").strip().lower())
    if method is None:
        raise ValidationError(
            f"Unsupported check-in type '{check_type}'. Allowed: {', '.join(CHECK_IN_TYPES)}"
        )

    tz = await _organization_timezone(db, organization_id)
    instant = _resolve_instant(timestamp, clock, tz)
    local = to_local(instant, tz)
    today = local.date()

    policy = AttendancePolicy.for_subject(subject)
    status = classify_check_in(local, policy)

    record = await _record_for_day(db, subject_id, today)
    if record is not None and record.check_in_time is not None:
        logger.warning("Repeated check-in rejected: subject=%s day=%s", subject_id, today)
        raise AlreadyCheckedIn("Already checked in today")

    if record is None:
        record = AttendanceRecord(
            subject_id=subject_id,
            organization_id=organization_id,
            work_date=today,
        )
        db.add(record)

    record.check_in_time = instant
    record.check_in_method = method
    record.check_in_location = location
    record.status = status
    record.notes = _merge_notes(record.notes, notes)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Concurrent check-in lost the race: subject=%s day=%s", subject_id, today)
        raise AlreadyCheckedIn("Already checked in today")

    await db.refresh(record)
    logger.info(
        "Check-in: subject=%s day=%s at=%s method=%s status=%s",
        subject_id, today, local.time().isoformat(timespec="minutes"), method, status,
    )
    return record


async def check_out(
    db: AsyncSession,
    subject: User,
    clock: Clock,
    *,
    notes: str | None = None,
    location: dict | None = None,
    timestamp: datetime | None = None,
    method: str = "manual",
) -> AttendanceRecord:
    subject_id = subject.id
    if method not in CHECK_IN_TYPES.values():
        raise ValidationError(f"Unsupported check-out method '{method}'")

    tz = await _organization_timezone(db, subject.organization_id)
    instant = _resolve_instant(timestamp, clock, tz)
    today = working_day(instant, tz)

    record = await _record_for_day(db, subject_id, today)
    if record is None or record.check_in_time is None or record.check_out_time is not None:
        logger.warning("Check-out without open check-in: subject=%s day=%s", subject_id, today)
        raise NotCheckedIn("No open check-in for today")

    if instant < record.check_in_time:
        raise ValidationError("Check-out time cannot be earlier than check-in time")

    policy = AttendancePolicy.for_subject(subject)
    worked, overtime = compute_hours(record.check_in_time, instant, policy)
    status = classify_check_out(record.status, worked, policy)

    result = await db.execute(
        update(AttendanceRecord)
        .where(
            AttendanceRecord.id == record.id,
            AttendanceRecord.check_out_time.is_(None),
        )
        .values(
            check_out_time=instant,
            check_out_method=method,
            check_out_location=location,
            working_hours=round(worked, 2),
            overtime_hours=round(overtime, 2),
            status=status,
            notes=_merge_notes(record.notes, notes),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        logger.warning("Concurrent check-out lost the race: subject=%s day=%s", subject_id, today)
        raise NotCheckedIn("No open check-in for today")

    await db.commit()
    await db.refresh(record)
    logger.info(
        "Check-out: subject=%s day=%s hours=%.2f overtime=%.2f status=%s",
        subject_id, today, record.working_hours, record.overtime_hours, record.status,
    )
    return record


async def current_status(db: AsyncSession, subject: User, clock: Clock) -> CurrentStatus:
    tz = await _organization_timezone(db, subject.organization_id)
    now = clock.now()
    record = await _record_for_day(db, subject.id, working_day(now, tz))

    if record is None or record.check_in_time is None:
        return CurrentStatus(
            is_checked_in=False,
            can_check_in=True,
            can_check_out=False,
            current_status="not_checked",
            last_check_in=None,
            last_check_out=None,
            today_hours=0.0,
        )

    is_open = record.check_out_time is None
    if is_open:
        today_hours = max((now - record.check_in_time).total_seconds() / 3600, 0.0)
    else:
        today_hours = record.working_hours

    return CurrentStatus(
        is_checked_in=is_open,
        can_check_in=False,
        can_check_out=is_open,
        current_status=record.status,
        last_check_in=record.check_in_time,
        last_check_out=record.check_out_time,
        today_hours=round(today_hours, 2),
    )


async def delete_record(db: AsyncSession, actor: User, record_id: int) -> None:
    """Administrative removal; subjects never delete their own records."""
    record = await db.get(AttendanceRecord, record_id)
    if record is None:
        raise NotFound("Attendance record not found")
    ensure_in_scope(actor, record.organization_id)

    await db.delete(record)
    await db.commit()
    logger.info(
        "Attendance record deleted: id=%s subject=%s day=%s by=%s",
        record_id, record.subject_id, record.work_date, actor.id,
    )
