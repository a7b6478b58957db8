"""
Pending-approval queue.

Payroll runs, leave requests and contract assignments all land here as
ApprovalItem rows. An item moves pending -> approved or pending -> rejected
exactly once; the transition is a compare-and-set on ``status = 'pending'``
so a second (or concurrent) resolution fails with NotPending and leaves the
stored status untouched.
"""

import logging
import uuid

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.errors import Forbidden, NotFound, NotPending, ValidationError
from workforce.db.models import (
    ADMINISTRATOR_ROLES,
    APPROVAL_TYPES,
    SUBJECT_ROLES,
    ApprovalItem,
    Organization,
    User,
    utcnow,
)
from workforce.services.notifications import notify_resolution
from workforce.services.scope import ensure_in_scope

logger = logging.getLogger(__name__)

_DEFAULT_TITLES = {
    "payroll": "Payroll approval",
    "leave": "Leave request",
    "contract": "Contract assignment",
}


def _validate_payload(item_type: str, amount: float | None, days: float | None) -> None:
    if item_type not in APPROVAL_TYPES:
        raise ValidationError(f"Unknown approval type '{item_type}'")
    if item_type == "payroll":
        if amount is None or amount < 0 or days is not None:
            raise ValidationError("Payroll items require a non-negative amount and no days")
    elif item_type == "leave":
        if days is None or days <= 0 or amount is not None:
            raise ValidationError("Leave items require a positive number of days and no amount")
    elif amount is not None or days is not None:
        raise ValidationError("Contract items carry neither amount nor days")


async def enqueue(
    db: AsyncSession,
    actor: User,
    item_type: str,
    organization_id: uuid.UUID,
    *,
    title: str | None = None,
    description: str | None = None,
    subject_id: uuid.UUID | None = None,
    amount: float | None = None,
    days: float | None = None,
) -> ApprovalItem:
    _validate_payload(item_type, amount, days)

    org = await db.get(Organization, organization_id)
    if org is None:
        raise NotFound("Organization not found")
    ensure_in_scope(actor, organization_id)

    if actor.role in SUBJECT_ROLES:
        if subject_id is None:
            subject_id = actor.id
        elif subject_id != actor.id:
            raise Forbidden("Subjects can only submit items for themselves")

    if subject_id is not None:
        subject = await db.get(User, subject_id)
        if subject is None or subject.organization_id != organization_id:
            raise ValidationError("Subject does not belong to the item's organization")

    item = ApprovalItem(
        type=item_type,
        title=(title or "").strip() or _DEFAULT_TITLES[item_type],
        description=description,
        subject_id=subject_id,
        organization_id=organization_id,
        amount=amount,
        days=days,
        status="pending",
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info(
        "Approval enqueued: id=%s type=%s org=%s subject=%s by=%s",
        item.id, item.type, organization_id, subject_id, actor.id,
    )
    return item


async def get_item(db: AsyncSession, actor: User, item_id: uuid.UUID) -> ApprovalItem:
    item = await db.get(ApprovalItem, item_id)
    if item is None:
        raise NotFound("Approval item not found")
    ensure_in_scope(actor, item.organization_id)
    if actor.role in SUBJECT_ROLES and item.subject_id != actor.id:
        raise Forbidden("Approval item belongs to another subject")
    return item


async def _resolve(
    db: AsyncSession,
    actor: User,
    item_id: uuid.UUID,
    new_status: str,
    note: str | None,
) -> ApprovalItem:
    if actor.role not in ADMINISTRATOR_ROLES:
        raise Forbidden("Only administrators can resolve approval items")

    item = await get_item(db, actor, item_id)
    # rollback expires every instance in the session, the actor included
    actor_id = actor.id

    result = await db.execute(
        update(ApprovalItem)
        .where(ApprovalItem.id == item_id, ApprovalItem.status == "pending")
        .values(
            status=new_status,
            resolved_by=actor_id,
            resolved_at=utcnow(),
            resolution_note=(note or "").strip() or None,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        await db.refresh(item)
        logger.warning(
            "Resolution rejected, item not pending: id=%s status=%s attempted=%s by=%s",
            item_id, item.status, new_status, actor_id,
        )
        raise NotPending(
            f"Approval item is already {item.status}",
            details={"status": item.status},
        )

    await db.commit()
    await db.refresh(item)
    logger.info("Approval %s: id=%s type=%s by=%s", new_status, item.id, item.type, actor_id)

    await notify_resolution(item)
    return item


async def approve(
    db: AsyncSession, actor: User, item_id: uuid.UUID, note: str | None = None
) -> ApprovalItem:
    return await _resolve(db, actor, item_id, "approved", note)


async def reject(
    db: AsyncSession, actor: User, item_id: uuid.UUID, note: str | None = None
) -> ApprovalItem:
    return await _resolve(db, actor, item_id, "rejected", note)
