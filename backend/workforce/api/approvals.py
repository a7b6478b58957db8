import uuid

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.errors import ValidationError
from workforce.core.middleware import get_current_user, require_administrator
from workforce.db.models import User
from workforce.db.session import get_db
from workforce.schemas.approval import (
    ApprovalCreate,
    ApprovalItemResponse,
    ApprovalPage,
    ApprovalResolve,
    ApprovalStatus,
    ApprovalType,
)
from workforce.services import approvals as queue
from workforce.services.queries import list_approvals

router = APIRouter()


@router.post(
    "/",
    response_model=ApprovalItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enqueue an item for administrative sign-off",
)
async def enqueue(
    body: ApprovalCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApprovalItemResponse:
    organization_id = body.organization_id or current_user.organization_id
    if organization_id is None:
        raise ValidationError("organization_id is required")

    item = await queue.enqueue(
        db,
        current_user,
        body.type,
        organization_id,
        title=body.title,
        description=body.description,
        subject_id=body.subject_id,
        amount=body.amount,
        days=body.days,
    )
    return ApprovalItemResponse.model_validate(item)


@router.get(
    "/",
    response_model=ApprovalPage,
    summary="Approval queue, oldest first",
)
async def list_queue(
    type_filter: ApprovalType | None = Query(default=None, alias="type"),
    status_filter: ApprovalStatus | None = Query(default=None, alias="status"),
    organization_id: uuid.UUID | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> ApprovalPage:
    result = await list_approvals(
        db,
        current_user,
        organization_id=organization_id,
        type=type_filter,
        status=status_filter,
        page=page,
        per_page=per_page,
    )
    return ApprovalPage(
        total=result.total,
        page=result.page,
        per_page=result.per_page,
        pages=result.pages,
        items=[ApprovalItemResponse.model_validate(i) for i in result.items],
    )


@router.get(
    "/{item_id}",
    response_model=ApprovalItemResponse,
    summary="Single approval item (origin subsystems poll this for the outcome)",
)
async def get_item(
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApprovalItemResponse:
    item = await queue.get_item(db, current_user, item_id)
    return ApprovalItemResponse.model_validate(item)


@router.post(
    "/{item_id}/approve",
    response_model=ApprovalItemResponse,
    summary="Approve a pending item",
)
async def approve(
    item_id: uuid.UUID,
    body: ApprovalResolve | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> ApprovalItemResponse:
    item = await queue.approve(db, current_user, item_id, note=body.note if body else None)
    return ApprovalItemResponse.model_validate(item)


@router.post(
    "/{item_id}/reject",
    response_model=ApprovalItemResponse,
    summary="Reject a pending item",
)
async def reject(
    item_id: uuid.UUID,
    body: ApprovalResolve | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> ApprovalItemResponse:
    item = await queue.reject(db, current_user, item_id, note=body.note if body else None)
    return ApprovalItemResponse.model_validate(item)
