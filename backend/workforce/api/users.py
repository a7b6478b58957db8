import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.middleware import get_current_user, require_administrator
from workforce.core.security import hash_password
from workforce.db.models import SUBJECT_ROLES, Organization, User
from workforce.db.session import get_db
from workforce.schemas.user import UserCreate, UserResponse, UserUpdate
from workforce.services.scope import ensure_in_scope, organization_scope

router = APIRouter()


def _to_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user (admin, or client within its organization)",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> UserResponse:
    organization_id = body.organization_id
    if current_user.role == "client":
        if body.role not in SUBJECT_ROLES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Clients can only create employees and contractors",
            )
        organization_id = organization_id or current_user.organization_id
        ensure_in_scope(current_user, organization_id)

    if body.role != "admin" and organization_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="organization_id is required for non-admin users",
        )
    if organization_id is not None and await db.get(Organization, organization_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found",
        )

    existing = await db.execute(select(User).where(User.username == body.username))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Username '{body.username}' is already taken",
        )

    user = User(
        username=body.username,
        password_hash=hash_password(body.password),
        role=body.role,
        full_name=body.full_name,
        email=body.email,
        organization_id=organization_id if body.role != "admin" else None,
        scheduled_start=body.scheduled_start,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return _to_response(user)


@router.get(
    "/",
    summary="List users with pagination and optional name search",
)
async def list_users(
    search: str | None = Query(default=None, description="Filter by full_name/username (partial, case-insensitive)"),
    organization_id: uuid.UUID | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> dict:
    scope = organization_scope(current_user, organization_id)

    q = select(User)
    if scope is not None:
        q = q.where(User.organization_id == scope)
    if search:
        q = q.where(
            User.full_name.ilike(f"%{search}%")
            | User.username.ilike(f"%{search}%")
            | User.email.ilike(f"%{search}%")
        )

    total = await db.scalar(select(func.count()).select_from(q.subquery()))
    total = int(total or 0)
    result = await db.execute(
        q.order_by(User.full_name, User.username).offset((page - 1) * per_page).limit(per_page)
    )

    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if total > 0 else 1,
        "items": [_to_response(u) for u in result.scalars().all()],
    }


@router.get(
    "/subjects",
    summary="List active employees and contractors (id + full_name) for dropdowns",
)
async def list_subjects(
    organization_id: uuid.UUID | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> list[dict]:
    scope = organization_scope(current_user, organization_id)
    q = select(User).where(
        User.is_active == True,  # noqa: E712
        User.role.in_(SUBJECT_ROLES),
    )
    if scope is not None:
        q = q.where(User.organization_id == scope)
    result = await db.execute(q.order_by(User.full_name))
    return [
        {"id": str(u.id), "full_name": u.full_name or u.username, "role": u.role}
        for u in result.scalars().all()
    ]


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current authenticated user profile",
)
async def get_me(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return _to_response(current_user)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update role, active status, name or schedule",
)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> UserResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    if current_user.role == "client":
        if user.organization_id is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Clients cannot modify global administrators",
            )
        ensure_in_scope(current_user, user.organization_id)
        if body.role is not None and body.role not in SUBJECT_ROLES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Clients can only assign employee or contractor roles",
            )

    if body.role is not None:
        if body.role != "admin" and user.organization_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A user without organization can only be an admin",
            )
        user.role = body.role

    if body.is_active is not None:
        if user_id == current_user.id and not body.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You cannot deactivate yourself",
            )
        user.is_active = body.is_active

    if body.full_name is not None:
        user.full_name = body.full_name

    if body.email is not None:
        user.email = body.email

    if body.scheduled_start is not None:
        user.scheduled_start = body.scheduled_start

    await db.commit()
    await db.refresh(user)
    return _to_response(user)
