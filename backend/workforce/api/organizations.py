from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.clock import resolve_timezone
from workforce.core.middleware import require_administrator, require_role
from workforce.db.models import Organization, User
from workforce.db.session import get_db
from workforce.schemas.organization import OrganizationCreate, OrganizationResponse

router = APIRouter()


@router.post(
    "/",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an organization (admin only)",
)
async def create_organization(
    body: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role("admin")),
) -> OrganizationResponse:
    resolve_timezone(body.timezone)

    existing = await db.execute(select(Organization).where(Organization.name == body.name))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Organization '{body.name}' already exists",
        )

    org = Organization(name=body.name, timezone=body.timezone)
    db.add(org)
    await db.commit()
    await db.refresh(org)
    return OrganizationResponse.model_validate(org)


@router.get(
    "/",
    response_model=list[OrganizationResponse],
    summary="List organizations visible to the current administrator",
)
async def list_organizations(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_administrator),
) -> list[OrganizationResponse]:
    q = select(Organization).order_by(Organization.name)
    if not current_user.is_global_admin:
        q = q.where(Organization.id == current_user.organization_id)
    result = await db.execute(q)
    return [OrganizationResponse.model_validate(o) for o in result.scalars().all()]
