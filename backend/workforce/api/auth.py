import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.errors import Forbidden, Unauthorized
from workforce.core.security import create_access_token, verify_password
from workforce.db.models import User
from workforce.db.session import get_db
from workforce.schemas.auth import LoginRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse, summary="Password login")
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    user = await db.scalar(select(User).where(User.username == body.username))

    if user is None or not verify_password(body.password, user.password_hash):
        logger.warning("Failed login for username '%s'", body.username)
        raise Unauthorized("Invalid username or password")

    if not user.is_active:
        raise Forbidden("User account is disabled")

    logger.info("Login: user=%s role=%s", user.id, user.role)
    return TokenResponse(access_token=create_access_token({"sub": str(user.id)}))
