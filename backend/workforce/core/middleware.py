"""
Bearer-token authentication and role gates used as router dependencies.

Subjects (employee, contractor) act on their own attendance; administrators
(global admin, organization-scoped client) manage and resolve.
"""

import uuid
from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.core.errors import Forbidden, Unauthorized
from workforce.core.security import decode_token
from workforce.db.models import ADMINISTRATOR_ROLES, SUBJECT_ROLES, User
from workforce.db.session import get_db

bearer_scheme = HTTPBearer(auto_error=False)


def _user_id_from_token(token: str) -> uuid.UUID:
    try:
        payload = decode_token(token)
    except JWTError:
        raise Unauthorized("Could not validate credentials")

    if payload.get("type") != "access":
        raise Unauthorized("Could not validate credentials")

    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise Unauthorized("Could not validate credentials")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise Unauthorized("Not authenticated")

    user = await db.get(User, _user_id_from_token(credentials.credentials))
    if user is None:
        raise Unauthorized("Could not validate credentials")
    if not user.is_active:
        raise Forbidden("User account is disabled")
    return user


def require_role(*roles: str) -> Callable:
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise Forbidden(
                f"Role '{current_user.role}' cannot perform this action",
                details={"allowed_roles": list(roles)},
            )
        return current_user

    return role_checker


require_subject = require_role(*SUBJECT_ROLES)
require_administrator = require_role(*ADMINISTRATOR_ROLES)
