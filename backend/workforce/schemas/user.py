from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

Role = Literal["admin", "client", "employee", "contractor"]


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)
    role: Role = "employee"
    full_name: str | None = None
    email: str | None = None
    organization_id: UUID | None = None
    scheduled_start: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class UserUpdate(BaseModel):
    role: Role | None = None
    is_active: bool | None = None
    full_name: str | None = None
    email: str | None = None
    scheduled_start: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class UserResponse(BaseModel):
    id: UUID
    username: str
    role: str
    full_name: str | None
    email: str | None
    organization_id: UUID | None
    scheduled_start: str | None
    is_active: bool

    model_config = {"from_attributes": True}
