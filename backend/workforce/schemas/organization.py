from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    timezone: str = "UTC"


class OrganizationResponse(BaseModel):
    id: UUID
    name: str
    timezone: str
    created_at: datetime

    model_config = {"from_attributes": True}
