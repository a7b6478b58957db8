from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

ApprovalType = Literal["payroll", "leave", "contract"]
ApprovalStatus = Literal["pending", "approved", "rejected"]


class ApprovalCreate(BaseModel):
    type: ApprovalType
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    subject_id: UUID | None = None
    organization_id: UUID | None = None
    amount: float | None = Field(default=None, ge=0)
    days: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def payload_matches_type(self) -> "ApprovalCreate":
        if self.type == "payroll" and (self.amount is None or self.days is not None):
            raise ValueError("payroll items carry an amount and no days")
        if self.type == "leave" and (self.days is None or self.amount is not None):
            raise ValueError("leave items carry days and no amount")
        if self.type == "contract" and (self.amount is not None or self.days is not None):
            raise ValueError("contract items carry neither amount nor days")
        return self


class ApprovalResolve(BaseModel):
    note: str | None = Field(default=None, max_length=2000)


class ApprovalItemResponse(BaseModel):
    id: UUID
    type: ApprovalType
    title: str
    description: str | None
    subject_id: UUID | None
    organization_id: UUID
    amount: float | None
    days: float | None
    status: ApprovalStatus
    created_at: datetime
    resolved_by: UUID | None
    resolved_at: datetime | None
    resolution_note: str | None

    model_config = {"from_attributes": True}


class ApprovalPage(BaseModel):
    total: int
    page: int
    per_page: int
    pages: int
    items: list[ApprovalItemResponse]
