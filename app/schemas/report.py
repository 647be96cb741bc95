from typing import Any, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from app.models.enums import (
    ModerationActionType,
    ReportPriority,
    ReportReason,
    ReportStatus,
    TargetKind,
)
from app.schemas.moderation import ModerationActionOut


class ReportCreate(BaseModel):
    type: TargetKind
    target_id: str = Field(..., min_length=1)
    reason: ReportReason
    description: Optional[str] = None
    evidence: list[str] = Field(default_factory=list)

    @field_validator('target_id')
    @classmethod
    def strip_target_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('target_id must not be blank')
        return value


class ReportUpdate(BaseModel):
    status: Optional[ReportStatus] = None
    moderator_notes: Optional[str] = None
    action: Optional[ModerationActionType] = None
    action_duration: Optional[float] = Field(default=None, ge=0)
    version: Optional[int] = None


class ReportFilters(BaseModel):
    status: Optional[ReportStatus] = None
    type: Optional[TargetKind] = None
    reason: Optional[ReportReason] = None
    moderator_id: Optional[str] = None


ReportSortField = Literal['created_at', 'updated_at', 'priority']
SortOrder = Literal['asc', 'desc']


class ReportOut(BaseModel):
    id: str
    type: TargetKind
    target_id: str
    reason: ReportReason
    description: Optional[str] = None
    evidence: list[str]
    priority: ReportPriority
    status: ReportStatus
    reporter_id: str
    moderator_id: Optional[str] = None
    moderator_notes: Optional[str] = None
    action: Optional[ModerationActionType] = None
    action_taken_at: Optional[datetime] = None
    action_expires_at: Optional[datetime] = None
    target_data: dict[str, Any]
    version: int
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ReportPage(BaseModel):
    reports: list[ReportOut]
    pagination: Pagination


class ReportUpdateOut(BaseModel):
    report: ReportOut
    action: Optional[ModerationActionOut] = None
    warnings: list[str] = Field(default_factory=list)
