from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field
from app.models.enums import ModerationActionType, TargetKind


class ModerationActionCreate(BaseModel):
    target_type: TargetKind
    target_id: str = Field(..., min_length=1)
    action: ModerationActionType
    duration: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    reason: Optional[str] = None


class ModerationActionOut(BaseModel):
    id: str
    type: ModerationActionType
    target_type: TargetKind
    target_id: str
    moderator_id: str
    reason: str
    notes: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime


class ModerationActionResult(BaseModel):
    action: ModerationActionOut
    warnings: list[str] = Field(default_factory=list)


StatsPeriod = Literal['day', 'week', 'month', 'year']


class StatsPeriodOut(BaseModel):
    start: datetime
    end: datetime
    type: StatsPeriod


class ReportStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_reason: dict[str, int]
    by_type: dict[str, int]
    resolution_rate: float


class ActionStats(BaseModel):
    total: int
    by_type: dict[str, int]
    by_moderator: dict[str, int]
    content_removed: int


class ResponseTimeStats(BaseModel):
    avg_hours: float
    min_hours: float
    max_hours: float


class TrendingTarget(BaseModel):
    type: TargetKind
    target_id: str
    count: int


class ModeratorPerformance(BaseModel):
    moderator_id: str
    reports_handled: int
    reports_resolved: int
    actions_performed: int
    resolution_rate: float


class ModerationStatsOut(BaseModel):
    period: StatsPeriodOut
    reports: ReportStats
    actions: ActionStats
    performance: ResponseTimeStats
    trending: list[TrendingTarget]
    moderator_performance: Optional[ModeratorPerformance] = None
