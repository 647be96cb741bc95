from typing import Any, Optional
from datetime import datetime
import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel, timestamp_type
from app.models.enums import (
    ModerationActionType,
    ReportPriority,
    ReportReason,
    ReportStatus,
    TargetKind,
    enum_column,
)

ACTIVE_STATUSES = (ReportStatus.PENDING, ReportStatus.INVESTIGATING)


def active_key_for(reporter_id: str, kind: TargetKind, target_id: str) -> str:
    return f"{reporter_id}:{TargetKind(kind).value}:{target_id}"


class Report(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'reports'

    type: TargetKind = Field(sa_column=enum_column(TargetKind, 'report_target_kind'))
    target_id: str = Field(index=True)
    reason: ReportReason = Field(sa_column=enum_column(ReportReason, 'report_reason'))
    description: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    evidence: list[str] = Field(default_factory=list, sa_column=sa.Column(sa.JSON(), nullable=False))
    priority: ReportPriority = Field(
        default=ReportPriority.MEDIUM,
        sa_column=enum_column(ReportPriority, 'report_priority'),
    )
    status: ReportStatus = Field(
        default=ReportStatus.PENDING,
        sa_column=enum_column(ReportStatus, 'report_status'),
    )
    reporter_id: str = Field(index=True)
    moderator_id: Optional[str] = Field(default=None, index=True)
    moderator_notes: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    action: Optional[ModerationActionType] = Field(
        default=None,
        sa_column=enum_column(ModerationActionType, 'report_action', nullable=True),
    )
    action_taken_at: Optional[datetime] = Field(default=None, sa_type=timestamp_type())
    action_expires_at: Optional[datetime] = Field(default=None, sa_type=timestamp_type())
    target_data: dict[str, Any] = Field(default_factory=dict, sa_column=sa.Column(sa.JSON(), nullable=False))
    version: int = Field(default=1, sa_column_kwargs={'nullable': False})
    # Set only while the report is pending/investigating; the unique index
    # allows one active report per (reporter, type, target).
    active_key: Optional[str] = Field(default=None, max_length=255, unique=True)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
