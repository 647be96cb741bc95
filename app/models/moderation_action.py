from typing import Optional
from datetime import datetime
import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel, timestamp_type
from app.models.enums import ModerationActionType, TargetKind, enum_column


class ModerationAction(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'moderation_actions'

    type: ModerationActionType = Field(sa_column=enum_column(ModerationActionType, 'moderation_action_type'))
    target_type: TargetKind = Field(sa_column=enum_column(TargetKind, 'moderation_target_kind'))
    target_id: str = Field(index=True)
    moderator_id: str = Field(index=True)
    reason: str
    notes: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    expires_at: Optional[datetime] = Field(default=None, sa_type=timestamp_type(), index=True)
    is_active: bool = Field(default=True, index=True)
