from typing import Any, Optional
from datetime import datetime
import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel, timestamp_type
from app.models.enums import NotificationType, enum_column


class Notification(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'notifications'

    user_id: str = Field(index=True)
    type: NotificationType = Field(sa_column=enum_column(NotificationType, 'notification_type'))
    title: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict, sa_column=sa.Column(sa.JSON(), nullable=False))
    read: bool = False
    delivered_at: Optional[datetime] = Field(default=None, sa_type=timestamp_type())
