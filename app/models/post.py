from typing import Optional
from datetime import datetime
import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel, timestamp_type


class RemovableContent(SQLModel):
    is_removed: bool = False
    removed_at: Optional[datetime] = Field(default=None, sa_type=timestamp_type())
    removed_by: Optional[str] = None


class Post(IDModel, TimestampModel, RemovableContent, SQLModel, table=True):
    __tablename__ = 'posts'

    author_id: str = Field(index=True)
    content: str = Field(sa_column=sa.Column(sa.Text(), nullable=False))
