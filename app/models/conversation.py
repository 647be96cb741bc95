from typing import Optional
from sqlmodel import SQLModel
from app.models.base import IDModel, TimestampModel


class Conversation(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'conversations'

    title: Optional[str] = None
    type: str = 'direct'
