import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel


class Message(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'messages'

    conversation_id: str = Field(index=True)
    sender_id: str = Field(index=True)
    content: str = Field(sa_column=sa.Column(sa.Text(), nullable=False))
