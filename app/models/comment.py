import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel
from app.models.post import RemovableContent


class Comment(IDModel, TimestampModel, RemovableContent, SQLModel, table=True):
    __tablename__ = 'comments'

    author_id: str = Field(index=True)
    post_id: str = Field(index=True)
    content: str = Field(sa_column=sa.Column(sa.Text(), nullable=False))
