from typing import Optional
from datetime import datetime
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel, timestamp_type
from app.models.enums import UserRole, enum_column


class User(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'users'

    email: str = Field(index=True, unique=True)
    hashed_password: str
    username: Optional[str] = Field(default=None, index=True)
    name: Optional[str] = None
    is_active: bool = True
    role: UserRole = Field(default=UserRole.USER, sa_column=enum_column(UserRole, 'user_role'))

    is_banned: bool = False
    banned_at: Optional[datetime] = Field(default=None, sa_type=timestamp_type())
    banned_until: Optional[datetime] = Field(default=None, sa_type=timestamp_type())
    banned_by: Optional[str] = None
