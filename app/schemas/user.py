from typing import Optional
from pydantic import BaseModel, EmailStr
from app.models.enums import UserRole


class UserOut(BaseModel):
    id: str
    email: EmailStr
    username: Optional[str] = None
    name: Optional[str] = None
    is_active: bool
    is_banned: bool
    role: UserRole


class UserRoleUpdate(BaseModel):
    role: UserRole
