from sqlmodel import Session

from app.core.errors import NotFound, ValidationError
from app.models.user import User
from app.schemas.user import UserOut, UserRoleUpdate
from app.services.auth_service import is_ban_active


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        username=user.username,
        name=user.name,
        is_active=user.is_active,
        is_banned=is_ban_active(user),
        role=user.role,
    )


def set_user_role(session: Session, admin: User, user_id: str, payload: UserRoleUpdate) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound('User not found')
    if user.id == admin.id and payload.role != user.role:
        raise ValidationError('Admins cannot change their own role')
    user.role = payload.role
    session.add(user)
    session.commit()
    session.refresh(user)
    return user
