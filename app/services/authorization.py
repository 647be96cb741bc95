from app.core.errors import AuthorizationError
from app.models.enums import UserRole
from app.models.user import User

MODERATION_ROLES = frozenset({UserRole.MODERATOR, UserRole.ADMIN})


def is_moderator(user: User) -> bool:
    return user.role in MODERATION_ROLES


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def ensure_moderator(user: User) -> None:
    if not is_moderator(user):
        raise AuthorizationError('Moderator access required')


def ensure_admin(user: User) -> None:
    if not is_admin(user):
        raise AuthorizationError('Admin only')
