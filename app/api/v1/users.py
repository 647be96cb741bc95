from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.db.session import get_session
from app.models.user import User
from app.schemas.user import UserOut, UserRoleUpdate
from app.services.auth_service import get_current_user, require_admin
from app.services.user_service import set_user_role, to_user_out

router = APIRouter(prefix='/users', tags=['users'])


@router.get('/me', response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> UserOut:
    return to_user_out(user)


@router.patch('/{user_id}/role', response_model=UserOut)
def update_role(
    user_id: str,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
) -> UserOut:
    return to_user_out(set_user_role(session, admin, user_id, payload))
