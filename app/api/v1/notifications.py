from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from app.db.session import get_session
from app.models.user import User
from app.schemas.notification import NotificationOut, NotificationUpdate
from app.services.auth_service import get_current_user
from app.services.notification_service import (
    delete_notification,
    get_owned_notification,
    list_notifications,
    mark_all_read,
    to_notification_out,
    update_notification,
)

router = APIRouter(prefix='/notifications', tags=['notifications'])


@router.get('', response_model=list[NotificationOut])
def list_notifications_endpoint(
    unread_only: bool = False,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[NotificationOut]:
    records = list_notifications(session, user.id, unread_only=unread_only, limit=limit, offset=offset)
    return [to_notification_out(record) for record in records]


@router.patch('/{notification_id}', response_model=NotificationOut)
def update_notification_endpoint(
    notification_id: str,
    payload: NotificationUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> NotificationOut:
    record = get_owned_notification(session, user, notification_id)
    return to_notification_out(update_notification(session, record, payload))


@router.post('/read-all')
def mark_all_notifications_read(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    return {'status': 'ok', 'updated': mark_all_read(session, user.id)}


@router.delete('/{notification_id}')
def delete_notification_endpoint(
    notification_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    delete_notification(session, get_owned_notification(session, user, notification_id))
    return {'status': 'ok'}
