from typing import Optional, Protocol
from datetime import datetime, timezone
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from app.core.errors import AuthorizationError, NotFound
from app.models.enums import ModerationActionType, NotificationType, ReportStatus
from app.models.notification import Notification
from app.models.report import Report
from app.models.user import User
from app.schemas.notification import (
    ModerationReportPayload,
    NotificationOut,
    NotificationPayload,
    NotificationUpdate,
    ReportUpdatePayload,
    notification_payload_adapter,
)
from app.services.authorization import MODERATION_ROLES


class NotificationDelivery(Protocol):
    def deliver(self, notification: Notification) -> None: ...


class LogDelivery:
    """Default transport: records the hand-off in the log only."""

    def deliver(self, notification: Notification) -> None:
        logger.info(
            'notification.delivered',
            notification_id=notification.id,
            user_id=notification.user_id,
            type=notification.type.value,
        )


_delivery: NotificationDelivery = LogDelivery()


def get_delivery_backend() -> NotificationDelivery:
    return _delivery


def set_delivery_backend(backend: NotificationDelivery) -> NotificationDelivery:
    global _delivery
    previous = _delivery
    _delivery = backend
    return previous


def _build(user_id: str, title: str, message: str, payload: NotificationPayload) -> Notification:
    return Notification(
        user_id=user_id,
        type=NotificationType(payload.kind),
        title=title,
        message=message,
        data=payload.model_dump(mode='json'),
    )


def notify_moderators(session: Session, report: Report) -> list[Notification]:
    """Queue one ``moderation_report`` notification per moderator/admin.

    Rows are only added to the session; they become durable with the caller's commit.
    """
    moderator_ids = session.exec(select(User.id).where(User.role.in_(list(MODERATION_ROLES)))).all()
    payload = ModerationReportPayload(report_id=report.id, type=report.type, reason=report.reason)
    records = [
        _build(
            moderator_id,
            'New Report',
            f'New {report.type.value} report: {report.reason.value}',
            payload,
        )
        for moderator_id in moderator_ids
    ]
    session.add_all(records)
    return records


def notify_reporter(
    session: Session,
    report: Report,
    status: ReportStatus,
    action: Optional[ModerationActionType] = None,
) -> Notification:
    payload = ReportUpdatePayload(report_id=report.id, status=status, action=action)
    record = _build(report.reporter_id, 'Report Update', f'Your report has been {status.value}', payload)
    session.add(record)
    return record


def deliver_pending(session: Session, records: list[Notification]) -> int:
    """Hand committed notifications to the delivery backend.

    Never raises: failed deliveries keep ``delivered_at`` empty for an external retry.
    """
    if not records:
        return 0
    delivered = 0
    now = datetime.now(timezone.utc)
    for record in records:
        try:
            _delivery.deliver(record)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                'notification.delivery_failed',
                notification_id=record.id,
                user_id=record.user_id,
                error=str(exc),
            )
            continue
        record.delivered_at = now
        session.add(record)
        delivered += 1
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning('notification.delivery_stamp_failed', error=str(exc))
    return delivered


def notification_payload(record: Notification) -> NotificationPayload:
    return notification_payload_adapter.validate_python(record.data)


def to_notification_out(record: Notification) -> NotificationOut:
    return NotificationOut(
        id=record.id,
        type=record.type,
        title=record.title,
        message=record.message,
        data=notification_payload(record),
        read=record.read,
        created_at=record.created_at,
    )


def list_notifications(
    session: Session,
    user_id: str,
    unread_only: bool = False,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> list[Notification]:
    statement = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
    )
    if unread_only:
        statement = statement.where(Notification.read.is_(False))
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def get_owned_notification(session: Session, user: User, notification_id: str) -> Notification:
    record = session.get(Notification, notification_id)
    if not record:
        raise NotFound('Notification not found')
    if record.user_id != user.id:
        raise AuthorizationError('Not allowed')
    return record


def update_notification(session: Session, record: Notification, payload: NotificationUpdate) -> Notification:
    record.read = payload.read
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def mark_all_read(session: Session, user_id: str) -> int:
    notifications = session.exec(
        select(Notification).where((Notification.user_id == user_id) & (Notification.read.is_(False)))
    ).all()
    for record in notifications:
        record.read = True
        session.add(record)
    session.commit()
    return len(notifications)


def delete_notification(session: Session, record: Notification) -> None:
    session.delete(record)
    session.commit()
