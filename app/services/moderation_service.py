from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime, timedelta, timezone
from loguru import logger
from sqlmodel import Session
from app.core.errors import NotFound, PartialFailure, UnsupportedTarget, ValidationError
from app.models.enums import ModerationActionType, TargetKind
from app.models.moderation_action import ModerationAction
from app.models.user import User
from app.services.authorization import ensure_moderator
from app.services.target_resolver import get_resolver

DEFAULT_ACTION_REASON = 'Report resolution'
CONTENT_REMOVAL_KINDS = frozenset({TargetKind.POST, TargetKind.COMMENT})
BAN_ACTIONS = frozenset({ModerationActionType.TEMPORARY_BAN, ModerationActionType.PERMANENT_BAN})


@dataclass
class ActionOutcome:
    action: ModerationAction
    warnings: list[str] = field(default_factory=list)


def compute_expires_at(now: datetime, duration: Optional[float]) -> Optional[datetime]:
    """``None`` means no expiry; a zero duration still yields an expiry at ``now``."""
    if duration is None:
        return None
    if duration < 0:
        raise ValidationError('Action duration must not be negative')
    return now + timedelta(hours=duration)


def validate_action(target_type: TargetKind, action: ModerationActionType, duration: Optional[float] = None) -> None:
    target_type = TargetKind(target_type)
    action = ModerationActionType(action)
    if action == ModerationActionType.NONE:
        raise ValidationError('No moderation action to apply')
    if action == ModerationActionType.CONTENT_REMOVAL and target_type not in CONTENT_REMOVAL_KINDS:
        raise UnsupportedTarget(f'content_removal cannot be applied to a {target_type.value}')
    if duration is not None and duration < 0:
        raise ValidationError('Action duration must not be negative')


def check_action_target(
    session: Session,
    target_type: TargetKind,
    target_id: str,
    action: ModerationActionType,
) -> None:
    """Fail before any write when the entity the action mutates directly is missing."""
    if action == ModerationActionType.CONTENT_REMOVAL or (
        action in BAN_ACTIONS and target_type == TargetKind.USER
    ):
        get_resolver(target_type).require(session, target_id)


def _remove_content(
    session: Session,
    target_type: TargetKind,
    target_id: str,
    moderator_id: str,
    now: datetime,
) -> None:
    record = get_resolver(target_type).require(session, target_id)
    record.is_removed = True
    record.removed_at = now
    record.removed_by = moderator_id
    session.add(record)


def _ban_target(
    session: Session,
    target_type: TargetKind,
    target_id: str,
    moderator_id: str,
    now: datetime,
    banned_until: Optional[datetime],
) -> str:
    if target_type == TargetKind.USER:
        user_id = target_id
    else:
        try:
            user_id = get_resolver(target_type).resolve_author(session, target_id)
        except NotFound as exc:
            raise PartialFailure(f'Action recorded but author could not be banned: {exc.message}') from exc
    user = session.get(User, user_id)
    if user is None:
        raise PartialFailure(f'Action recorded but user {user_id} no longer exists')
    user.is_banned = True
    user.banned_at = now
    user.banned_until = banned_until
    user.banned_by = moderator_id
    session.add(user)
    return user_id


def apply_action(
    session: Session,
    target_type: TargetKind,
    target_id: str,
    action: ModerationActionType,
    caller: User,
    duration: Optional[float] = None,
    notes: Optional[str] = None,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ActionOutcome:
    ensure_moderator(caller)
    moderator_id = caller.id
    target_type = TargetKind(target_type)
    action = ModerationActionType(action)
    validate_action(target_type, action, duration)
    check_action_target(session, target_type, target_id, action)

    now = now or datetime.now(timezone.utc)
    record = ModerationAction(
        type=action,
        target_type=target_type,
        target_id=target_id,
        moderator_id=moderator_id,
        reason=reason or DEFAULT_ACTION_REASON,
        notes=notes,
        expires_at=compute_expires_at(now, duration),
        created_at=now,
    )
    # Audit row is flushed before any target mutation.
    session.add(record)
    session.flush()

    warnings: list[str] = []
    try:
        if action == ModerationActionType.CONTENT_REMOVAL:
            _remove_content(session, target_type, target_id, moderator_id, now)
        elif action in BAN_ACTIONS:
            banned_id = _ban_target(session, target_type, target_id, moderator_id, now, record.expires_at)
            logger.info('moderation.user.banned', user_id=banned_id, until=record.expires_at, action_id=record.id)
    except PartialFailure as exc:
        warnings.append(exc.message)
        logger.warning(
            'moderation.action.partial_failure',
            action_id=record.id,
            target_type=target_type.value,
            target_id=target_id,
            error=exc.message,
        )

    session.commit()
    session.refresh(record)
    logger.info(
        'moderation.action.applied',
        action_id=record.id,
        action=action.value,
        target_type=target_type.value,
        target_id=target_id,
        moderator_id=moderator_id,
    )
    return ActionOutcome(action=record, warnings=warnings)
