from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from app.db.session import get_session
from app.models.user import User
from app.schemas.moderation import (
    ModerationActionCreate,
    ModerationActionOut,
    ModerationActionResult,
    ModerationStatsOut,
    StatsPeriod,
)
from app.services.auth_service import require_moderator
from app.services.moderation_service import apply_action
from app.services.moderation_stats import get_moderation_stats

router = APIRouter(prefix='/moderation', tags=['moderation'])


@router.post('/actions', response_model=ModerationActionResult, status_code=status.HTTP_201_CREATED)
def apply_action_endpoint(
    payload: ModerationActionCreate,
    session: Session = Depends(get_session),
    moderator: User = Depends(require_moderator),
) -> ModerationActionResult:
    outcome = apply_action(
        session,
        payload.target_type,
        payload.target_id,
        payload.action,
        moderator,
        duration=payload.duration,
        notes=payload.notes,
        reason=payload.reason,
    )
    return ModerationActionResult(
        action=ModerationActionOut.model_validate(outcome.action, from_attributes=True),
        warnings=outcome.warnings,
    )


@router.get('/stats', response_model=ModerationStatsOut)
def moderation_stats_endpoint(
    period: StatsPeriod = 'month',
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    moderator_id: Optional[str] = None,
    session: Session = Depends(get_session),
    _: User = Depends(require_moderator),
) -> ModerationStatsOut:
    return get_moderation_stats(session, period=period, start=start, end=end, moderator_id=moderator_id)
