"""Point-in-time moderation summary over a reporting window."""

from typing import Any, Optional
from datetime import datetime, timedelta, timezone
from sqlalchemy import func
from sqlmodel import Session, select
from app.core.errors import ValidationError
from app.models.base import ensure_utc
from app.models.enums import ModerationActionType, ReportStatus
from app.models.moderation_action import ModerationAction
from app.models.report import ACTIVE_STATUSES, Report
from app.schemas.moderation import (
    ActionStats,
    ModerationStatsOut,
    ModeratorPerformance,
    ReportStats,
    ResponseTimeStats,
    StatsPeriod,
    StatsPeriodOut,
    TrendingTarget,
)
from app.services.report_lifecycle import TERMINAL_STATUSES

PERIOD_LENGTHS: dict[str, timedelta] = {
    'day': timedelta(days=1),
    'week': timedelta(days=7),
    'month': timedelta(days=30),
    'year': timedelta(days=365),
}
TRENDING_LIMIT = 10


def resolve_window(
    period: StatsPeriod,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    now = now or datetime.now(timezone.utc)
    if start is not None and end is not None:
        start, end = ensure_utc(start), ensure_utc(end)
        if start > end:
            raise ValidationError('start must be before end')
        return start, end
    return now - PERIOD_LENGTHS[period], now


def _key(value: Any) -> str:
    return value.value if hasattr(value, 'value') else str(value)


def _count_by(session: Session, column, *conditions) -> dict[str, int]:
    statement = select(column, func.count()).where(*conditions).group_by(column)
    return {_key(key): int(count) for key, count in session.exec(statement).all() if key is not None}


def _count(session: Session, model, *conditions) -> int:
    return int(session.exec(select(func.count()).select_from(model).where(*conditions)).one() or 0)


def _rate(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def _response_times(session: Session, *conditions) -> list[float]:
    statement = select(Report.created_at, Report.updated_at).where(
        Report.status.in_(list(TERMINAL_STATUSES)), *conditions
    )
    return [
        (ensure_utc(updated) - ensure_utc(created)).total_seconds() / 3600
        for created, updated in session.exec(statement).all()
        if created is not None and updated is not None
    ]


def get_moderation_stats(
    session: Session,
    period: StatsPeriod = 'month',
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    moderator_id: Optional[str] = None,
) -> ModerationStatsOut:
    window_start, window_end = resolve_window(period, start, end)
    report_window = (Report.created_at >= window_start, Report.created_at <= window_end)
    action_window = (ModerationAction.created_at >= window_start, ModerationAction.created_at <= window_end)

    by_status = _count_by(session, Report.status, *report_window)
    total_reports = sum(by_status.values())
    closed = by_status.get(ReportStatus.RESOLVED.value, 0) + by_status.get(ReportStatus.DISMISSED.value, 0)

    actions_by_type = _count_by(session, ModerationAction.type, *action_window)

    response_hours = _response_times(session, *report_window)
    performance = ResponseTimeStats(
        avg_hours=round(sum(response_hours) / len(response_hours), 2) if response_hours else 0.0,
        min_hours=round(min(response_hours), 2) if response_hours else 0.0,
        max_hours=round(max(response_hours), 2) if response_hours else 0.0,
    )

    trending_statement = (
        select(Report.type, Report.target_id, func.count(Report.id).label('report_count'))
        .where(Report.status.in_(list(ACTIVE_STATUSES)), *report_window)
        .group_by(Report.type, Report.target_id)
        .order_by(func.count(Report.id).desc())
        .limit(TRENDING_LIMIT)
    )
    trending = [
        TrendingTarget(type=kind, target_id=target_id, count=int(count))
        for kind, target_id, count in session.exec(trending_statement).all()
    ]

    moderator_performance = None
    if moderator_id:
        handled = _count(session, Report, Report.moderator_id == moderator_id, *report_window)
        resolved = _count(
            session,
            Report,
            Report.moderator_id == moderator_id,
            Report.status == ReportStatus.RESOLVED,
            *report_window,
        )
        moderator_performance = ModeratorPerformance(
            moderator_id=moderator_id,
            reports_handled=handled,
            reports_resolved=resolved,
            actions_performed=_count(
                session, ModerationAction, ModerationAction.moderator_id == moderator_id, *action_window
            ),
            resolution_rate=_rate(resolved, handled),
        )

    return ModerationStatsOut(
        period=StatsPeriodOut(start=window_start, end=window_end, type=period),
        reports=ReportStats(
            total=total_reports,
            by_status=by_status,
            by_reason=_count_by(session, Report.reason, *report_window),
            by_type=_count_by(session, Report.type, *report_window),
            resolution_rate=_rate(closed, total_reports),
        ),
        actions=ActionStats(
            total=sum(actions_by_type.values()),
            by_type=actions_by_type,
            by_moderator=_count_by(session, ModerationAction.moderator_id, *action_window),
            content_removed=actions_by_type.get(ModerationActionType.CONTENT_REMOVAL.value, 0),
        ),
        performance=performance,
        trending=trending,
        moderator_performance=moderator_performance,
    )
