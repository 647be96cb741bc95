from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime, timezone
from urllib.parse import urlparse
from loguru import logger
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from app.core.config import settings
from app.core.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateReport,
    InvalidTransition,
    ModerationError,
    NotFound,
    ValidationError,
)
from app.models.enums import ModerationActionType, ReportPriority, ReportStatus
from app.models.moderation_action import ModerationAction
from app.models.notification import Notification
from app.models.report import Report, active_key_for
from app.models.user import User
from app.schemas.report import ReportCreate, ReportFilters, ReportOut, ReportSortField, ReportUpdate, SortOrder
from app.services.authorization import ensure_moderator, is_admin, is_moderator
from app.services.moderation_service import apply_action, check_action_target, compute_expires_at, validate_action
from app.services.notification_service import deliver_pending, notify_moderators, notify_reporter
from app.services.priority import score_priority
from app.services.reliability import track_record, trust_adjustment
from app.services.report_lifecycle import ensure_transition, is_terminal
from app.services.target_resolver import resolve


@dataclass
class ReportUpdateResult:
    report: Report
    action: Optional[ModerationAction] = None
    warnings: list[str] = field(default_factory=list)


def to_report_out(record: Report) -> ReportOut:
    return ReportOut.model_validate(record, from_attributes=True)


def _validate_submission(payload: ReportCreate) -> None:
    if payload.description and len(payload.description) > settings.REPORT_DESCRIPTION_MAX_LEN:
        raise ValidationError(
            f'description must be at most {settings.REPORT_DESCRIPTION_MAX_LEN} characters'
        )
    if len(payload.evidence) > settings.REPORT_EVIDENCE_MAX_ITEMS:
        raise ValidationError(f'at most {settings.REPORT_EVIDENCE_MAX_ITEMS} evidence links are allowed')
    for url in payload.evidence:
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValidationError(f'evidence must be http(s) URLs: {url}')


def find_active_report(session: Session, reporter_id: str, payload: ReportCreate) -> Optional[Report]:
    key = active_key_for(reporter_id, payload.type, payload.target_id)
    return session.exec(select(Report).where(Report.active_key == key)).first()


def create_report(session: Session, reporter: User, payload: ReportCreate) -> Report:
    _validate_submission(payload)
    if find_active_report(session, reporter.id, payload):
        raise DuplicateReport('You have already reported this content')

    snapshot = resolve(session, payload.type, payload.target_id)
    history = track_record(session, reporter.id)
    adjustment = trust_adjustment(history)
    priority = score_priority(payload.reason, adjustment)

    record = Report(
        type=payload.type,
        target_id=payload.target_id,
        reason=payload.reason,
        description=payload.description,
        evidence=list(payload.evidence),
        priority=priority,
        status=ReportStatus.PENDING,
        reporter_id=reporter.id,
        target_data=snapshot,
        active_key=active_key_for(reporter.id, payload.type, payload.target_id),
    )
    try:
        session.add(record)
        notifications = notify_moderators(session, record)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.info('report.duplicate_race', reporter_id=reporter.id, target_id=payload.target_id)
        raise DuplicateReport('You have already reported this content') from exc
    session.refresh(record)
    logger.info(
        'report.created',
        report_id=record.id,
        reporter_id=reporter.id,
        type=record.type.value,
        reason=record.reason.value,
        priority=record.priority.value,
        adjustment=adjustment.value,
        accuracy=round(history.accuracy, 3),
    )
    deliver_pending(session, notifications)
    return record


def _priority_rank():
    return case(
        (Report.priority == ReportPriority.HIGH, 2),
        (Report.priority == ReportPriority.MEDIUM, 1),
        else_=0,
    )


def list_reports(
    session: Session,
    caller: User,
    filters: Optional[ReportFilters] = None,
    limit: int = 20,
    offset: int = 0,
    sort_by: ReportSortField = 'created_at',
    sort_order: SortOrder = 'desc',
) -> tuple[list[Report], int]:
    filters = filters or ReportFilters()
    conditions = []
    moderator = is_moderator(caller)
    if not moderator:
        conditions.append(Report.reporter_id == caller.id)
    if filters.status is not None:
        conditions.append(Report.status == filters.status)
    if filters.type is not None:
        conditions.append(Report.type == filters.type)
    if filters.reason is not None:
        conditions.append(Report.reason == filters.reason)
    if filters.moderator_id and moderator:
        conditions.append(Report.moderator_id == filters.moderator_id)

    total = session.exec(select(func.count()).select_from(Report).where(*conditions)).one()

    sort_column = _priority_rank() if sort_by == 'priority' else getattr(Report, sort_by)
    ordering = sort_column.asc() if sort_order == 'asc' else sort_column.desc()
    statement = select(Report).where(*conditions).order_by(ordering, Report.created_at.desc(), Report.id)
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all()), int(total or 0)


def get_report(session: Session, report_id: str, for_update: bool = False) -> Optional[Report]:
    statement = select(Report).where(Report.id == report_id)
    if for_update:
        statement = statement.with_for_update().execution_options(populate_existing=True)
    return session.exec(statement).first()


def get_visible_report(session: Session, caller: User, report_id: str) -> Report:
    record = get_report(session, report_id)
    if not record:
        raise NotFound('Report not found')
    if record.reporter_id != caller.id and not is_moderator(caller):
        raise AuthorizationError('Not allowed')
    return record


def _has_enforcement(record: Report) -> bool:
    return record.action is not None and record.action != ModerationActionType.NONE


def update_report(session: Session, caller: User, report_id: str, payload: ReportUpdate) -> ReportUpdateResult:
    """Apply a moderator decision to a report.

    Everything that can be rejected is checked before the first write. The report
    change and its reporter notification commit together; the enforcement action
    runs afterwards, so an executor error reaches the caller while the report
    update stays in place. A report carries at most one enforcement action, so a
    second action on a decided report is refused.
    """
    ensure_moderator(caller)
    record = get_report(session, report_id, for_update=True)
    if not record:
        raise NotFound('Report not found')
    if payload.version is not None and payload.version != record.version:
        raise ConflictError('Report was modified by another moderator')
    action = payload.action
    enforce = action is not None and action != ModerationActionType.NONE
    if enforce and (is_terminal(record.status) or _has_enforcement(record)):
        raise ConflictError('An action has already been decided for this report', code='action_already_applied')

    previous_status = record.status
    if payload.status is not None:
        ensure_transition(previous_status, payload.status)
    if enforce:
        validate_action(record.type, action, payload.action_duration)
        check_action_target(session, record.type, record.target_id, action)

    now = datetime.now(timezone.utc)
    record.moderator_id = caller.id
    record.updated_at = now
    record.version += 1
    if payload.status is not None:
        record.status = payload.status
    if payload.moderator_notes is not None:
        record.moderator_notes = payload.moderator_notes
    if action is not None:
        record.action = action
        if enforce:
            record.action_taken_at = now
            record.action_expires_at = compute_expires_at(now, payload.action_duration)

    notifications: list[Notification] = []
    if is_terminal(record.status) and not is_terminal(previous_status):
        record.active_key = None
        notifications.append(notify_reporter(session, record, record.status, record.action))

    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info(
        'report.updated',
        report_id=record.id,
        moderator_id=caller.id,
        previous_status=previous_status.value,
        status=record.status.value,
        action=action.value if action else None,
    )
    deliver_pending(session, notifications)

    if not enforce:
        return ReportUpdateResult(report=record)
    try:
        outcome = apply_action(
            session,
            record.type,
            record.target_id,
            action,
            caller,
            duration=payload.action_duration,
            notes=payload.moderator_notes,
            now=now,
        )
    except ModerationError as exc:
        logger.error('report.action_failed', report_id=record.id, action=action.value, error=exc.message)
        raise
    session.refresh(record)
    return ReportUpdateResult(report=record, action=outcome.action, warnings=outcome.warnings)


def delete_report(session: Session, caller: User, report_id: str) -> None:
    record = get_report(session, report_id, for_update=True)
    if not record:
        raise NotFound('Report not found')
    if record.reporter_id != caller.id and not is_admin(caller):
        raise AuthorizationError('Access denied')
    if record.status != ReportStatus.PENDING:
        raise InvalidTransition('Cannot delete report that is being processed')
    session.delete(record)
    session.commit()
    logger.info('report.deleted', report_id=report_id, caller_id=caller.id)
