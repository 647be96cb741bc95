from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from app.core.config import settings
from app.db.session import get_session
from app.models.enums import ReportReason, ReportStatus, TargetKind
from app.models.user import User
from app.schemas.moderation import ModerationActionOut
from app.schemas.report import (
    Pagination,
    ReportCreate,
    ReportFilters,
    ReportOut,
    ReportPage,
    ReportSortField,
    ReportUpdate,
    ReportUpdateOut,
    SortOrder,
)
from app.services.auth_service import get_current_user
from app.services.report_service import (
    create_report,
    delete_report,
    get_visible_report,
    list_reports,
    to_report_out,
    update_report,
)

router = APIRouter(prefix='/reports', tags=['reports'])


@router.post('', response_model=ReportOut, status_code=status.HTTP_201_CREATED)
def create_report_endpoint(
    payload: ReportCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportOut:
    return to_report_out(create_report(session, user, payload))


@router.get('', response_model=ReportPage)
def list_reports_endpoint(
    status: Optional[ReportStatus] = None,
    type: Optional[TargetKind] = None,
    reason: Optional[ReportReason] = None,
    moderator_id: Optional[str] = None,
    limit: int = Query(default=settings.REPORT_PAGE_SIZE, ge=1, le=settings.REPORT_PAGE_SIZE_MAX),
    offset: int = Query(default=0, ge=0),
    sort_by: ReportSortField = 'created_at',
    sort_order: SortOrder = 'desc',
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportPage:
    filters = ReportFilters(status=status, type=type, reason=reason, moderator_id=moderator_id)
    reports, total = list_reports(
        session,
        user,
        filters,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ReportPage(
        reports=[to_report_out(record) for record in reports],
        pagination=Pagination(total=total, limit=limit, offset=offset, has_more=offset + limit < total),
    )


@router.get('/{report_id}', response_model=ReportOut)
def get_report_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportOut:
    return to_report_out(get_visible_report(session, user, report_id))


@router.patch('/{report_id}', response_model=ReportUpdateOut)
def update_report_endpoint(
    report_id: str,
    payload: ReportUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportUpdateOut:
    result = update_report(session, user, report_id, payload)
    return ReportUpdateOut(
        report=to_report_out(result.report),
        action=ModerationActionOut.model_validate(result.action, from_attributes=True) if result.action else None,
        warnings=result.warnings,
    )


@router.delete('/{report_id}')
def delete_report_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    delete_report(session, user, report_id)
    return {'status': 'ok'}
