from datetime import timedelta

import pytest
from sqlmodel import select

from app.core.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateReport,
    InvalidTransition,
    NotFound,
    UnsupportedTarget,
    ValidationError,
)
from app.models.enums import (
    ModerationActionType,
    NotificationType,
    ReportPriority,
    ReportReason,
    ReportStatus,
    TargetKind,
    UserRole,
)
from app.models.moderation_action import ModerationAction
from app.models.notification import Notification
from app.models.user import User
from app.schemas.report import ReportCreate, ReportFilters, ReportUpdate
from app.services import report_service
from app.services.report_service import create_report, delete_report, list_reports, update_report


def _report(kind: TargetKind, target_id: str, reason: ReportReason, **extra) -> ReportCreate:
    return ReportCreate(type=kind, target_id=target_id, reason=reason, **extra)


def _notifications(session, user_id: str) -> list[Notification]:
    return list(session.exec(select(Notification).where(Notification.user_id == user_id)).all())


def test_violence_report_is_high_priority_and_notifies_moderators(session, make_user, make_post, delivery):
    reporter = make_user()
    moderator = make_user(UserRole.MODERATOR)
    admin = make_user(UserRole.ADMIN)
    post = make_post(make_user().id, "threatening text")

    report = create_report(
        session,
        reporter,
        _report(
            TargetKind.POST,
            post.id,
            ReportReason.VIOLENCE,
            description="threat",
            evidence=["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"],
        ),
    )

    assert report.priority == ReportPriority.HIGH
    assert report.status == ReportStatus.PENDING
    assert report.evidence == ["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"]
    assert report.target_data == {"id": post.id, "content": "threatening text", "author_id": post.author_id}
    for staff in (moderator, admin):
        [notification] = _notifications(session, staff.id)
        assert notification.type == NotificationType.MODERATION_REPORT
        assert notification.data == {
            "kind": "moderation_report",
            "report_id": report.id,
            "type": "post",
            "reason": "violence",
        }
        assert notification.delivered_at is not None
    assert _notifications(session, reporter.id) == []
    assert sorted(delivery.delivered) == sorted(
        [(moderator.id, "moderation_report"), (admin.id, "moderation_report")]
    )


def test_second_report_while_pending_is_duplicate(session, make_user, make_post):
    reporter = make_user()
    post = make_post(make_user().id)
    create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))

    with pytest.raises(DuplicateReport):
        create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.HARASSMENT))


def test_other_reporters_may_report_the_same_target(session, make_user, make_post):
    post = make_post(make_user().id)
    create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))
    create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))


def test_unique_constraint_closes_duplicate_race(session, make_user, make_post, monkeypatch):
    reporter = make_user()
    post = make_post(make_user().id)
    create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    monkeypatch.setattr(report_service, "find_active_report", lambda *args, **kwargs: None)

    with pytest.raises(DuplicateReport):
        create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    assert len(list_reports(session, reporter)[0]) == 1


def test_new_report_allowed_after_resolution(session, make_user, make_post):
    reporter = make_user()
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    first = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    update_report(session, moderator, first.id, ReportUpdate(status=ReportStatus.DISMISSED))

    second = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    assert second.id != first.id


def test_missing_target_is_rejected(session, make_user):
    with pytest.raises(NotFound):
        create_report(session, make_user(), _report(TargetKind.COMMENT, "missing", ReportReason.SPAM))


def test_evidence_must_be_http_urls(session, make_user, make_post):
    post = make_post(make_user().id)
    with pytest.raises(ValidationError):
        create_report(
            session,
            make_user(),
            _report(TargetKind.POST, post.id, ReportReason.SPAM, evidence=["javascript:alert(1)"]),
        )


def test_unreliable_reporter_spam_stays_low(session, make_user, make_post, add_history):
    reporter = make_user()
    add_history(reporter.id, resolved=1, dismissed=7)
    post = make_post(make_user().id)

    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    assert report.priority == ReportPriority.LOW


def test_unreliable_reporter_violence_drops_to_medium(session, make_user, make_post, add_history):
    reporter = make_user()
    add_history(reporter.id, resolved=1, dismissed=7)
    post = make_post(make_user().id)

    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.VIOLENCE))
    assert report.priority == ReportPriority.MEDIUM


def test_reliable_reporter_is_upgraded(session, make_user, make_post, add_history):
    reporter = make_user()
    add_history(reporter.id, resolved=6)
    post = make_post(make_user().id)

    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    assert report.priority == ReportPriority.MEDIUM


def test_five_priors_do_not_adjust(session, make_user, make_post, add_history):
    reporter = make_user()
    add_history(reporter.id, resolved=5)
    post = make_post(make_user().id)

    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    assert report.priority == ReportPriority.LOW


def test_update_without_changes_only_stamps_moderator(session, make_user, make_post):
    reporter = make_user()
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.PRIVACY))
    before_updated_at = report.updated_at
    before_version = report.version

    result = update_report(session, moderator, report.id, ReportUpdate())

    updated = result.report
    assert updated.moderator_id == moderator.id
    assert updated.updated_at >= before_updated_at
    assert updated.version == before_version + 1
    assert updated.status == ReportStatus.PENDING
    assert updated.action is None
    assert updated.priority == ReportPriority.MEDIUM
    assert result.action is None
    assert result.warnings == []


def test_regular_user_cannot_update(session, make_user, make_post):
    reporter = make_user()
    post = make_post(make_user().id)
    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))

    with pytest.raises(AuthorizationError):
        update_report(session, reporter, report.id, ReportUpdate(status=ReportStatus.DISMISSED))


def test_update_unknown_report(session, make_user):
    with pytest.raises(NotFound):
        update_report(session, make_user(UserRole.ADMIN), "missing", ReportUpdate())


@pytest.mark.parametrize("closed", [ReportStatus.RESOLVED, ReportStatus.DISMISSED])
@pytest.mark.parametrize("target", [ReportStatus.PENDING, ReportStatus.INVESTIGATING])
def test_terminal_reports_cannot_be_reopened(session, make_user, make_post, closed, target):
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))
    update_report(session, moderator, report.id, ReportUpdate(status=closed))

    with pytest.raises(InvalidTransition):
        update_report(session, moderator, report.id, ReportUpdate(status=target))


def test_investigating_cannot_return_to_pending(session, make_user, make_post):
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))
    update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.INVESTIGATING))

    with pytest.raises(InvalidTransition):
        update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.PENDING))


def test_stale_version_is_rejected(session, make_user, make_post):
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))
    stale = report.version
    update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.INVESTIGATING, version=stale))

    with pytest.raises(ConflictError):
        update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.RESOLVED, version=stale))


def test_resolving_with_temporary_ban_bans_post_author(session, make_user, make_post, delivery):
    reporter = make_user()
    moderator = make_user(UserRole.MODERATOR)
    author = make_user()
    post = make_post(author.id, "violent content")
    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.VIOLENCE))
    assert report.priority == ReportPriority.HIGH

    result = update_report(
        session,
        moderator,
        report.id,
        ReportUpdate(
            status=ReportStatus.RESOLVED,
            action=ModerationActionType.TEMPORARY_BAN,
            action_duration=48,
            moderator_notes="credible threat",
        ),
    )

    resolved = result.report
    assert resolved.status == ReportStatus.RESOLVED
    assert resolved.action == ModerationActionType.TEMPORARY_BAN
    assert resolved.action_expires_at - resolved.action_taken_at == timedelta(hours=48)
    assert resolved.active_key is None
    assert result.warnings == []

    action = result.action
    assert action.type == ModerationActionType.TEMPORARY_BAN
    assert action.target_type == TargetKind.POST
    assert action.target_id == post.id
    assert action.expires_at - action.created_at == timedelta(hours=48)

    banned = session.get(User, author.id)
    session.refresh(banned)
    assert banned.is_banned is True
    assert banned.banned_until == action.expires_at
    assert banned.banned_by == moderator.id
    assert session.get(User, reporter.id).is_banned is False

    [notice] = _notifications(session, reporter.id)
    assert notice.type == NotificationType.REPORT_UPDATE
    assert notice.data == {
        "kind": "report_update",
        "report_id": report.id,
        "status": "resolved",
        "action": "temporary_ban",
    }
    assert (reporter.id, "report_update") in delivery.delivered


def test_second_moderator_cannot_apply_action_twice(session, make_user, make_post):
    author = make_user()
    first = make_user(UserRole.MODERATOR)
    second = make_user(UserRole.MODERATOR)
    post = make_post(author.id)
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.HARASSMENT))
    decision = ReportUpdate(
        status=ReportStatus.RESOLVED,
        action=ModerationActionType.TEMPORARY_BAN,
        action_duration=24,
    )

    update_report(session, first, report.id, decision)
    banned_until = session.get(User, author.id).banned_until
    with pytest.raises(ConflictError) as excinfo:
        update_report(session, second, report.id, decision)

    assert excinfo.value.code == "action_already_applied"
    assert len(session.exec(select(ModerationAction)).all()) == 1
    session.refresh(report)
    assert report.moderator_id == first.id
    assert session.get(User, author.id).banned_until == banned_until


def test_action_on_investigated_report_blocks_a_second_action(session, make_user, make_post):
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))

    update_report(
        session,
        moderator,
        report.id,
        ReportUpdate(status=ReportStatus.INVESTIGATING, action=ModerationActionType.WARNING),
    )
    with pytest.raises(ConflictError):
        update_report(
            session,
            moderator,
            report.id,
            ReportUpdate(status=ReportStatus.RESOLVED, action=ModerationActionType.CONTENT_REMOVAL),
        )

    closed = update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.RESOLVED))
    assert closed.report.status == ReportStatus.RESOLVED
    assert len(session.exec(select(ModerationAction)).all()) == 1

def test_reporter_notified_only_on_entering_terminal_state(session, make_user, make_post):
    reporter = make_user()
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))

    update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.INVESTIGATING))
    assert _notifications(session, reporter.id) == []

    update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.DISMISSED))
    update_report(session, moderator, report.id, ReportUpdate(moderator_notes="follow-up"))
    assert len(_notifications(session, reporter.id)) == 1


def test_unsupported_action_fails_before_report_changes(session, make_user):
    moderator = make_user(UserRole.MODERATOR)
    target = make_user()
    report = create_report(session, make_user(), _report(TargetKind.USER, target.id, ReportReason.IMPERSONATION))

    with pytest.raises(UnsupportedTarget):
        update_report(
            session,
            moderator,
            report.id,
            ReportUpdate(status=ReportStatus.RESOLVED, action=ModerationActionType.CONTENT_REMOVAL),
        )

    session.refresh(report)
    assert report.status == ReportStatus.PENDING
    assert report.moderator_id is None
    assert session.exec(select(ModerationAction)).all() == []


def test_ban_without_author_keeps_audit_record(session, make_user, make_conversation):
    moderator = make_user(UserRole.MODERATOR)
    conversation = make_conversation()
    report = create_report(
        session, make_user(), _report(TargetKind.CONVERSATION, conversation.id, ReportReason.HARASSMENT)
    )

    result = update_report(
        session,
        moderator,
        report.id,
        ReportUpdate(status=ReportStatus.RESOLVED, action=ModerationActionType.PERMANENT_BAN),
    )

    assert result.report.status == ReportStatus.RESOLVED
    assert result.action is not None
    assert result.action.expires_at is None
    assert len(result.warnings) == 1
    assert "author" in result.warnings[0]
    assert len(session.exec(select(ModerationAction)).all()) == 1


def test_action_none_records_nothing(session, make_user, make_post):
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))

    result = update_report(
        session,
        moderator,
        report.id,
        ReportUpdate(status=ReportStatus.DISMISSED, action=ModerationActionType.NONE),
    )

    assert result.report.action == ModerationActionType.NONE
    assert result.report.action_taken_at is None
    assert result.action is None
    assert session.exec(select(ModerationAction)).all() == []


def test_target_deleted_after_intake_keeps_snapshot(session, make_user, make_post):
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id, "soon gone")
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))
    session.delete(post)
    session.commit()

    result = update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.INVESTIGATING))
    assert result.report.target_data["content"] == "soon gone"
    assert result.report.status == ReportStatus.INVESTIGATING


def test_reporter_can_delete_pending_report(session, make_user, make_post):
    reporter = make_user()
    post = make_post(make_user().id)
    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))

    with pytest.raises(AuthorizationError):
        delete_report(session, make_user(), report.id)
    with pytest.raises(AuthorizationError):
        delete_report(session, make_user(UserRole.MODERATOR), report.id)

    delete_report(session, reporter, report.id)
    with pytest.raises(NotFound):
        delete_report(session, reporter, report.id)


def test_admin_cannot_delete_processed_report(session, make_user, make_post):
    admin = make_user(UserRole.ADMIN)
    reporter = make_user()
    post = make_post(make_user().id)
    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    update_report(session, admin, report.id, ReportUpdate(status=ReportStatus.INVESTIGATING))

    with pytest.raises(InvalidTransition):
        delete_report(session, admin, report.id)
    with pytest.raises(InvalidTransition):
        delete_report(session, reporter, report.id)


def test_admin_can_delete_pending_report(session, make_user, make_post):
    admin = make_user(UserRole.ADMIN)
    post = make_post(make_user().id)
    report = create_report(session, make_user(), _report(TargetKind.POST, post.id, ReportReason.SPAM))
    delete_report(session, admin, report.id)


def test_listing_scopes_and_sorts(session, make_user, make_post):
    reporter = make_user()
    other = make_user()
    moderator = make_user(UserRole.MODERATOR)
    posts = [make_post(make_user().id) for _ in range(3)]
    create_report(session, reporter, _report(TargetKind.POST, posts[0].id, ReportReason.SPAM))
    create_report(session, reporter, _report(TargetKind.POST, posts[1].id, ReportReason.VIOLENCE))
    create_report(session, other, _report(TargetKind.POST, posts[2].id, ReportReason.COPYRIGHT))

    own, own_total = list_reports(session, reporter)
    assert own_total == 2
    assert {record.reporter_id for record in own} == {reporter.id}

    everything, total = list_reports(session, moderator, sort_by="priority", sort_order="desc")
    assert total == 3
    assert [record.priority for record in everything] == [
        ReportPriority.HIGH,
        ReportPriority.MEDIUM,
        ReportPriority.LOW,
    ]

    page, total = list_reports(session, moderator, limit=1, offset=1, sort_by="priority", sort_order="asc")
    assert total == 3
    assert [record.priority for record in page] == [ReportPriority.MEDIUM]

    spam, spam_total = list_reports(session, moderator, ReportFilters(reason=ReportReason.SPAM))
    assert spam_total == 1
    assert spam[0].reason == ReportReason.SPAM


def test_moderator_filter_ignored_for_regular_users(session, make_user, make_post):
    reporter = make_user()
    moderator = make_user(UserRole.MODERATOR)
    post = make_post(make_user().id)
    report = create_report(session, reporter, _report(TargetKind.POST, post.id, ReportReason.SPAM))
    update_report(session, moderator, report.id, ReportUpdate(status=ReportStatus.INVESTIGATING))

    _, total = list_reports(session, reporter, ReportFilters(moderator_id="someone-else"))
    assert total == 1
    handled, handled_total = list_reports(session, moderator, ReportFilters(moderator_id=moderator.id))
    assert handled_total == 1
    assert handled[0].id == report.id
