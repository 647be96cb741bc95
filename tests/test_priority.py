import pytest

from app.models.enums import ReportPriority, ReportReason, TrustAdjustment
from app.services.priority import PRIORITY_LADDER, adjust_priority, base_priority, priority_rank, score_priority


@pytest.mark.parametrize(
    ("reason", "expected"),
    [
        (ReportReason.VIOLENCE, ReportPriority.HIGH),
        (ReportReason.HATE_SPEECH, ReportPriority.HIGH),
        (ReportReason.HARASSMENT, ReportPriority.HIGH),
        (ReportReason.SPAM, ReportPriority.LOW),
        (ReportReason.OTHER, ReportPriority.LOW),
        (ReportReason.SEXUAL_CONTENT, ReportPriority.MEDIUM),
        (ReportReason.MISINFORMATION, ReportPriority.MEDIUM),
        (ReportReason.COPYRIGHT, ReportPriority.MEDIUM),
        (ReportReason.PRIVACY, ReportPriority.MEDIUM),
        (ReportReason.IMPERSONATION, ReportPriority.MEDIUM),
    ],
)
def test_base_priority_by_reason(reason, expected):
    assert base_priority(reason) == expected
    assert score_priority(reason, TrustAdjustment.NEUTRAL) == expected


def test_upgrade_moves_one_step_and_clamps_at_high():
    assert adjust_priority(ReportPriority.LOW, TrustAdjustment.UPGRADE) == ReportPriority.MEDIUM
    assert adjust_priority(ReportPriority.MEDIUM, TrustAdjustment.UPGRADE) == ReportPriority.HIGH
    assert adjust_priority(ReportPriority.HIGH, TrustAdjustment.UPGRADE) == ReportPriority.HIGH


def test_downgrade_moves_one_step_and_clamps_at_low():
    assert adjust_priority(ReportPriority.HIGH, TrustAdjustment.DOWNGRADE) == ReportPriority.MEDIUM
    assert adjust_priority(ReportPriority.MEDIUM, TrustAdjustment.DOWNGRADE) == ReportPriority.LOW
    assert adjust_priority(ReportPriority.LOW, TrustAdjustment.DOWNGRADE) == ReportPriority.LOW


@pytest.mark.parametrize("priority", PRIORITY_LADDER)
def test_adjustment_is_monotonic(priority):
    up = adjust_priority(priority, TrustAdjustment.UPGRADE)
    down = adjust_priority(priority, TrustAdjustment.DOWNGRADE)
    assert priority_rank(down) <= priority_rank(priority) <= priority_rank(up)
    assert adjust_priority(priority, TrustAdjustment.NEUTRAL) == priority


def test_spam_from_unreliable_reporter_stays_low():
    assert score_priority(ReportReason.SPAM, TrustAdjustment.DOWNGRADE) == ReportPriority.LOW


def test_accepts_raw_string_values():
    assert score_priority("violence", "downgrade") == ReportPriority.MEDIUM
