from app.models.enums import ReportPriority, ReportReason, TrustAdjustment

HIGH_PRIORITY_REASONS = frozenset({ReportReason.VIOLENCE, ReportReason.HATE_SPEECH, ReportReason.HARASSMENT})
LOW_PRIORITY_REASONS = frozenset({ReportReason.SPAM, ReportReason.OTHER})

PRIORITY_LADDER: tuple[ReportPriority, ...] = (ReportPriority.LOW, ReportPriority.MEDIUM, ReportPriority.HIGH)

_STEP = {
    TrustAdjustment.UPGRADE: 1,
    TrustAdjustment.NEUTRAL: 0,
    TrustAdjustment.DOWNGRADE: -1,
}


def base_priority(reason: ReportReason) -> ReportPriority:
    reason = ReportReason(reason)
    if reason in HIGH_PRIORITY_REASONS:
        return ReportPriority.HIGH
    if reason in LOW_PRIORITY_REASONS:
        return ReportPriority.LOW
    return ReportPriority.MEDIUM


def adjust_priority(priority: ReportPriority, adjustment: TrustAdjustment) -> ReportPriority:
    index = PRIORITY_LADDER.index(ReportPriority(priority)) + _STEP[TrustAdjustment(adjustment)]
    index = max(0, min(index, len(PRIORITY_LADDER) - 1))
    return PRIORITY_LADDER[index]


def score_priority(reason: ReportReason, adjustment: TrustAdjustment) -> ReportPriority:
    return adjust_priority(base_priority(reason), adjustment)


def priority_rank(priority: ReportPriority) -> int:
    return PRIORITY_LADDER.index(ReportPriority(priority))
