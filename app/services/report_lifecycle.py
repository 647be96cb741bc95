from app.core.errors import InvalidTransition
from app.models.enums import ReportStatus

TERMINAL_STATUSES = frozenset({ReportStatus.RESOLVED, ReportStatus.DISMISSED})

# Terminal states have no outgoing edges: a closed report is never reopened,
# a new report has to be filed instead.
ALLOWED_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset(
        {ReportStatus.INVESTIGATING, ReportStatus.RESOLVED, ReportStatus.DISMISSED}
    ),
    ReportStatus.INVESTIGATING: frozenset({ReportStatus.RESOLVED, ReportStatus.DISMISSED}),
    ReportStatus.RESOLVED: frozenset(),
    ReportStatus.DISMISSED: frozenset(),
}


def is_terminal(status: ReportStatus) -> bool:
    return ReportStatus(status) in TERMINAL_STATUSES


def can_transition(current: ReportStatus, target: ReportStatus) -> bool:
    current, target = ReportStatus(current), ReportStatus(target)
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: ReportStatus, target: ReportStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(
            f'Cannot move report from {ReportStatus(current).value} to {ReportStatus(target).value}'
        )
