from dataclasses import dataclass
from sqlalchemy import func
from sqlmodel import Session, select
from app.models.enums import ReportStatus, TrustAdjustment
from app.models.report import Report

MIN_REPORTS_FOR_ADJUSTMENT = 5
UPGRADE_ACCURACY = 0.8
DOWNGRADE_ACCURACY = 0.3


@dataclass(frozen=True)
class TrackRecord:
    total: int
    resolved: int
    dismissed: int

    @property
    def accuracy(self) -> float:
        decided = self.resolved + self.dismissed
        if decided == 0:
            return 0.0
        return self.resolved / decided


def track_record(session: Session, reporter_id: str) -> TrackRecord:
    statement = (
        select(Report.status, func.count(Report.id))
        .where(Report.reporter_id == reporter_id)
        .group_by(Report.status)
    )
    counts = {ReportStatus(status): int(count) for status, count in session.exec(statement).all()}
    return TrackRecord(
        total=sum(counts.values()),
        resolved=counts.get(ReportStatus.RESOLVED, 0),
        dismissed=counts.get(ReportStatus.DISMISSED, 0),
    )


def trust_adjustment(record: TrackRecord) -> TrustAdjustment:
    if record.total <= MIN_REPORTS_FOR_ADJUSTMENT:
        return TrustAdjustment.NEUTRAL
    if record.accuracy > UPGRADE_ACCURACY:
        return TrustAdjustment.UPGRADE
    if record.accuracy < DOWNGRADE_ACCURACY:
        return TrustAdjustment.DOWNGRADE
    return TrustAdjustment.NEUTRAL
