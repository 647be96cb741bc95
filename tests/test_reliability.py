import math

from app.models.enums import TrustAdjustment
from app.services.reliability import TrackRecord, track_record, trust_adjustment


def test_accuracy_is_zero_without_decided_reports():
    record = TrackRecord(total=3, resolved=0, dismissed=0)
    assert record.accuracy == 0.0
    assert not math.isnan(record.accuracy)


def test_no_adjustment_at_five_reports_regardless_of_accuracy():
    assert trust_adjustment(TrackRecord(total=5, resolved=5, dismissed=0)) == TrustAdjustment.NEUTRAL
    assert trust_adjustment(TrackRecord(total=5, resolved=0, dismissed=5)) == TrustAdjustment.NEUTRAL


def test_adjustment_applies_from_six_reports():
    assert trust_adjustment(TrackRecord(total=6, resolved=6, dismissed=0)) == TrustAdjustment.UPGRADE
    assert trust_adjustment(TrackRecord(total=6, resolved=0, dismissed=6)) == TrustAdjustment.DOWNGRADE


def test_thresholds_are_strict():
    # 4/5 == 0.8 is not above the upgrade threshold
    assert trust_adjustment(TrackRecord(total=10, resolved=4, dismissed=1)) == TrustAdjustment.NEUTRAL
    assert trust_adjustment(TrackRecord(total=10, resolved=3, dismissed=7)) == TrustAdjustment.NEUTRAL
    assert trust_adjustment(TrackRecord(total=10, resolved=2, dismissed=8)) == TrustAdjustment.DOWNGRADE


def test_undecided_history_counts_as_zero_accuracy():
    assert trust_adjustment(TrackRecord(total=6, resolved=0, dismissed=0)) == TrustAdjustment.DOWNGRADE


def test_track_record_groups_by_status(session, make_user, add_history):
    reporter = make_user()
    other = make_user()
    add_history(reporter.id, resolved=1, dismissed=7, pending=2)
    add_history(other.id, resolved=3)

    record = track_record(session, reporter.id)

    assert record.total == 10
    assert record.resolved == 1
    assert record.dismissed == 7
    assert record.accuracy == 0.125


def test_track_record_for_new_reporter(session, make_user):
    record = track_record(session, make_user().id)
    assert record == TrackRecord(total=0, resolved=0, dismissed=0)
    assert trust_adjustment(record) == TrustAdjustment.NEUTRAL
