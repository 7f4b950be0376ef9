from datetime import datetime

import pytest

from haccp.models.audit_log import AuditLog
from haccp.models.reading import Reading
from haccp.models.user import User
from haccp.services.alerts import AlertDraft
from haccp.services.ledger import AlertLedger, AlertNotFound


def _record(repo, reading_id, value):
    repo.save_reading(Reading(
        id=reading_id, target_id="K1", target_type="refrigerator", checkpoint_name="Luft",
        value=value, timestamp=datetime(2024, 5, 2, 8, 0), user_id="U-A", facility_id="F1",
    ))
    return AlertLedger(repo).append(AlertDraft(
        reading_id=reading_id, facility_id="F1", facility_name="Kantine Nord", target_name="Kühlschrank 1",
        checkpoint_name="Luft", value=value, min=2.0, max=7.0, timestamp=datetime(2024, 5, 2, 8, 0),
        user_id="U-A", user_name="Anna",
    ))


def _admin(db):
    return db.get(User, "U-SUPER")


def test_unresolved_keeps_insertion_order(repo):
    first = _record(repo, "R-1", 9.0)
    second = _record(repo, "R-2", 1.0)
    third = _record(repo, "R-3", 12.0)
    assert [a.id for a in AlertLedger(repo).unresolved()] == [first.id, second.id, third.id]


def test_resolve_is_idempotent_and_audited(repo, db):
    alert = _record(repo, "R-1", 9.0)
    ledger = AlertLedger(repo)
    assert ledger.resolve(alert.id, _admin(db)).resolved is True
    assert ledger.resolve(alert.id, _admin(db)).resolved is True
    assert ledger.unresolved() == []

    entries = db.query(AuditLog).filter(AuditLog.entity == "ALERTS").all()
    assert len(entries) == 2
    assert all(e.action == "UPDATE" and alert.id in e.details for e in entries)
    assert entries[0].user_name == "System SuperAdmin"


def test_resolve_leaves_reading_untouched(repo, db):
    alert = _record(repo, "R-1", 9.0)
    AlertLedger(repo).resolve(alert.id, _admin(db))
    assert db.get(Reading, "R-1").value == 9.0


def test_resolve_unknown_alert_raises(repo, db):
    with pytest.raises(AlertNotFound):
        AlertLedger(repo).resolve("ALERT-missing", _admin(db))


def test_resolve_all_marks_every_open_alert(repo, db):
    a = _record(repo, "R-1", 9.0)
    _record(repo, "R-2", 1.0)
    ledger = AlertLedger(repo)
    ledger.resolve(a.id, _admin(db))
    assert ledger.resolve_all(_admin(db)) == 1
    assert ledger.unresolved() == []
    assert all(x.resolved for x in ledger.all())


def test_resolve_all_on_empty_ledger_is_a_noop(repo, db):
    assert AlertLedger(repo).resolve_all(_admin(db)) == 0
    assert db.query(AuditLog).filter(AuditLog.entity == "ALERTS").count() == 1


def test_append_retries_when_sequence_number_is_taken(repo, monkeypatch):
    first = _record(repo, "R-1", 9.0)
    taken = first.seq
    real_next_seq = repo._next_seq
    handed_out = []

    def stale_once():
        # A concurrent writer already claimed the value computed here
        seq = taken if not handed_out else real_next_seq()
        handed_out.append(seq)
        return seq

    monkeypatch.setattr(repo, "_next_seq", stale_once)
    second = _record(repo, "R-2", 1.0)

    assert handed_out == [taken, taken + 1]
    assert second.seq == taken + 1
    assert [a.id for a in AlertLedger(repo).unresolved()] == [first.id, second.id]
