# backend/tests/test_snapshots.py
from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import func, select

from app.errors import InvalidPeriod
from app.models import MetricSnapshot
from app.services import snapshots
from app.services.financial_queries import AccessScope

AS_OF = datetime(2026, 3, 25)


def _count(db) -> int:
    return int(db.scalar(select(func.count()).select_from(MetricSnapshot)))


def test_capture_is_idempotent(db, world):
    scope = AccessScope(org_id=world["org_id"])

    first = snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)
    before = snapshots.snapshot_values(first)
    first_id = int(first.id)

    second = snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=datetime(2026, 3, 20, 18, 30), as_of=AS_OF)

    assert _count(db) == 1
    assert int(second.id) == first_id
    assert snapshots.snapshot_values(second) == before
    assert second.snapshot_date == datetime(2026, 3, 20)
    assert second.total_revenue == 150000.0


def test_recapture_overwrites_with_new_data(db, world):
    from app.models import Invoice

    scope = AccessScope(org_id=world["org_id"])
    snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)

    db.add(Invoice(org_id=world["org_id"], status="PAID", total=50.0, created_at=datetime(2026, 3, 20, 9)))
    db.commit()

    row = snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)
    assert _count(db) == 1
    assert row.total_revenue == 150050.0
    assert row.paid_invoices == 2


def test_daily_and_monthly_are_separate_rows(db, world):
    scope = AccessScope(org_id=world["org_id"])
    d = snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)
    m = snapshots.capture(db, scope, metric_type="monthly", snapshot_date=date(2026, 3, 20), as_of=AS_OF)

    assert _count(db) == 2
    assert m.metric_type == "MONTHLY"
    assert m.snapshot_date == datetime(2026, 3, 1)
    # month includes the paid invoice and the paid contractor request
    assert m.artisan_payments == 1000.0
    assert d.artisan_payments == 0.0


def test_empty_org_snapshot_defaults(db, org):
    row = snapshots.capture(db, AccessScope(org_id=int(org.id)), metric_type="DAILY", snapshot_date=date(2026, 1, 1))
    assert row.total_revenue == 0.0
    assert row.profit_margin == 0.0
    assert row.total_projects == 0
    assert row.average_project_health_score == 100.0


def test_unknown_metric_type(db, world):
    with pytest.raises(InvalidPeriod):
        snapshots.capture(db, AccessScope(org_id=world["org_id"]), metric_type="HOURLY")
    assert _count(db) == 0


def test_find_list_and_trend(db, world):
    scope = AccessScope(org_id=world["org_id"])
    snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=date(2026, 3, 19), as_of=AS_OF)
    snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)

    found = snapshots.find_by_period(db, org_id=world["org_id"], snapshot_date=datetime(2026, 3, 20, 12), metric_type="DAILY")
    assert found is not None and found.snapshot_date == datetime(2026, 3, 20)

    rows = snapshots.list_snapshots(db, org_id=world["org_id"], metric_type="DAILY")
    assert [r.snapshot_date.day for r in rows] == [19, 20]

    t = snapshots.trend(db, org_id=world["org_id"], metric_type="DAILY", snapshot_date=date(2026, 3, 20))
    assert t.has_current and t.has_previous
    rev = {d.metric: d for d in t.deltas}["total_revenue"]
    assert rev.previous == 0.0
    assert rev.current == 150000.0
    assert rev.change == 150000.0

    missing = snapshots.trend(db, org_id=world["org_id"], metric_type="MONTHLY", snapshot_date=date(2026, 3, 20))
    assert not missing.has_current
    assert missing.deltas == []


def test_snapshots_are_per_org(db, world):
    from app.models import Organization

    other = Organization(slug="other", name="Other")
    db.add(other)
    db.commit()

    snapshots.capture(db, AccessScope(org_id=world["org_id"]), metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)
    row = snapshots.capture(db, AccessScope(org_id=int(other.id)), metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)

    assert _count(db) == 2
    assert row.total_revenue == 0.0


def test_capture_recovers_when_a_concurrent_capture_inserts_first(db, world, monkeypatch):
    from app.db import SessionLocal
    from app.models import AuditEvent

    scope = AccessScope(org_id=world["org_id"])
    real_find = snapshots.find_by_period
    calls = {"n": 0}

    def racing_find(session, **kw):
        calls["n"] += 1
        if calls["n"] == 1:
            # Another worker commits the same period between our lookup and our insert.
            other = SessionLocal()
            try:
                other.add(
                    MetricSnapshot(
                        org_id=scope.org_id,
                        snapshot_date=datetime(2026, 3, 20),
                        metric_type="DAILY",
                        total_revenue=1.0,
                        paid_invoices=99,
                    )
                )
                other.commit()
            finally:
                other.close()
            return None
        return real_find(session, **kw)

    monkeypatch.setattr(snapshots, "find_by_period", racing_find)

    row = snapshots.capture(db, scope, metric_type="DAILY", snapshot_date=date(2026, 3, 20), as_of=AS_OF)

    assert calls["n"] >= 2
    assert _count(db) == 1
    assert row.snapshot_date == datetime(2026, 3, 20)
    assert row.total_revenue == 150000.0
    assert row.paid_invoices == 1
    audits = db.scalars(select(AuditEvent).where(AuditEvent.action == "metric_snapshot.capture")).all()
    assert len(audits) == 1
