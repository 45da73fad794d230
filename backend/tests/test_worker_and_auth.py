# backend/tests/test_worker_and_auth.py
from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from app.auth import Principal, access_scope_for, issue_token
from app.main import create_app
from app.models import MetricSnapshot, OrgMembership
from app.workers.celery_app import beat_schedule
from app.workers.snapshot_tasks import run_capture


def test_run_capture_twice_keeps_one_row(db, world):
    a = run_capture(world["org_id"], "MONTHLY", "2026-03-14")
    b = run_capture(world["org_id"], "MONTHLY", "2026-03-28")

    assert a["ok"] and b["ok"]
    assert a["snapshot_id"] == b["snapshot_id"]
    assert a["snapshot_date"].startswith("2026-03-01")
    assert db.scalar(select(func.count()).select_from(MetricSnapshot)) == 1


def test_beat_schedule_is_opt_in():
    assert beat_schedule(False) == {}
    sched = beat_schedule(True)
    assert {e["kwargs"]["metric_type"] for e in sched.values()} == {"DAILY", "MONTHLY"}


def test_access_scope_from_role():
    pm = access_scope_for(Principal(org_id=1, org_slug="acme", user_id=7, email="x", role="property_manager"))
    assert pm.property_manager_id == 7
    assert pm.creator_role_family == "admin"

    c = access_scope_for(Principal(org_id=1, org_slug="acme", user_id=8, email="y", role="contractor"))
    assert c.property_manager_id is None
    assert c.creator_role_family == "contractor"

    admin = access_scope_for(Principal(org_id=1, org_slug="acme", user_id=9, email="z", role="senior_admin"))
    assert admin.property_manager_id is None


def test_bearer_token_principal(db, world):
    db.add(OrgMembership(org_id=world["org_id"], user_id=world["pm1"], role="property_manager"))
    db.commit()

    client = TestClient(create_app())
    token = issue_token(user_id=world["pm1"], org_slug="acme")
    r = client.get(
        "/api/financials/portfolio",
        params={"period_start": "2026-03-01", "period_end": "2026-03-31"},
        headers={"X-Org-Slug": "acme", "Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 200
    assert r.json()["revenue"]["total"] == 7000.0

    r = client.get("/api/financials/portfolio", headers={"X-Org-Slug": "acme", "Authorization": "Bearer nope"})
    assert r.status_code == 401
