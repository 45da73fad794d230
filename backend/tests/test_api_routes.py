# backend/tests/test_api_routes.py
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.db import SessionLocal
from app.main import create_app
from app.models import Building, Organization

MARCH = {"period_start": "2026-03-01", "period_end": "2026-03-31"}


def _headers(role: str, email: str | None = None, org_slug: str = "acme") -> dict[str, str]:
    return {
        "X-Org-Slug": org_slug,
        "X-User-Email": email or f"{role}@acme.test",
        "X-User-Role": role,
    }


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())


def _mk_foreign_building() -> int:
    db = SessionLocal()
    try:
        org = Organization(slug="rival", name="Rival")
        db.add(org)
        db.flush()
        b = Building(org_id=org.id, name="Rival Hall", address="9 Elsewhere", number_of_units=4)
        db.add(b)
        db.commit()
        return int(b.id)
    finally:
        db.close()


def test_health_echoes_request_id(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.headers["X-Request-ID"] == "req-123"

    r = client.get("/api/health", headers={"X-Request-ID": "bad id with spaces"})
    assert r.headers["X-Request-ID"] != "bad id with spaces"
    assert len(r.headers["X-Request-ID"]) == 36


def test_missing_org_header_is_401(client, world):
    r = client.get("/api/financials/portfolio", headers={"X-User-Email": "a@b.c"})
    assert r.status_code == 401


def test_portfolio_for_admin_and_manager(client, world):
    r = client.get("/api/financials/portfolio", params=MARCH, headers=_headers("senior_admin"))
    assert r.status_code == 200
    body = r.json()
    assert body["scope"] == "portfolio"
    assert body["revenue"]["total"] == 7500.0
    assert body["number_of_properties"] == 2

    r = client.get("/api/financials/portfolio", params=MARCH, headers=_headers("property_manager", "pm1@acme.test"))
    assert r.status_code == 200
    assert r.json()["revenue"]["total"] == 7000.0


def test_tenant_cannot_read_financials(client, world):
    r = client.get("/api/financials/portfolio", params=MARCH, headers=_headers("tenant"))
    assert r.status_code == 403


def test_inverted_period_is_422(client, world):
    r = client.get(
        "/api/financials/portfolio",
        params={"period_start": "2026-03-31", "period_end": "2026-03-01"},
        headers=_headers("senior_admin"),
    )
    assert r.status_code == 422


def test_building_not_found_and_cross_org(client, world):
    r = client.get("/api/financials/buildings/999", headers=_headers("junior_admin"))
    assert r.status_code == 404
    assert r.json()["detail"] == "building not found"

    foreign = _mk_foreign_building()
    r = client.get(f"/api/financials/buildings/{foreign}", headers=_headers("junior_admin"))
    assert r.status_code == 404

    r = client.get(f"/api/financials/buildings/{world['b1']}", params=MARCH, headers=_headers("junior_admin"))
    assert r.status_code == 200
    assert r.json()["occupancy"]["occupancy_rate"] == pytest.approx(70.0)


def test_profit_window_with_a_single_bound(client, world):
    # project created 3/2, opex dated 3/4, alternative revenue dated 3/6
    r = client.get("/api/financials/profit", params={"start_date": "2026-03-05"}, headers=_headers("senior_admin"))
    assert r.status_code == 200
    body = r.json()
    assert body["projects"] == []
    assert body["summary"]["operational_expenses"] == 0.0
    assert body["summary"]["alternative_revenue"] == 1000.0

    r = client.get("/api/financials/profit", params={"end_date": "2026-03-03"}, headers=_headers("senior_admin"))
    assert r.status_code == 200
    body = r.json()
    assert len(body["projects"]) == 1
    assert body["summary"]["operational_expenses"] == 0.0
    assert body["summary"]["alternative_revenue"] == 0.0

    r = client.get(
        "/api/financials/profit",
        params={"start_date": "2026-03-31", "end_date": "2026-03-01"},
        headers=_headers("senior_admin"),
    )
    assert r.status_code == 422


def test_profit_roles(client, world):
    r = client.get("/api/financials/profit", headers=_headers("contractor"))
    assert r.status_code == 200
    assert r.json()["summary"]["operational_expenses"] == 800.0

    r = client.get("/api/financials/profit", headers=_headers("artisan"))
    assert r.status_code == 403

    r = client.get("/api/financials/profit", params={"project_id": 999}, headers=_headers("senior_admin"))
    assert r.status_code == 404


def test_project_financials_and_recompute(client, world):
    pid = world["project"]
    r = client.get(f"/api/projects/{pid}/financials", headers=_headers("senior_admin"))
    assert r.status_code == 200
    body = r.json()
    assert body["variance"] == -20000.0
    assert "score" in body["health"]

    r = client.post(f"/api/projects/{pid}/recompute-cost", headers=_headers("contractor"))
    assert r.status_code == 403

    r = client.post(f"/api/projects/{pid}/recompute-cost", headers=_headers("junior_admin"))
    assert r.status_code == 200
    assert r.json()["actual_cost"] == 275000.0
    assert r.json()["breakdown"]["quotation_costs"] == 5000.0

    r = client.post("/api/projects/999/recompute-cost", headers=_headers("junior_admin"))
    assert r.status_code == 404


def test_weekly_update_route(client, world):
    payload = {
        "week_start_date": "2026-03-02T00:00:00",
        "week_end_date": "2026-03-08T00:00:00",
        "labour_expenditure": 100.0,
        "material_expenditure": 50.0,
        "progress_percentage": 10.0,
    }
    r = client.post(f"/api/milestones/{world['m2']}/weekly-updates", json=payload, headers=_headers("contractor"))
    assert r.status_code == 200
    assert r.json()["total_expenditure"] == 150.0

    bad = dict(payload, week_end_date="2026-03-01T00:00:00")
    r = client.post(f"/api/milestones/{world['m2']}/weekly-updates", json=bad, headers=_headers("contractor"))
    assert r.status_code == 422

    r = client.post("/api/milestones/999/weekly-updates", json=payload, headers=_headers("contractor"))
    assert r.status_code == 404


def test_snapshot_routes(client, world):
    h = _headers("senior_admin")
    body = {"metric_type": "DAILY", "snapshot_date": "2026-03-20"}

    r1 = client.post("/api/snapshots/capture", json=body, headers=h)
    r2 = client.post("/api/snapshots/capture", json=body, headers=h)
    assert r1.status_code == 200 and r2.status_code == 200
    assert r1.json()["id"] == r2.json()["id"]
    assert r2.json()["total_revenue"] == 150000.0

    r = client.get("/api/snapshots", params={"metric_type": "DAILY"}, headers=h)
    assert r.status_code == 200
    assert len(r.json()) == 1

    r = client.get("/api/snapshots/trend", params={"metric_type": "DAILY", "date": "2026-03-20"}, headers=h)
    assert r.status_code == 200
    assert r.json()["has_current"] is True
    assert r.json()["has_previous"] is False

    r = client.post("/api/snapshots/capture", json={"metric_type": "HOURLY"}, headers=h)
    assert r.status_code == 422

    r = client.post("/api/snapshots/capture", json=body, headers=_headers("property_manager", "pm1@acme.test"))
    assert r.status_code == 403
