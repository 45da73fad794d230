# backend/tests/test_rollup_service.py
from __future__ import annotations

from datetime import date, datetime

import pytest

from app.domain.periods import make_period, make_range
from app.errors import ScopeNotFound
from app.services import rollup_service
from app.services.financial_queries import AccessScope

MARCH = make_period(date(2026, 3, 1), date(2026, 3, 31))


def test_portfolio_for_admin_covers_every_building(db, world):
    scope = AccessScope(org_id=world["org_id"])
    p = rollup_service.portfolio_financials(db, scope, period=MARCH)

    assert p.number_of_properties == 2
    assert p.revenue.rental_income == 7000.0
    assert p.revenue.other_income == 500.0
    assert p.revenue.total == 7500.0
    assert p.expenses.budget_expenses == 1000.0
    assert p.expenses.contractor_payments == 1000.0
    assert p.expenses.order_costs == 500.0
    assert p.expenses.total == 2500.0
    assert p.profitability.net_operating_income == 5000.0
    assert p.occupancy_rate == pytest.approx(85.0)
    assert p.performance.rent_collection_rate == pytest.approx(35.0)
    # February rent paid 5000
    assert p.revenue.trend == pytest.approx(50.0)


def test_property_manager_only_sees_own_buildings(db, world):
    pm1 = AccessScope(org_id=world["org_id"], property_manager_id=world["pm1"])
    p = rollup_service.portfolio_financials(db, pm1, period=MARCH)
    assert [b.building_id for b in p.buildings] == [world["b1"]]
    assert p.revenue.total == 7000.0
    assert p.expenses.contractor_payments == 1000.0

    pm2 = AccessScope(org_id=world["org_id"], property_manager_id=world["pm2"])
    q = rollup_service.portfolio_financials(db, pm2, period=MARCH)
    assert [b.building_id for b in q.buildings] == [world["b2"]]
    assert q.expenses.contractor_payments == 0.0
    assert q.expenses.order_costs == 0.0

    with pytest.raises(ScopeNotFound):
        rollup_service.building_financials(db, pm1, building_id=world["b2"], period=MARCH)


def test_building_rollup_matches_example(db, world):
    scope = AccessScope(org_id=world["org_id"])
    b = rollup_service.building_financials(db, scope, building_id=world["b1"], period=MARCH)

    assert b.occupancy.occupancy_rate == pytest.approx(70.0)
    assert b.revenue.rent_collection_rate == pytest.approx(70.0)
    assert b.budget.total_budget == 4000.0
    assert b.budget.utilization == pytest.approx(25.0)


def test_empty_period_is_zeroed_not_missing(db, world):
    scope = AccessScope(org_id=world["org_id"])
    p = rollup_service.portfolio_financials(db, scope, period=make_period(date(2025, 1, 1), date(2025, 1, 31)))

    assert p.number_of_properties == 2
    assert p.revenue.total == 0.0
    assert p.expenses.total == 0.0
    assert p.profitability.profit_margin == 0.0
    assert p.performance.rent_collection_rate == 0.0
    assert p.revenue.trend == 0.0


def test_unknown_building_raises_scope_not_found(db, world):
    with pytest.raises(ScopeNotFound) as ei:
        rollup_service.building_financials(db, AccessScope(org_id=world["org_id"]), building_id=999, period=MARCH)
    assert ei.value.scope == "building"
    assert ei.value.scope_id == 999


def test_other_org_cannot_see_building(db, world):
    with pytest.raises(ScopeNotFound):
        rollup_service.building_financials(db, AccessScope(org_id=world["org_id"] + 1), building_id=world["b1"], period=MARCH)


def test_profit_analytics_scenario(db, world):
    out = rollup_service.profit_analytics(db, AccessScope(org_id=world["org_id"]))
    assert len(out.projects) == 1

    pr = out.projects[0]
    assert pr.actual_cost == 120000.0
    assert pr.revenue == 150000.0
    assert pr.expected_profit == 50000.0
    assert pr.actual_profit == 30000.0
    assert pr.variance == -20000.0
    assert pr.variance_percentage == pytest.approx(-40.0)

    assert out.summary.operational_expenses == 2000.0
    assert out.summary.alternative_revenue == 1000.0


def test_profit_analytics_contractor_sees_contractor_expenses(db, world):
    scope = AccessScope(org_id=world["org_id"], creator_role_family="contractor")
    out = rollup_service.profit_analytics(db, scope)
    assert out.summary.operational_expenses == 800.0
    assert out.summary.alternative_revenue == 0.0


def test_profit_analytics_filters(db, world):
    scope = AccessScope(org_id=world["org_id"])
    assert rollup_service.profit_analytics(db, scope, status="COMPLETED").summary.total_projects == 0
    assert rollup_service.profit_analytics(db, scope, period=make_period(date(2025, 1, 1), date(2025, 1, 31))).projects == []
    with pytest.raises(ScopeNotFound):
        rollup_service.profit_analytics(db, scope, project_id=999)


def test_profit_analytics_open_ended_window(db, world):
    scope = AccessScope(org_id=world["org_id"])

    since = rollup_service.profit_analytics(db, scope, period=make_range(date(2026, 3, 5)))
    assert since.projects == []
    assert since.summary.operational_expenses == 0.0
    assert since.summary.alternative_revenue == 1000.0

    until = rollup_service.profit_analytics(db, scope, period=make_range(end=date(2026, 3, 4)))
    assert len(until.projects) == 1
    assert until.summary.operational_expenses == 2000.0
    assert until.summary.alternative_revenue == 0.0


def test_project_financials_include_health(db, world):
    pf = rollup_service.project_financials(
        db, AccessScope(org_id=world["org_id"]), project_id=world["project"], as_of=datetime(2026, 3, 25)
    )
    assert pf.scope == "project"
    assert [m.name for m in pf.milestones] == ["Structure", "Finishes"]
    assert pf.health is not None
    # 20% over budget, nothing late, no risks
    assert pf.health["budget_health"] == pytest.approx(80.0)
    assert pf.health["score"] == pytest.approx(0.4 * 80 + 0.3 * 100 + 0.3 * 100)


def test_period_metrics_for_a_day(db, world):
    m = rollup_service.period_metrics(
        db,
        AccessScope(org_id=world["org_id"]),
        period=make_period(date(2026, 3, 20), date(2026, 3, 20)),
        as_of=datetime(2026, 3, 25),
    )
    assert m.total_revenue == 150000.0
    assert m.paid_invoices == 1
    assert m.total_projects == 1
    assert m.projects_over_budget == 1
