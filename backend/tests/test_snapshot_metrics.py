# backend/tests/test_snapshot_metrics.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pytest

from app.domain.snapshot_metrics import METRIC_FIELDS, SnapshotMetrics, compare, compute_snapshot_metrics


@dataclass
class O:
    status: str
    material_cost: float = 0.0
    labour_cost: float = 0.0


@dataclass
class Inv:
    status: str
    total: float


@dataclass
class PR:
    status: str
    calculated_amount: float


@dataclass
class Q:
    status: str
    company_material_cost: float = 0.0
    company_labour_cost: float = 0.0


@dataclass
class Lead:
    status: str


@dataclass
class Proj:
    status: str
    estimated_budget: float | None
    actual_cost: float
    milestones: list = field(default_factory=list)


@dataclass
class Ms:
    status: str
    end_date: datetime | None = None
    risks: list = field(default_factory=list)


def _inputs(**over):
    base = dict(
        orders=[O("COMPLETED", 100.0, 50.0), O("IN_PROGRESS", 10.0, 5.0)],
        invoices=[Inv("PAID", 1000.0), Inv("DRAFT", 500.0)],
        payment_requests=[PR("PAID", 200.0), PR("PENDING", 300.0)],
        quotations=[Q("APPROVED", 20.0, 30.0), Q("DRAFT", 999.0, 999.0)],
        leads=[Lead("NEW"), Lead("CONTACTED")],
        projects=[],
        as_of=datetime(2026, 6, 1),
    )
    base.update(over)
    return base


def test_only_actualized_money_counts():
    m = compute_snapshot_metrics(**_inputs())

    assert m.total_revenue == 1000.0
    assert m.paid_invoices == 1
    assert m.artisan_payments == 200.0
    # the IN_PROGRESS order carries no cost yet
    assert m.material_costs == 120.0
    assert m.labour_costs == 80.0
    assert m.total_expenses == 400.0
    assert m.net_profit == 600.0
    assert m.profit_margin == pytest.approx(60.0)
    assert m.completed_orders == 1
    assert m.active_orders == 1
    assert m.new_leads == 1


def test_pending_only_fixture_yields_zero_money():
    m = compute_snapshot_metrics(
        **_inputs(
            orders=[O("PENDING", 500.0, 300.0), O("DRAFT", 100.0, 100.0), O("IN_PROGRESS", 10.0, 5.0)],
            invoices=[Inv("DRAFT", 500.0), Inv("SENT", 10.0)],
            payment_requests=[PR("PENDING", 300.0)],
            quotations=[Q("PENDING", 50.0, 50.0)],
        )
    )
    assert m.total_revenue == 0.0
    assert m.total_expenses == 0.0
    assert m.material_costs == m.labour_costs == 0.0
    assert m.profit_margin == 0.0


def test_no_projects_means_health_100():
    m = compute_snapshot_metrics(**_inputs())
    assert m.total_projects == 0
    assert m.average_project_health_score == 100.0
    assert m.budget_utilization_percentage == 0.0
    assert m.milestone_completion_rate == 0.0


def test_project_counts():
    projects = [
        Proj("IN_PROGRESS", 100.0, 120.0, [Ms("COMPLETED"), Ms("IN_PROGRESS", end_date=datetime(2026, 5, 1))]),
        Proj("PLANNING", 100.0, 95.0),
        Proj("COMPLETED", None, 10.0),
    ]
    m = compute_snapshot_metrics(**_inputs(projects=projects))

    assert m.total_projects == 3
    assert m.active_projects == 2
    assert m.projects_over_budget == 1
    assert m.projects_at_risk == 2
    assert m.total_project_budget == 200.0
    assert m.total_project_actual_cost == 225.0
    assert m.total_milestones == 2
    assert m.completed_milestones == 1
    assert m.in_progress_milestones == 1
    assert m.delayed_milestones == 1
    assert m.milestone_completion_rate == pytest.approx(50.0)
    assert 0.0 <= m.average_project_health_score < 100.0


def test_compare_against_missing_previous_is_zero_based():
    cur = SnapshotMetrics(total_revenue=200.0)
    deltas = {d.metric: d for d in compare(cur, None)}

    assert set(deltas) == set(METRIC_FIELDS)
    assert deltas["total_revenue"].change == 200.0
    assert deltas["total_revenue"].change_percentage == 0.0

    prev = SnapshotMetrics(total_revenue=100.0)
    d = {x.metric: x for x in compare(cur, prev)}["total_revenue"]
    assert d.change == 100.0
    assert d.change_percentage == pytest.approx(100.0)
