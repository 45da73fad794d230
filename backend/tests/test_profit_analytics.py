# backend/tests/test_profit_analytics.py
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from app.domain.financials import compute_profit_analytics, compute_project_financials


@dataclass
class Inv:
    total: float
    status: str


@dataclass
class M:
    id: int
    name: str
    budget_allocated: float
    actual_cost: float
    sequence_order: int = 1
    expected_profit: float = 0.0
    progress_percentage: float = 0.0
    status: str = "IN_PROGRESS"
    risks: list = field(default_factory=list)


@dataclass
class P:
    id: int
    estimated_budget: float | None
    actual_cost: float
    project_number: str = "PRJ-001"
    name: str = "Lobby refit"
    status: str = "IN_PROGRESS"


@dataclass
class OpEx:
    amount: float
    is_approved: bool


def test_project_profit_and_variance():
    project = P(id=1, estimated_budget=100000.0, actual_cost=120000.0)
    milestone = M(id=1, name="Structure", budget_allocated=100000.0, actual_cost=120000.0)

    r = compute_project_financials(
        project,
        invoices=[Inv(150000.0, "PAID"), Inv(99999.0, "DRAFT"), Inv(5000.0, "SENT")],
        milestones=[milestone],
    )

    assert r.actual_cost == 120000.0
    assert r.revenue == 150000.0
    assert r.expected_profit == 50000.0
    assert r.actual_profit == 30000.0
    assert r.variance == -20000.0
    assert r.variance_percentage == pytest.approx(-40.0)
    assert r.budget_utilization == pytest.approx(120.0)

    ms = r.milestones[0]
    assert ms.actual_profit == 30000.0
    assert ms.budget_utilization == pytest.approx(120.0)


def test_only_paid_invoices_count_as_revenue():
    r = compute_project_financials(
        P(id=1, estimated_budget=1000.0, actual_cost=0.0),
        invoices=[Inv(500.0, "DRAFT"), Inv(700.0, "SENT"), Inv(900.0, "OVERDUE")],
    )
    assert r.revenue == 0.0
    assert r.actual_profit == 0.0


def test_missing_budget_is_zero_not_error():
    r = compute_project_financials(P(id=1, estimated_budget=None, actual_cost=300.0), invoices=[])
    assert r.estimated_budget == 0.0
    assert r.budget_utilization == 0.0
    assert r.variance_percentage == pytest.approx(0.0)


def test_milestones_are_ordered_by_sequence():
    ms = [
        M(id=2, name="second", budget_allocated=1.0, actual_cost=0.0, sequence_order=2),
        M(id=1, name="first", budget_allocated=1.0, actual_cost=0.0, sequence_order=1, status="COMPLETED"),
    ]
    r = compute_project_financials(P(id=1, estimated_budget=2.0, actual_cost=0.0), invoices=[], milestones=ms)
    assert [m.name for m in r.milestones] == ["first", "second"]
    assert r.milestone_count == 2
    assert r.completed_milestones == 1


def test_summary_includes_only_approved_operational_expenses():
    p1 = compute_project_financials(
        P(id=1, estimated_budget=100000.0, actual_cost=120000.0), invoices=[Inv(150000.0, "PAID")]
    )
    p2 = compute_project_financials(P(id=2, estimated_budget=10000.0, actual_cost=5000.0), invoices=[])

    out = compute_profit_analytics(
        [p1, p2],
        operational_expenses=[OpEx(2000.0, True), OpEx(9999.0, False)],
        alternative_revenues=[OpEx(1000.0, True)],
    )
    s = out.summary

    assert s.total_projects == 2
    assert s.invoice_revenue == 150000.0
    assert s.alternative_revenue == 1000.0
    assert s.total_revenue == 151000.0
    assert s.operational_expenses == 2000.0
    assert s.project_costs == 125000.0
    assert s.total_actual_cost == 127000.0
    assert s.total_actual_profit == 24000.0
    assert s.total_expected_profit == 151000.0 - 110000.0 - 2000.0
    assert s.profitable_projects == 1
    assert s.unprofitable_projects == 1
    assert s.over_budget_projects == 1
    assert out.to_dict()["scope"] == "profit"


def test_empty_summary_is_zeroed():
    s = compute_profit_analytics([]).summary
    assert s.total_revenue == 0.0
    assert s.profit_margin == 0.0
    assert s.expected_profit_margin == 0.0
    assert s.budget_utilization == 0.0
    assert s.variance_percentage == 0.0
