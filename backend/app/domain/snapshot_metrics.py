# backend/app/domain/snapshot_metrics.py
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Optional, Sequence

from . import statuses
from .health import DEFAULT_WEIGHTS, delayed_count, is_at_risk, is_over_budget, project_health_score
from .ratios import money, pct, safe_ratio, total, variance


@dataclass(frozen=True)
class SnapshotMetrics:
    """Organisation-wide figures for one snapshot period (the MetricSnapshot columns)."""

    total_revenue: float = 0.0
    paid_invoices: int = 0
    total_expenses: float = 0.0
    material_costs: float = 0.0
    labour_costs: float = 0.0
    artisan_payments: float = 0.0
    net_profit: float = 0.0
    profit_margin: float = 0.0

    completed_orders: int = 0
    active_orders: int = 0
    new_leads: int = 0

    total_assets: float = 0.0
    total_liabilities: float = 0.0

    total_project_budget: float = 0.0
    total_project_actual_cost: float = 0.0
    budget_utilization_percentage: float = 0.0
    projects_over_budget: int = 0

    total_milestones: int = 0
    completed_milestones: int = 0
    in_progress_milestones: int = 0
    milestone_completion_rate: float = 0.0
    delayed_milestones: int = 0

    total_projects: int = 0
    active_projects: int = 0
    projects_at_risk: int = 0
    average_project_health_score: float = 100.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


METRIC_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(SnapshotMetrics))


def compute_snapshot_metrics(
    *,
    orders: Sequence[Any],
    invoices: Sequence[Any],
    payment_requests: Sequence[Any],
    quotations: Sequence[Any],
    leads: Sequence[Any],
    projects: Sequence[Any],
    assets: Sequence[Any] = (),
    unpaid_liabilities: Sequence[Any] = (),
    as_of: Optional[datetime] = None,
    over_budget_threshold: float = 1.10,
    at_risk_threshold: float = 0.90,
    health_weights: tuple[float, float, float] = DEFAULT_WEIGHTS,
) -> SnapshotMetrics:
    """
    orders / invoices / payment_requests / quotations / leads: records created in the period.
    projects: every project of the organisation (current status, not period-limited),
    with milestones and their risks loaded.

    Revenue is PAID invoices only; order totals are internal cost, not revenue,
    and only COMPLETED orders carry cost.
    """
    as_of = as_of or datetime.utcnow()

    paid_invoices = statuses.only(invoices, statuses.INVOICE_ACTUALIZED)
    revenue = total(i.total for i in paid_invoices)

    artisan_payments = total(
        pr.calculated_amount for pr in statuses.only(payment_requests, statuses.PAYMENT_REQUEST_ACTUALIZED)
    )
    approved_quotes = statuses.only(quotations, statuses.QUOTATION_ACTUALIZED)
    completed_orders = statuses.only(orders, statuses.ORDER_ACTUALIZED)
    material = total(o.material_cost for o in completed_orders) + total(q.company_material_cost for q in approved_quotes)
    labour = total(o.labour_cost for o in completed_orders) + total(q.company_labour_cost for q in approved_quotes)
    expenses = artisan_payments + material + labour
    net = revenue - expenses

    budget_total = total(getattr(p, "estimated_budget", None) for p in projects)
    actual_total = total(getattr(p, "actual_cost", None) for p in projects)

    milestones = [m for p in projects for m in (getattr(p, "milestones", None) or [])]
    completed_ms = statuses.count(milestones, statuses.COMPLETED)

    scores = [project_health_score(p, as_of=as_of, weights=health_weights) for p in projects]

    return SnapshotMetrics(
        total_revenue=revenue,
        paid_invoices=len(paid_invoices),
        total_expenses=expenses,
        material_costs=material,
        labour_costs=labour,
        artisan_payments=artisan_payments,
        net_profit=net,
        profit_margin=pct(net, revenue),
        completed_orders=len(completed_orders),
        active_orders=statuses.count(orders, statuses.ACTIVE_ORDER),
        new_leads=statuses.count(leads, statuses.NEW_LEAD),
        total_assets=total(a.current_value for a in assets),
        total_liabilities=total(l.amount for l in unpaid_liabilities),
        total_project_budget=budget_total,
        total_project_actual_cost=actual_total,
        budget_utilization_percentage=pct(actual_total, budget_total),
        projects_over_budget=sum(1 for p in projects if is_over_budget(p, over_budget_threshold)),
        total_milestones=len(milestones),
        completed_milestones=completed_ms,
        in_progress_milestones=statuses.count(milestones, statuses.IN_PROGRESS),
        milestone_completion_rate=pct(completed_ms, len(milestones)),
        delayed_milestones=delayed_count(milestones, as_of),
        total_projects=len(projects),
        active_projects=statuses.count(projects, statuses.ACTIVE_PROJECT),
        projects_at_risk=sum(1 for p in projects if is_at_risk(p, at_risk_threshold)),
        average_project_health_score=safe_ratio(sum(scores), len(scores)) if scores else 100.0,
    )


# ---------------------------------------------------------------------------
# Trend comparison
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MetricDelta:
    metric: str
    current: float
    previous: float
    change: float
    change_percentage: float


def compare(current: Any, previous: Any = None, *, metrics: Sequence[str] = METRIC_FIELDS) -> list[MetricDelta]:
    """
    Field-by-field delta between two snapshots (rows or SnapshotMetrics).
    A missing previous snapshot compares against zeros (change_percentage 0).
    """
    out: list[MetricDelta] = []
    for name in metrics:
        cur = money(getattr(current, name, None))
        prev = money(getattr(previous, name, None)) if previous is not None else 0.0
        v = variance(cur, prev)
        out.append(
            MetricDelta(
                metric=name,
                current=cur,
                previous=prev,
                change=v.variance,
                change_percentage=v.variance_percentage,
            )
        )
    return out
