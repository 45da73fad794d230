# backend/app/services/rollup_service.py
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..domain.financials import (
    BuildingFinancials,
    PortfolioFinancials,
    ProfitAnalytics,
    ProjectFinancials,
    compute_building_financials,
    compute_profit_analytics,
    compute_project_financials,
    rollup_portfolio,
)
from ..domain.health import project_health
from ..domain.periods import DateRange, Period, previous_period
from ..domain.ratios import total
from ..domain.snapshot_metrics import SnapshotMetrics, compute_snapshot_metrics
from . import financial_queries as fq
from .financial_queries import AccessScope

log = logging.getLogger(__name__)


def _health_weights() -> tuple[float, float, float]:
    return (settings.health_weight_budget, settings.health_weight_schedule, settings.health_weight_risk)


def _by_building(rows: list[Any]) -> dict[int, list[Any]]:
    out: dict[int, list[Any]] = defaultdict(list)
    for r in rows:
        out[int(r.building_id)].append(r)
    return out


def _building_rollups(db: Session, scope: AccessScope, *, buildings: list[Any], period: Period) -> list[BuildingFinancials]:
    """One batch of queries for all buildings, then a pure per-building computation."""
    ids = [int(b.id) for b in buildings]

    rent = _by_building(fq.rent_payments(db, scope, building_ids=ids, period=period))
    other = _by_building(fq.building_payments(db, scope, building_ids=ids, period=period))
    budgets = _by_building(fq.overlapping_budgets(db, scope, building_ids=ids, period=period))
    tenants = _by_building(fq.building_tenants(db, scope, building_ids=ids))
    maintenance = _by_building(
        [m for m in fq.maintenance_requests(db, scope, period=period, building_ids=ids) if m.building_id is not None]
    )

    return [
        compute_building_financials(
            b,
            rent_payments=rent.get(int(b.id), []),
            other_payments=other.get(int(b.id), []),
            budgets=budgets.get(int(b.id), []),
            tenants=tenants.get(int(b.id), []),
            maintenance_requests=maintenance.get(int(b.id), []),
        )
        for b in buildings
    ]


def building_financials(db: Session, scope: AccessScope, *, building_id: int, period: Period) -> BuildingFinancials:
    building = fq.must_get_building(db, scope, building_id=building_id)
    out = _building_rollups(db, scope, buildings=[building], period=period)[0]
    log.info(
        "building rollup computed",
        extra={"org_id": scope.org_id, "building_id": int(building_id), "scope": "building"},
    )
    return out


def portfolio_financials(
    db: Session,
    scope: AccessScope,
    *,
    period: Period,
    building_id: Optional[int] = None,
) -> PortfolioFinancials:
    """
    Portfolio = every building visible to the scope (or just building_id),
    each rolled up independently, then summed / averaged.
    Contractor payments and order costs are portfolio-level expenses.
    """
    if building_id is not None:
        buildings = [fq.must_get_building(db, scope, building_id=building_id)]
    else:
        buildings = fq.list_buildings(db, scope)
    ids = [int(b.id) for b in buildings]

    per_building = _building_rollups(db, scope, buildings=buildings, period=period)

    contractor = fq.paid_contractor_payments(db, scope, period=period)
    orders = fq.orders_in_period(db, scope, period=period, building_ids=ids if building_id is not None else None)
    maintenance = fq.maintenance_requests(db, scope, period=period, building_ids=ids if building_id is not None else None)

    prev = previous_period(period)
    previous_revenue = total(rp.amount_paid for rp in fq.rent_payments(db, scope, building_ids=ids, period=prev))

    out = rollup_portfolio(
        per_building,
        period=period,
        contractor_payments=contractor,
        orders=orders,
        maintenance_request_count=len(maintenance),
        previous_revenue=previous_revenue,
    )
    log.info(
        "portfolio rollup computed",
        extra={"org_id": scope.org_id, "scope": "portfolio", "building_id": building_id},
    )
    return out


def profit_analytics(
    db: Session,
    scope: AccessScope,
    *,
    period: Optional[Period | DateRange] = None,
    project_id: Optional[int] = None,
    status: Optional[str] = None,
) -> ProfitAnalytics:
    if project_id is not None:
        fq.must_get_project(db, scope, project_id=project_id)

    projects = fq.list_projects(db, scope, project_id=project_id, status=status, period=period)
    per_project = [compute_project_financials(p, invoices=p.invoices, milestones=p.milestones) for p in projects]

    out = compute_profit_analytics(
        per_project,
        operational_expenses=fq.approved_operational_expenses(db, scope, period=period),
        alternative_revenues=fq.approved_alternative_revenues(db, scope, period=period),
    )
    log.info(
        "profit analytics computed",
        extra={"org_id": scope.org_id, "scope": "profit", "project_id": project_id},
    )
    return out


def project_financials(
    db: Session, scope: AccessScope, *, project_id: int, as_of: Optional[datetime] = None
) -> ProjectFinancials:
    project = fq.must_get_project(db, scope, project_id=project_id)
    out = compute_project_financials(project, invoices=project.invoices, milestones=project.milestones)
    health = project_health(project, milestones=project.milestones, as_of=as_of, weights=_health_weights())
    return replace(out, health=health.to_dict())


def period_metrics(db: Session, scope: AccessScope, *, period: Period, as_of: Optional[datetime] = None) -> SnapshotMetrics:
    """Organisation-wide figures for one window (what a MetricSnapshot stores)."""
    return compute_snapshot_metrics(
        orders=fq.orders_in_period(db, scope, period=period),
        invoices=fq.invoices_created(db, scope, period=period),
        payment_requests=fq.payment_requests_created(db, scope, period=period),
        quotations=fq.quotations_created(db, scope, period=period),
        leads=fq.leads_created(db, scope, period=period),
        projects=fq.list_projects(db, scope),
        assets=fq.assets(db, scope),
        unpaid_liabilities=fq.unpaid_liabilities(db, scope),
        as_of=as_of,
        over_budget_threshold=settings.over_budget_threshold,
        at_risk_threshold=settings.at_risk_budget_threshold,
        health_weights=_health_weights(),
    )
