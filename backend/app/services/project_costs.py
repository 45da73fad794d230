# backend/app/services/project_costs.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..domain.audit import audit_write
from ..domain.ratios import money, total
from ..models import Milestone, Project, WeeklyBudgetUpdate
from . import financial_queries as fq
from .financial_queries import AccessScope

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostBreakdown:
    quotation_costs: float
    invoice_costs: float
    milestone_costs: float
    total_actual_cost: float
    estimated_budget: float
    variance: Optional[float]
    variance_percentage: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProjectCostRecompute:
    project: Project
    breakdown: CostBreakdown


def cost_breakdown(
    *,
    estimated_budget: Optional[float],
    quotations: list[Any],
    invoices: list[Any],
    milestones: list[Any],
) -> CostBreakdown:
    """
    actual cost = APPROVED quotations + PAID invoices + milestone actual costs.
    Inputs must already be limited to the actualized statuses.

    variance is None when the project has no budget at all;
    variance_percentage is None unless the budget is positive.
    """
    quotation_costs = total(q.total for q in quotations)
    invoice_costs = total(i.total for i in invoices)
    milestone_costs = total(m.actual_cost for m in milestones)
    actual = quotation_costs + invoice_costs + milestone_costs

    variance = None if estimated_budget is None else actual - money(estimated_budget)
    variance_pct = None
    if estimated_budget is not None and money(estimated_budget) > 0:
        variance_pct = (actual - money(estimated_budget)) / money(estimated_budget) * 100.0

    return CostBreakdown(
        quotation_costs=quotation_costs,
        invoice_costs=invoice_costs,
        milestone_costs=milestone_costs,
        total_actual_cost=actual,
        estimated_budget=money(estimated_budget),
        variance=variance,
        variance_percentage=variance_pct,
    )


def recompute_project_actual_cost(
    db: Session,
    scope: AccessScope,
    *,
    project_id: int,
    actor_user_id: Optional[int] = None,
) -> ProjectCostRecompute:
    """
    Re-derives project.actual_cost from its financial inputs and persists it
    (plus an audit row) in one commit.
    """
    project = fq.must_get_project(db, scope, project_id=project_id)
    before = money(project.actual_cost)

    breakdown = cost_breakdown(
        estimated_budget=project.estimated_budget,
        quotations=fq.project_quotations(db, scope, project_id=project_id),
        invoices=fq.project_invoices(db, scope, project_id=project_id),
        milestones=fq.project_milestones(db, scope, project_id=project_id),
    )

    try:
        project.actual_cost = breakdown.total_actual_cost
        db.add(project)
        audit_write(
            db,
            org_id=scope.org_id,
            actor_user_id=actor_user_id,
            action="project.actual_cost.recompute",
            entity_type="Project",
            entity_id=str(project.id),
            before={"actual_cost": before},
            after=breakdown.to_dict(),
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(project)

    log.info(
        "project actual cost recomputed",
        extra={"org_id": scope.org_id, "project_id": int(project.id)},
    )
    return ProjectCostRecompute(project=project, breakdown=breakdown)


def recompute_milestone_actual_cost(db: Session, *, milestone: Milestone) -> float:
    """Milestone actual cost is always the sum of its weekly updates; never hand-set."""
    updates = list(milestone.weekly_updates or [])
    milestone.actual_cost = total(u.total_expenditure for u in updates)
    db.add(milestone)
    return float(milestone.actual_cost)


def record_weekly_budget_update(
    db: Session,
    scope: AccessScope,
    *,
    milestone_id: int,
    week_start_date: datetime,
    week_end_date: datetime,
    labour_expenditure: float = 0.0,
    material_expenditure: float = 0.0,
    other_expenditure: float = 0.0,
    progress_percentage: float = 0.0,
    notes: Optional[str] = None,
    actor_user_id: Optional[int] = None,
) -> WeeklyBudgetUpdate:
    if week_end_date < week_start_date:
        raise ValueError("week_end_date cannot be before week_start_date")

    milestone = fq.must_get_milestone(db, scope, milestone_id=milestone_id)

    row = WeeklyBudgetUpdate(
        org_id=scope.org_id,
        milestone_id=int(milestone.id),
        created_by_id=actor_user_id,
        week_start_date=week_start_date,
        week_end_date=week_end_date,
        labour_expenditure=money(labour_expenditure),
        material_expenditure=money(material_expenditure),
        other_expenditure=money(other_expenditure),
        total_expenditure=money(labour_expenditure) + money(material_expenditure) + money(other_expenditure),
        progress_percentage=money(progress_percentage),
        notes=notes,
        created_at=datetime.utcnow(),
    )

    try:
        milestone.weekly_updates.append(row)
        recompute_milestone_actual_cost(db, milestone=milestone)
        milestone.progress_percentage = row.progress_percentage
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)

    log.info(
        "weekly budget update recorded",
        extra={"org_id": scope.org_id, "milestone_id": int(milestone.id)},
    )
    return row
