# backend/app/routers/projects.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Principal, access_scope_for, require_roles
from ..db import get_db
from ..schemas import RecomputeOut, WeeklyUpdateIn, WeeklyUpdateOut
from ..services import rollup_service
from ..services.project_costs import record_weekly_budget_update, recompute_project_actual_cost
from .common import finance_errors

router = APIRouter(tags=["projects"])


@router.get("/projects/{project_id}/financials", response_model=dict)
def project_financials(
    project_id: int,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles("senior_admin", "junior_admin", "property_manager", "contractor")),
):
    with finance_errors("project financials", org_id=p.org_id, project_id=project_id, scope="project"):
        out = rollup_service.project_financials(db, access_scope_for(p), project_id=project_id)
    return out.to_dict()


@router.post("/projects/{project_id}/recompute-cost", response_model=RecomputeOut)
def recompute_cost(
    project_id: int,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles("senior_admin", "junior_admin", "property_manager")),
):
    with finance_errors("project cost recompute", org_id=p.org_id, project_id=project_id):
        res = recompute_project_actual_cost(db, access_scope_for(p), project_id=project_id, actor_user_id=p.user_id)
    return RecomputeOut(
        project_id=int(res.project.id),
        actual_cost=float(res.project.actual_cost),
        breakdown=res.breakdown.to_dict(),
    )


@router.post("/milestones/{milestone_id}/weekly-updates", response_model=WeeklyUpdateOut)
def add_weekly_update(
    milestone_id: int,
    payload: WeeklyUpdateIn,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles("senior_admin", "junior_admin", "contractor")),
):
    with finance_errors("weekly budget update", org_id=p.org_id, milestone_id=milestone_id):
        row = record_weekly_budget_update(
            db,
            access_scope_for(p),
            milestone_id=milestone_id,
            actor_user_id=p.user_id,
            **payload.model_dump(),
        )
    return row
