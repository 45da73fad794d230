# backend/app/routers/financials.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, access_scope_for, require_roles
from ..db import get_db
from ..domain.periods import make_range
from ..services import rollup_service
from .common import finance_errors, period_from_query

router = APIRouter(prefix="/financials", tags=["financials"])

_PORTFOLIO_ROLES = ("senior_admin", "junior_admin", "property_manager")
_PROFIT_ROLES = ("senior_admin", "junior_admin", "contractor")


@router.get("/portfolio", response_model=dict)
def portfolio(
    period_start: Optional[date] = Query(default=None),
    period_end: Optional[date] = Query(default=None),
    building_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles(*_PORTFOLIO_ROLES)),
):
    """
    Building-by-building rollup summed into portfolio totals.
    Defaults to the current calendar month.
    """
    period = period_from_query(period_start, period_end)
    with finance_errors("portfolio rollup", org_id=p.org_id, scope="portfolio"):
        out = rollup_service.portfolio_financials(db, access_scope_for(p), period=period, building_id=building_id)
    return out.to_dict()


@router.get("/buildings/{building_id}", response_model=dict)
def building(
    building_id: int,
    period_start: Optional[date] = Query(default=None),
    period_end: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles(*_PORTFOLIO_ROLES)),
):
    period = period_from_query(period_start, period_end)
    with finance_errors("building rollup", org_id=p.org_id, building_id=building_id, scope="building"):
        out = rollup_service.building_financials(db, access_scope_for(p), building_id=building_id, period=period)
    d = out.to_dict()
    d["period"] = period.to_dict()
    return d


@router.get("/profit", response_model=dict)
def profit(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    project_id: Optional[int] = Query(default=None),
    status: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles(*_PROFIT_ROLES)),
):
    """
    Project profit analytics. Either date bound may be given on its own;
    with neither, figures are all-time.
    """
    with finance_errors("profit analytics", org_id=p.org_id, project_id=project_id, scope="profit"):
        window = make_range(start_date, end_date)
        out = rollup_service.profit_analytics(
            db, access_scope_for(p), period=window, project_id=project_id, status=status
        )
    return out.to_dict()
