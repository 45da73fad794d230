# backend/app/routers/snapshots.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, require_roles
from ..db import get_db
from ..domain.periods import end_of_day, start_of_day
from ..schemas import CaptureSnapshotIn, SnapshotOut, SnapshotTrendOut
from ..services import snapshots as snapshot_service
from ..services.financial_queries import AccessScope
from .common import finance_errors

router = APIRouter(prefix="/snapshots", tags=["snapshots"])

_ADMINS = ("senior_admin", "junior_admin")


@router.post("/capture", response_model=SnapshotOut)
def capture(
    payload: CaptureSnapshotIn,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles(*_ADMINS)),
):
    """Capture (or re-capture) the organisation-wide snapshot for one day or month."""
    with finance_errors("snapshot capture", org_id=p.org_id, metric_type=payload.metric_type):
        row = snapshot_service.capture(
            db,
            AccessScope(org_id=p.org_id),
            metric_type=payload.metric_type,
            snapshot_date=payload.snapshot_date,
            actor_user_id=p.user_id,
        )
    return row


@router.get("", response_model=list[SnapshotOut])
def list_snapshots(
    metric_type: str = Query(default="DAILY"),
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    limit: int = Query(default=366, ge=1, le=2000),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles(*_ADMINS)),
):
    with finance_errors("snapshot list", org_id=p.org_id, metric_type=metric_type):
        return snapshot_service.list_snapshots(
            db,
            org_id=p.org_id,
            metric_type=metric_type,
            start=start_of_day(start) if start else None,
            end=end_of_day(end) if end else None,
            limit=limit,
        )


@router.get("/trend", response_model=SnapshotTrendOut)
def trend(
    metric_type: str = Query(default="DAILY"),
    snapshot_date: Optional[date] = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
    p: Principal = Depends(require_roles(*_ADMINS)),
):
    with finance_errors("snapshot trend", org_id=p.org_id, metric_type=metric_type):
        out = snapshot_service.trend(
            db, org_id=p.org_id, metric_type=metric_type, snapshot_date=snapshot_date or datetime.utcnow()
        )
    return out.to_dict()
