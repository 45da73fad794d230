# backend/app/workers/snapshot_tasks.py
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import select

from ..db import SessionLocal
from ..middleware.request_id import bind_request_id
from ..models import Organization
from ..services.financial_queries import AccessScope
from ..services.snapshots import capture
from .celery_app import celery_app

log = logging.getLogger(__name__)


def run_capture(org_id: int, metric_type: str, snapshot_date: Optional[str] = None) -> dict:
    """One capture in its own session. Shared by the Celery task and the CLI."""
    d = date.fromisoformat(snapshot_date) if snapshot_date else datetime.utcnow()
    db = SessionLocal()
    try:
        row = capture(db, AccessScope(org_id=int(org_id)), metric_type=metric_type, snapshot_date=d)
        return {
            "ok": True,
            "org_id": int(org_id),
            "snapshot_id": int(row.id),
            "metric_type": row.metric_type,
            "snapshot_date": row.snapshot_date.isoformat(),
        }
    finally:
        db.close()


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=30,
    name="app.workers.snapshot_tasks.capture_snapshot_task",
)
def capture_snapshot_task(self, org_id: int, metric_type: str, snapshot_date: Optional[str] = None) -> dict:
    """
    Captures one org's snapshot. Capture is an upsert, so a retry after a
    partial failure overwrites rather than duplicates.
    """
    with bind_request_id(self.request.id):
        try:
            return run_capture(org_id, metric_type, snapshot_date)
        except Exception as e:
            log.exception(
                "snapshot capture task failed",
                extra={"org_id": org_id, "metric_type": metric_type, "retries": self.request.retries},
            )
            raise self.retry(exc=e)


@celery_app.task(name="app.workers.snapshot_tasks.capture_all_orgs_task")
def capture_all_orgs_task(metric_type: str, days_back: int = 1) -> dict:
    """Fans out one capture per organisation for the day `days_back` days ago."""
    target = (datetime.utcnow() - timedelta(days=int(days_back))).date().isoformat()
    db = SessionLocal()
    try:
        org_ids = [int(x) for x in db.scalars(select(Organization.id)).all()]
    finally:
        db.close()

    for org_id in org_ids:
        capture_snapshot_task.delay(org_id, metric_type, target)
    return {"ok": True, "metric_type": metric_type, "snapshot_date": target, "orgs": len(org_ids)}
