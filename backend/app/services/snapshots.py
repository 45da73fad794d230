# backend/app/services/snapshots.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..domain.audit import audit_write
from ..domain.periods import METRIC_TYPES, previous_snapshot_date, resolve_period
from ..domain.snapshot_metrics import METRIC_FIELDS, MetricDelta, SnapshotMetrics, compare
from ..errors import InvalidPeriod
from ..models import MetricSnapshot
from .financial_queries import AccessScope
from .rollup_service import period_metrics

log = logging.getLogger(__name__)


def _metric_type(v: str) -> str:
    mt = str(v or "").strip().upper()
    if mt not in METRIC_TYPES:
        raise InvalidPeriod(f"unknown metric type: {v!r}")
    return mt


def snapshot_values(row: MetricSnapshot) -> dict[str, Any]:
    return {k: getattr(row, k) for k in METRIC_FIELDS}


# -----------------------------
# Store
# -----------------------------
def find_by_period(db: Session, *, org_id: int, snapshot_date: date | datetime, metric_type: str) -> Optional[MetricSnapshot]:
    mt = _metric_type(metric_type)
    key = resolve_period(mt, snapshot_date).start
    return db.scalar(
        select(MetricSnapshot)
        .where(MetricSnapshot.org_id == int(org_id))
        .where(MetricSnapshot.metric_type == mt)
        .where(MetricSnapshot.snapshot_date == key)
    )


def upsert(
    db: Session,
    *,
    org_id: int,
    snapshot_date: datetime,
    metric_type: str,
    metrics: SnapshotMetrics,
) -> MetricSnapshot:
    """
    Update-if-exists-else-insert for (org, period start, metric type).
    Flushes so a concurrent insert surfaces as IntegrityError here; does not commit.
    """
    mt = _metric_type(metric_type)
    now = datetime.utcnow()

    row = find_by_period(db, org_id=org_id, snapshot_date=snapshot_date, metric_type=mt)
    if row is None:
        row = MetricSnapshot(
            org_id=int(org_id),
            snapshot_date=resolve_period(mt, snapshot_date).start,
            metric_type=mt,
            created_at=now,
        )
    for k, v in metrics.to_dict().items():
        setattr(row, k, v)
    row.updated_at = now

    db.add(row)
    db.flush()
    return row


def list_snapshots(
    db: Session,
    *,
    org_id: int,
    metric_type: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = 366,
) -> list[MetricSnapshot]:
    q = (
        select(MetricSnapshot)
        .where(MetricSnapshot.org_id == int(org_id))
        .where(MetricSnapshot.metric_type == _metric_type(metric_type))
    )
    if start is not None:
        q = q.where(MetricSnapshot.snapshot_date >= start)
    if end is not None:
        q = q.where(MetricSnapshot.snapshot_date <= end)
    return list(db.scalars(q.order_by(MetricSnapshot.snapshot_date.asc()).limit(int(limit))).all())


# -----------------------------
# Capture
# -----------------------------
def capture(
    db: Session,
    scope: AccessScope,
    *,
    metric_type: str,
    snapshot_date: Optional[date | datetime] = None,
    actor_user_id: Optional[int] = None,
    as_of: Optional[datetime] = None,
) -> MetricSnapshot:
    """
    Compute the period's metrics, then write exactly one snapshot row.

    All reads happen before the first write, so a failed fetch leaves nothing
    behind. The write (snapshot + audit row) is a single commit; if a
    concurrent capture inserted the same period first, the unique constraint
    fires and we overwrite that row instead of duplicating it.
    """
    mt = _metric_type(metric_type)
    period = resolve_period(mt, snapshot_date or datetime.utcnow())
    metrics = period_metrics(db, scope, period=period, as_of=as_of)

    def _write() -> MetricSnapshot:
        row = upsert(db, org_id=scope.org_id, snapshot_date=period.start, metric_type=mt, metrics=metrics)
        audit_write(
            db,
            org_id=scope.org_id,
            actor_user_id=actor_user_id,
            action="metric_snapshot.capture",
            entity_type="MetricSnapshot",
            entity_id=f"{mt}:{period.start.date().isoformat()}",
            after=metrics.to_dict(),
        )
        db.commit()
        return row

    try:
        row = _write()
    except IntegrityError:
        db.rollback()
        log.info(
            "snapshot capture raced; updating existing row",
            extra={"org_id": scope.org_id, "metric_type": mt},
        )
        try:
            row = _write()
        except Exception:
            db.rollback()
            raise
    except Exception:
        db.rollback()
        raise

    db.refresh(row)
    log.info(
        "metric snapshot captured",
        extra={"org_id": scope.org_id, "metric_type": mt},
    )
    return row


# -----------------------------
# Trend
# -----------------------------
@dataclass(frozen=True)
class SnapshotTrend:
    metric_type: str
    snapshot_date: datetime
    previous_snapshot_date: datetime
    has_current: bool
    has_previous: bool
    deltas: list[MetricDelta]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def trend(db: Session, *, org_id: int, metric_type: str, snapshot_date: date | datetime) -> SnapshotTrend:
    """Compare the snapshot for snapshot_date with the one for the preceding period."""
    mt = _metric_type(metric_type)
    key = resolve_period(mt, snapshot_date).start
    prev_key = previous_snapshot_date(mt, key)

    current = find_by_period(db, org_id=org_id, snapshot_date=key, metric_type=mt)
    previous = find_by_period(db, org_id=org_id, snapshot_date=prev_key, metric_type=mt)

    return SnapshotTrend(
        metric_type=mt,
        snapshot_date=key,
        previous_snapshot_date=prev_key,
        has_current=current is not None,
        has_previous=previous is not None,
        deltas=compare(current, previous) if current is not None else [],
    )
