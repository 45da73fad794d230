# backend/app/cli/__main__.py
from __future__ import annotations

import argparse

from sqlalchemy import select

from app.db import SessionLocal
from app.models import Organization
from app.services.financial_queries import AccessScope
from app.services.project_costs import recompute_project_actual_cost
from app.workers.snapshot_tasks import run_capture


def _org_id(slug: str) -> int:
    db = SessionLocal()
    try:
        org = db.scalar(select(Organization).where(Organization.slug == slug))
        if org is None:
            raise SystemExit(f"unknown org: {slug}")
        return int(org.id)
    finally:
        db.close()


def _capture(args: argparse.Namespace) -> dict:
    return run_capture(_org_id(args.org_slug), args.metric_type, args.date)


def _recompute(args: argparse.Namespace) -> dict:
    db = SessionLocal()
    try:
        res = recompute_project_actual_cost(db, AccessScope(org_id=_org_id(args.org_slug)), project_id=args.project_id)
        return {"ok": True, "project_id": int(res.project.id), **res.breakdown.to_dict()}
    finally:
        db.close()


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m app.cli")
    sub = p.add_subparsers(dest="command", required=True)

    cap = sub.add_parser("capture", help="capture a DAILY or MONTHLY metric snapshot")
    cap.add_argument("--org-slug", required=True)
    cap.add_argument("--metric-type", default="DAILY", choices=["DAILY", "MONTHLY"])
    cap.add_argument("--date", default=None, help="YYYY-MM-DD (defaults to today)")
    cap.set_defaults(func=_capture)

    rec = sub.add_parser("recompute-project", help="recompute a project's actual cost")
    rec.add_argument("--org-slug", required=True)
    rec.add_argument("--project-id", type=int, required=True)
    rec.set_defaults(func=_recompute)

    args = p.parse_args()
    print(args.func(args))


if __name__ == "__main__":
    main()
