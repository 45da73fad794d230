# backend/app/workers/celery_app.py
from __future__ import annotations

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from ..config import settings
from ..logging_config import configure_logging

BROKER = settings.celery_broker_url or "redis://localhost:6379/0"
BACKEND = settings.celery_result_backend or "redis://localhost:6379/1"

celery_app = Celery(
    "facility_finance",
    broker=BROKER,
    backend=BACKEND,
    include=["app.workers.snapshot_tasks"],
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
    task_track_started=True,
    timezone="UTC",
)

celery_app.conf.task_routes = {
    "app.workers.snapshot_tasks.*": {"queue": "snapshots"},
}


@setup_logging.connect
def _worker_logging(**_kwargs) -> None:
    # Workers log the same JSON lines as the API instead of Celery's own format.
    configure_logging()


def beat_schedule(enabled: bool) -> dict:
    """Daily capture of yesterday at 00:15 UTC, monthly capture of last month on the 1st."""
    if not enabled:
        return {}
    return {
        "capture-daily-snapshots": {
            "task": "app.workers.snapshot_tasks.capture_all_orgs_task",
            "schedule": crontab(hour=0, minute=15),
            "kwargs": {"metric_type": "DAILY", "days_back": 1},
        },
        "capture-monthly-snapshots": {
            "task": "app.workers.snapshot_tasks.capture_all_orgs_task",
            "schedule": crontab(day_of_month=1, hour=0, minute=30),
            "kwargs": {"metric_type": "MONTHLY", "days_back": 1},
        },
    }


celery_app.conf.beat_schedule = beat_schedule(settings.snapshot_schedule_enabled)
