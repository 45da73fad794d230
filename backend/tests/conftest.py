# backend/tests/conftest.py
from __future__ import annotations

import os
import tempfile

# Must run before anything imports app.config / app.db.
_DB_DIR = tempfile.mkdtemp(prefix="facility_finance_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["AUTH_MODE"] = "dev"
os.environ["APP_ENV"] = "local"
os.environ["SNAPSHOT_SCHEDULE_ENABLED"] = "false"

import pytest

from app import models  # noqa: F401  (registers tables on Base.metadata)
from app.db import Base, SessionLocal, engine
from app.models import Organization
from app.services.financial_queries import AccessScope


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def org(db) -> Organization:
    o = Organization(slug="acme", name="Acme Facilities")
    db.add(o)
    db.commit()
    db.refresh(o)
    return o


@pytest.fixture()
def scope(org) -> AccessScope:
    return AccessScope(org_id=int(org.id))


@pytest.fixture()
def world(db, org) -> dict[str, int]:
    """
    One organisation, two managers, two buildings and one project, with
    March 2026 as the busy month and a single February rent payment.
    """
    from datetime import datetime as dt

    from app.models import (
        AlternativeRevenue,
        AppUser,
        Budget,
        BudgetExpense,
        Building,
        BuildingPayment,
        BuildingTenant,
        Invoice,
        Milestone,
        OperationalExpense,
        Order,
        PaymentRequest,
        Project,
        Quotation,
        RentPayment,
    )

    oid = int(org.id)
    pm1 = AppUser(email="pm1@acme.test", display_name="pm1")
    pm2 = AppUser(email="pm2@acme.test", display_name="pm2")
    db.add_all([pm1, pm2])
    db.flush()

    b1 = Building(org_id=oid, property_manager_id=pm1.id, name="North Tower", address="1 North Rd", number_of_units=10)
    b2 = Building(org_id=oid, property_manager_id=pm2.id, name="South Court", address="2 South Rd", number_of_units=2)
    db.add_all([b1, b2])
    db.flush()

    for i in range(7):
        db.add(BuildingTenant(org_id=oid, building_id=b1.id, full_name=f"tenant {i}"))
    db.add(BuildingTenant(org_id=oid, building_id=b1.id, full_name="gone", status="MOVED_OUT"))
    for i in range(2):
        db.add(BuildingTenant(org_id=oid, building_id=b2.id, full_name=f"south {i}"))

    db.add(RentPayment(org_id=oid, building_id=b1.id, due_date=dt(2026, 3, 1), amount=10000.0, amount_paid=7000.0, status="PARTIAL"))
    db.add(RentPayment(org_id=oid, building_id=b1.id, due_date=dt(2026, 2, 1), amount=5000.0, amount_paid=5000.0, status="PAID"))
    db.add(BuildingPayment(org_id=oid, building_id=b2.id, payment_date=dt(2026, 3, 12), amount=500.0))

    budget = Budget(org_id=oid, building_id=b1.id, start_date=dt(2026, 3, 1), end_date=dt(2026, 3, 31), total_budget=4000.0)
    db.add(budget)
    db.flush()
    db.add(BudgetExpense(org_id=oid, budget_id=budget.id, expense_date=dt(2026, 3, 3), amount=1000.0))

    db.add(PaymentRequest(org_id=oid, property_manager_id=pm1.id, calculated_amount=1000.0, status="PAID", paid_date=dt(2026, 3, 10), created_at=dt(2026, 3, 8)))
    db.add(PaymentRequest(org_id=oid, property_manager_id=pm1.id, calculated_amount=400.0, status="PENDING", created_at=dt(2026, 3, 9)))
    db.add(Order(org_id=oid, property_manager_id=pm1.id, building_id=b1.id, status="COMPLETED", material_cost=200.0, labour_cost=300.0, created_at=dt(2026, 3, 5)))

    project = Project(
        org_id=oid,
        project_number="PRJ-001",
        name="Lobby refit",
        status="IN_PROGRESS",
        estimated_budget=100000.0,
        actual_cost=120000.0,
        created_at=dt(2026, 3, 2),
    )
    db.add(project)
    db.flush()
    m1 = Milestone(org_id=oid, project_id=project.id, name="Structure", sequence_order=1, budget_allocated=100000.0, actual_cost=120000.0)
    m2 = Milestone(org_id=oid, project_id=project.id, name="Finishes", sequence_order=2, budget_allocated=0.0, actual_cost=0.0)
    db.add_all([m1, m2])

    db.add(Invoice(org_id=oid, project_id=project.id, status="PAID", total=150000.0, paid_date=dt(2026, 3, 20), created_at=dt(2026, 3, 20)))
    db.add(Invoice(org_id=oid, project_id=project.id, status="DRAFT", total=99999.0, created_at=dt(2026, 3, 21)))
    db.add(Quotation(org_id=oid, project_id=project.id, status="APPROVED", total=5000.0, created_at=dt(2026, 3, 2)))
    db.add(Quotation(org_id=oid, project_id=project.id, status="DRAFT", total=7000.0, created_at=dt(2026, 3, 2)))

    db.add(OperationalExpense(org_id=oid, creator_role="junior_admin", date=dt(2026, 3, 4), amount=2000.0, is_approved=True))
    db.add(OperationalExpense(org_id=oid, creator_role="contractor", date=dt(2026, 3, 4), amount=800.0, is_approved=True))
    db.add(OperationalExpense(org_id=oid, creator_role="senior_admin", date=dt(2026, 3, 4), amount=9999.0, is_approved=False))
    db.add(AlternativeRevenue(org_id=oid, creator_role="senior_admin", date=dt(2026, 3, 6), amount=1000.0, is_approved=True))

    db.commit()
    return {
        "org_id": oid,
        "pm1": int(pm1.id),
        "pm2": int(pm2.id),
        "b1": int(b1.id),
        "b2": int(b2.id),
        "project": int(project.id),
        "m1": int(m1.id),
        "m2": int(m2.id),
    }
