# backend/app/services/financial_queries.py
"""
Read-only data access for the financial rollups.

Every query takes an AccessScope: role-based visibility (a property manager
only sees the buildings they manage, contractors only see contractor-created
expenses) is decided once by the auth layer and passed in here, so the
rollup functions themselves stay scope-agnostic.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..domain import statuses
from ..domain.periods import DateRange, Period
from ..errors import ScopeNotFound
from ..models import (
    AlternativeRevenue,
    Asset,
    Budget,
    Building,
    BuildingPayment,
    BuildingTenant,
    Invoice,
    Lead,
    Liability,
    MaintenanceRequest,
    Milestone,
    OperationalExpense,
    Order,
    PaymentRequest,
    Project,
    Quotation,
    RentPayment,
)

ADMIN_ROLES = frozenset({"senior_admin", "junior_admin"})
CONTRACTOR_ROLES = frozenset({"contractor"})

ROLE_FAMILIES = {
    "admin": ADMIN_ROLES,
    "contractor": CONTRACTOR_ROLES,
}


@dataclass(frozen=True)
class AccessScope:
    org_id: int
    property_manager_id: Optional[int] = None  # set => only this manager's buildings/orders/payments
    creator_role_family: str = "admin"  # admin|contractor: whose expenses/revenues are visible


def _within(q, column, window: Optional[Period | DateRange]):
    """Applies whichever bounds the window has; a DateRange may leave either side open."""
    if window is None:
        return q
    if window.start is not None:
        q = q.where(column >= window.start)
    if window.end is not None:
        q = q.where(column <= window.end)
    return q


# -----------------------------
# Buildings
# -----------------------------
def list_buildings(db: Session, scope: AccessScope, *, building_id: Optional[int] = None) -> list[Building]:
    q = select(Building).where(Building.org_id == scope.org_id)
    if scope.property_manager_id is not None:
        q = q.where(Building.property_manager_id == scope.property_manager_id)
    if building_id is not None:
        q = q.where(Building.id == int(building_id))
    return list(db.scalars(q.order_by(Building.id)).all())


def must_get_building(db: Session, scope: AccessScope, *, building_id: int) -> Building:
    rows = list_buildings(db, scope, building_id=building_id)
    if not rows:
        raise ScopeNotFound("building", building_id)
    return rows[0]


def rent_payments(db: Session, scope: AccessScope, *, building_ids: Sequence[int], period: Period) -> list[RentPayment]:
    if not building_ids:
        return []
    return list(
        db.scalars(
            select(RentPayment)
            .where(RentPayment.org_id == scope.org_id)
            .where(RentPayment.building_id.in_(list(building_ids)))
            .where(RentPayment.due_date >= period.start, RentPayment.due_date <= period.end)
        ).all()
    )


def building_payments(
    db: Session, scope: AccessScope, *, building_ids: Sequence[int], period: Period
) -> list[BuildingPayment]:
    if not building_ids:
        return []
    return list(
        db.scalars(
            select(BuildingPayment)
            .where(BuildingPayment.org_id == scope.org_id)
            .where(BuildingPayment.building_id.in_(list(building_ids)))
            .where(BuildingPayment.payment_date >= period.start, BuildingPayment.payment_date <= period.end)
        ).all()
    )


def overlapping_budgets(db: Session, scope: AccessScope, *, building_ids: Sequence[int], period: Period) -> list[Budget]:
    """Budgets count when their own period overlaps the window at all."""
    if not building_ids:
        return []
    return list(
        db.scalars(
            select(Budget)
            .options(selectinload(Budget.expenses))
            .where(Budget.org_id == scope.org_id)
            .where(Budget.building_id.in_(list(building_ids)))
            .where(Budget.start_date <= period.end, Budget.end_date >= period.start)
        ).all()
    )


def building_tenants(db: Session, scope: AccessScope, *, building_ids: Sequence[int]) -> list[BuildingTenant]:
    if not building_ids:
        return []
    return list(
        db.scalars(
            select(BuildingTenant)
            .where(BuildingTenant.org_id == scope.org_id)
            .where(BuildingTenant.building_id.in_(list(building_ids)))
        ).all()
    )


def maintenance_requests(
    db: Session, scope: AccessScope, *, period: Period, building_ids: Optional[Sequence[int]] = None
) -> list[MaintenanceRequest]:
    q = (
        select(MaintenanceRequest)
        .where(MaintenanceRequest.org_id == scope.org_id)
        .where(MaintenanceRequest.created_at >= period.start, MaintenanceRequest.created_at <= period.end)
    )
    if scope.property_manager_id is not None:
        q = q.where(MaintenanceRequest.property_manager_id == scope.property_manager_id)
    if building_ids is not None:
        q = q.where(MaintenanceRequest.building_id.in_(list(building_ids)))
    return list(db.scalars(q).all())


def paid_contractor_payments(db: Session, scope: AccessScope, *, period: Period) -> list[PaymentRequest]:
    q = (
        select(PaymentRequest)
        .where(PaymentRequest.org_id == scope.org_id)
        .where(PaymentRequest.status.in_(list(statuses.PAYMENT_REQUEST_ACTUALIZED)))
        .where(PaymentRequest.paid_date >= period.start, PaymentRequest.paid_date <= period.end)
    )
    if scope.property_manager_id is not None:
        q = q.where(PaymentRequest.property_manager_id == scope.property_manager_id)
    return list(db.scalars(q).all())


def orders_in_period(
    db: Session, scope: AccessScope, *, period: Period, building_ids: Optional[Sequence[int]] = None
) -> list[Order]:
    q = (
        select(Order)
        .where(Order.org_id == scope.org_id)
        .where(Order.created_at >= period.start, Order.created_at <= period.end)
    )
    if scope.property_manager_id is not None:
        q = q.where(Order.property_manager_id == scope.property_manager_id)
    if building_ids is not None:
        q = q.where(Order.building_id.in_(list(building_ids)))
    return list(db.scalars(q).all())


# -----------------------------
# Projects
# -----------------------------
def _project_query(scope: AccessScope):
    return (
        select(Project)
        .options(
            selectinload(Project.milestones).selectinload(Milestone.risks),
            selectinload(Project.invoices),
        )
        .where(Project.org_id == scope.org_id)
    )


def list_projects(
    db: Session,
    scope: AccessScope,
    *,
    project_id: Optional[int] = None,
    status: Optional[str] = None,
    period: Optional[Period | DateRange] = None,
) -> list[Project]:
    q = _project_query(scope)
    if project_id is not None:
        q = q.where(Project.id == int(project_id))
    if status:
        q = q.where(Project.status == statuses.norm(status))
    q = _within(q, Project.created_at, period)
    return list(db.scalars(q.order_by(Project.created_at.desc(), Project.id.desc())).all())


def must_get_project(db: Session, scope: AccessScope, *, project_id: int) -> Project:
    row = db.scalar(_project_query(scope).where(Project.id == int(project_id)))
    if row is None:
        raise ScopeNotFound("project", project_id)
    return row


def must_get_milestone(db: Session, scope: AccessScope, *, milestone_id: int) -> Milestone:
    row = db.scalar(
        select(Milestone)
        .options(selectinload(Milestone.weekly_updates))
        .where(Milestone.org_id == scope.org_id, Milestone.id == int(milestone_id))
    )
    if row is None:
        raise ScopeNotFound("milestone", milestone_id)
    return row


def project_quotations(db: Session, scope: AccessScope, *, project_id: int, allowed=statuses.QUOTATION_ACTUALIZED) -> list[Quotation]:
    return list(
        db.scalars(
            select(Quotation)
            .where(Quotation.org_id == scope.org_id, Quotation.project_id == int(project_id))
            .where(Quotation.status.in_(list(allowed)))
        ).all()
    )


def project_invoices(db: Session, scope: AccessScope, *, project_id: int, allowed=statuses.INVOICE_ACTUALIZED) -> list[Invoice]:
    return list(
        db.scalars(
            select(Invoice)
            .where(Invoice.org_id == scope.org_id, Invoice.project_id == int(project_id))
            .where(Invoice.status.in_(list(allowed)))
        ).all()
    )


def project_milestones(db: Session, scope: AccessScope, *, project_id: int) -> list[Milestone]:
    return list(
        db.scalars(
            select(Milestone)
            .where(Milestone.org_id == scope.org_id, Milestone.project_id == int(project_id))
            .order_by(Milestone.sequence_order)
        ).all()
    )


# -----------------------------
# Non-project money in/out
# -----------------------------
def _creator_roles(scope: AccessScope) -> list[str]:
    return sorted(ROLE_FAMILIES.get(scope.creator_role_family, ADMIN_ROLES))


def approved_operational_expenses(
    db: Session, scope: AccessScope, *, period: Optional[Period | DateRange] = None
) -> list[OperationalExpense]:
    q = (
        select(OperationalExpense)
        .where(OperationalExpense.org_id == scope.org_id)
        .where(OperationalExpense.is_approved.is_(True))
        .where(OperationalExpense.creator_role.in_(_creator_roles(scope)))
    )
    return list(db.scalars(_within(q, OperationalExpense.date, period)).all())


def approved_alternative_revenues(
    db: Session, scope: AccessScope, *, period: Optional[Period | DateRange] = None
) -> list[AlternativeRevenue]:
    q = (
        select(AlternativeRevenue)
        .where(AlternativeRevenue.org_id == scope.org_id)
        .where(AlternativeRevenue.is_approved.is_(True))
        .where(AlternativeRevenue.creator_role.in_(_creator_roles(scope)))
    )
    return list(db.scalars(_within(q, AlternativeRevenue.date, period)).all())


# -----------------------------
# Snapshot inputs (organisation-wide)
# -----------------------------
def _created_in(model, scope: AccessScope, period: Period):
    return (
        select(model)
        .where(model.org_id == scope.org_id)
        .where(model.created_at >= period.start, model.created_at <= period.end)
    )


def invoices_created(db: Session, scope: AccessScope, *, period: Period) -> list[Invoice]:
    return list(db.scalars(_created_in(Invoice, scope, period)).all())


def payment_requests_created(db: Session, scope: AccessScope, *, period: Period) -> list[PaymentRequest]:
    return list(db.scalars(_created_in(PaymentRequest, scope, period)).all())


def quotations_created(db: Session, scope: AccessScope, *, period: Period) -> list[Quotation]:
    return list(db.scalars(_created_in(Quotation, scope, period)).all())


def leads_created(db: Session, scope: AccessScope, *, period: Period) -> list[Lead]:
    return list(db.scalars(_created_in(Lead, scope, period)).all())


def assets(db: Session, scope: AccessScope) -> list[Asset]:
    return list(db.scalars(select(Asset).where(Asset.org_id == scope.org_id)).all())


def unpaid_liabilities(db: Session, scope: AccessScope) -> list[Liability]:
    return list(
        db.scalars(select(Liability).where(Liability.org_id == scope.org_id, Liability.is_paid.is_(False))).all()
    )
