# backend/app/models.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


# -----------------------------
# Multitenant RBAC tables
# -----------------------------
class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class AppUser(Base):
    __tablename__ = "app_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class OrgMembership(Base):
    __tablename__ = "org_memberships"
    __table_args__ = (UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), index=True, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("app_users.id"), index=True, nullable=False)
    # senior_admin|junior_admin|property_manager|contractor|artisan|tenant
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="junior_admin")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), index=True, nullable=False)
    actor_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True)

    action: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(80), nullable=False)

    before_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    after_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# Property management: buildings / rent / budgets
# -----------------------------
class Building(Base):
    __tablename__ = "buildings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    property_manager_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("app_users.id"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(160), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    number_of_units: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    tenants: Mapped[List["BuildingTenant"]] = relationship(back_populates="building", cascade="all, delete-orphan")
    budgets: Mapped[List["Budget"]] = relationship(back_populates="building", cascade="all, delete-orphan")
    payments: Mapped[List["BuildingPayment"]] = relationship(back_populates="building", cascade="all, delete-orphan")


class BuildingTenant(Base):
    __tablename__ = "building_tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True)

    full_name: Mapped[str] = mapped_column(String(160), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")  # ACTIVE|MOVED_OUT

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    building: Mapped["Building"] = relationship(back_populates="tenants")


class RentPayment(Base):
    __tablename__ = "rent_payments"
    __table_args__ = (Index("ix_rent_payments_org_due", "org_id", "due_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("building_tenants.id", ondelete="SET NULL"), nullable=True
    )
    property_manager_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True)

    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # amount due
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")  # PENDING|PAID|PARTIAL|OVERDUE

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class BuildingPayment(Base):
    """Non-rent income received by a building (parking, laundry, deposits interest ...)."""

    __tablename__ = "building_payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True)

    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    building: Mapped["Building"] = relationship(back_populates="payments")


class Budget(Base):
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    total_budget: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    building: Mapped["Building"] = relationship(back_populates="budgets")
    expenses: Mapped[List["BudgetExpense"]] = relationship(back_populates="budget", cascade="all, delete-orphan")


class BudgetExpense(Base):
    __tablename__ = "budget_expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True)

    expense_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    category: Mapped[str] = mapped_column(String(60), nullable=False, default="general")
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    budget: Mapped["Budget"] = relationship(back_populates="expenses")


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    building_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("buildings.id", ondelete="SET NULL"), nullable=True, index=True
    )
    property_manager_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="OPEN")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class Order(Base):
    """Work order (material + labour cost carried by the company)."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    property_manager_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("app_users.id"), nullable=True, index=True
    )
    building_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("buildings.id", ondelete="SET NULL"), nullable=True, index=True
    )

    order_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    material_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    labour_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)


# -----------------------------
# Projects / milestones
# -----------------------------
class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)

    project_number: Mapped[str] = mapped_column(String(40), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    # PLANNING|IN_PROGRESS|ON_HOLD|COMPLETED|CANCELLED
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PLANNING")

    estimated_budget: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    actual_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    milestones: Mapped[List["Milestone"]] = relationship(
        back_populates="project", cascade="all, delete-orphan", order_by="Milestone.sequence_order"
    )
    quotations: Mapped[List["Quotation"]] = relationship(back_populates="project")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="project")


class Milestone(Base):
    __tablename__ = "milestones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    sequence_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # NOT_STARTED|IN_PROGRESS|COMPLETED|ON_HOLD
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="NOT_STARTED")

    budget_allocated: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    actual_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    expected_profit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    progress_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    project: Mapped["Project"] = relationship(back_populates="milestones")
    risks: Mapped[List["MilestoneRisk"]] = relationship(back_populates="milestone", cascade="all, delete-orphan")
    weekly_updates: Mapped[List["WeeklyBudgetUpdate"]] = relationship(
        back_populates="milestone", cascade="all, delete-orphan"
    )
    payment_requests: Mapped[List["PaymentRequest"]] = relationship(back_populates="milestone")


class MilestoneRisk(Base):
    __tablename__ = "milestone_risks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    milestone_id: Mapped[int] = mapped_column(ForeignKey("milestones.id", ondelete="CASCADE"), nullable=False, index=True)

    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    probability: Mapped[str] = mapped_column(String(10), nullable=False, default="LOW")  # LOW|MEDIUM|HIGH
    impact: Mapped[str] = mapped_column(String(10), nullable=False, default="LOW")  # LOW|MEDIUM|HIGH
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="OPEN")  # OPEN|CLOSED

    milestone: Mapped["Milestone"] = relationship(back_populates="risks")


class WeeklyBudgetUpdate(Base):
    __tablename__ = "weekly_budget_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    milestone_id: Mapped[int] = mapped_column(ForeignKey("milestones.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True)

    week_start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    week_end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    labour_expenditure: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    material_expenditure: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    other_expenditure: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_expenditure: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    progress_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    milestone: Mapped["Milestone"] = relationship(back_populates="weekly_updates")


# -----------------------------
# Billing documents / labour claims
# -----------------------------
class Quotation(Base):
    __tablename__ = "quotations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    project_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True
    )

    quote_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")  # DRAFT|PENDING|APPROVED|REJECTED
    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tax: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    company_material_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    company_labour_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    project: Mapped[Optional["Project"]] = relationship(back_populates="quotations")


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    project_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True
    )

    invoice_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    # DRAFT|SENT|PAID|OVERDUE|CANCELLED
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")
    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tax: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    project: Mapped[Optional["Project"]] = relationship(back_populates="invoices")


class PaymentRequest(Base):
    __tablename__ = "payment_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    milestone_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("milestones.id", ondelete="SET NULL"), nullable=True, index=True
    )
    artisan_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True, index=True)
    property_manager_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True)

    calculated_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")  # PENDING|APPROVED|PAID|REJECTED
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    milestone: Mapped[Optional["Milestone"]] = relationship(back_populates="payment_requests")


class OperationalExpense(Base):
    __tablename__ = "operational_expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    created_by_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True)
    creator_role: Mapped[str] = mapped_column(String(30), nullable=False, default="junior_admin")

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    category: Mapped[str] = mapped_column(String(60), nullable=False, default="OTHER")
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class AlternativeRevenue(Base):
    __tablename__ = "alternative_revenues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    created_by_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("app_users.id"), nullable=True)
    creator_role: Mapped[str] = mapped_column(String(30), nullable=False, default="junior_admin")

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    category: Mapped[str] = mapped_column(String(60), nullable=False, default="OTHER")
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


# -----------------------------
# Balance-sheet items / CRM (read by snapshots)
# -----------------------------
class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    current_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)


class Liability(Base):
    __tablename__ = "liabilities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(160), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="NEW")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)


# -----------------------------
# Time-series snapshots
# -----------------------------
class MetricSnapshot(Base):
    """
    One row per (org, period start, metric type).
    Re-capturing the same period updates the row in place.
    """

    __tablename__ = "metric_snapshots"
    __table_args__ = (
        UniqueConstraint("org_id", "snapshot_date", "metric_type", name="uq_metric_snapshots_org_date_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    org_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)

    snapshot_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)  # period start
    metric_type: Mapped[str] = mapped_column(String(10), nullable=False)  # DAILY|MONTHLY

    # Revenue / cost
    total_revenue: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    paid_invoices: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_expenses: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    material_costs: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    labour_costs: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    artisan_payments: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    net_profit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    profit_margin: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Operations
    completed_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    new_leads: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Balance sheet
    total_assets: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_liabilities: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Budgets / projects
    total_project_budget: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_project_actual_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    budget_utilization_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    projects_over_budget: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_milestones: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_milestones: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    in_progress_milestones: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    milestone_completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    delayed_milestones: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_projects: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active_projects: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    projects_at_risk: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_project_health_score: Mapped[float] = mapped_column(Float, nullable=False, default=100.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
