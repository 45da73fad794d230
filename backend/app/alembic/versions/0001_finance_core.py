"""finance core tables

Revision ID: 0001_finance_core
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

revision = "0001_finance_core"
down_revision = None
branch_labels = None
depends_on = None


def _insp():
    return inspect(op.get_bind())


def _has_table(name: str) -> bool:
    return name in _insp().get_table_names()


def _org_id():
    return sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True)


def _money(name: str):
    return sa.Column(name, sa.Float(), nullable=False, server_default=sa.text("0"))


def _count(name: str):
    return sa.Column(name, sa.Integer(), nullable=False, server_default=sa.text("0"))


def _user_fk(name: str, index: bool = False):
    return sa.Column(name, sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True, index=index)


def upgrade() -> None:
    # Idempotent-ish for messy dev DBs
    if not _has_table("organizations"):
        op.create_table(
            "organizations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("slug", sa.String(length=80), nullable=False, unique=True, index=True),
            sa.Column("name", sa.String(length=160), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _has_table("app_users"):
        op.create_table(
            "app_users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(length=200), nullable=False, unique=True, index=True),
            sa.Column("display_name", sa.String(length=160), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _has_table("org_memberships"):
        op.create_table(
            "org_memberships",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False, index=True),
            sa.Column("role", sa.String(length=30), nullable=False, server_default="junior_admin"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),
        )

    if not _has_table("audit_events"):
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            _user_fk("actor_user_id"),
            sa.Column("action", sa.String(length=80), nullable=False),
            sa.Column("entity_type", sa.String(length=80), nullable=False),
            sa.Column("entity_id", sa.String(length=80), nullable=False),
            sa.Column("before_json", sa.Text(), nullable=True),
            sa.Column("after_json", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    # ---- property management ----
    if not _has_table("buildings"):
        op.create_table(
            "buildings",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            _user_fk("property_manager_id", index=True),
            sa.Column("name", sa.String(length=160), nullable=False),
            sa.Column("address", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("number_of_units", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _has_table("building_tenants"):
        op.create_table(
            "building_tenants",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("building_id", sa.Integer(), sa.ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("full_name", sa.String(length=160), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="ACTIVE"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _has_table("rent_payments"):
        op.create_table(
            "rent_payments",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("building_id", sa.Integer(), sa.ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("building_tenants.id", ondelete="SET NULL"), nullable=True),
            _user_fk("property_manager_id"),
            sa.Column("due_date", sa.DateTime(), nullable=False),
            _money("amount"),
            _money("amount_paid"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )
        op.create_index("ix_rent_payments_org_due", "rent_payments", ["org_id", "due_date"], unique=False)

    if not _has_table("building_payments"):
        op.create_table(
            "building_payments",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("building_id", sa.Integer(), sa.ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("payment_date", sa.DateTime(), nullable=False),
            _money("amount"),
            sa.Column("description", sa.String(length=255), nullable=True),
        )

    if not _has_table("budgets"):
        op.create_table(
            "budgets",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("building_id", sa.Integer(), sa.ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("start_date", sa.DateTime(), nullable=False),
            sa.Column("end_date", sa.DateTime(), nullable=False),
            _money("total_budget"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _has_table("budget_expenses"):
        op.create_table(
            "budget_expenses",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("expense_date", sa.DateTime(), nullable=False),
            sa.Column("category", sa.String(length=60), nullable=False, server_default="general"),
            _money("amount"),
        )

    if not _has_table("maintenance_requests"):
        op.create_table(
            "maintenance_requests",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("building_id", sa.Integer(), sa.ForeignKey("buildings.id", ondelete="SET NULL"), nullable=True, index=True),
            _user_fk("property_manager_id"),
            sa.Column("title", sa.String(length=200), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="OPEN"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _has_table("orders"):
        op.create_table(
            "orders",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            _user_fk("property_manager_id", index=True),
            sa.Column("building_id", sa.Integer(), sa.ForeignKey("buildings.id", ondelete="SET NULL"), nullable=True, index=True),
            sa.Column("order_number", sa.String(length=40), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
            _money("material_cost"),
            _money("labour_cost"),
            sa.Column("created_at", sa.DateTime(), nullable=False, index=True),
        )

    # ---- projects ----
    if not _has_table("projects"):
        op.create_table(
            "projects",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("project_number", sa.String(length=40), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("customer_name", sa.String(length=160), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="PLANNING"),
            sa.Column("estimated_budget", sa.Float(), nullable=True),
            _money("actual_cost"),
            sa.Column("start_date", sa.DateTime(), nullable=True),
            sa.Column("end_date", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, index=True),
        )

    if not _has_table("milestones"):
        op.create_table(
            "milestones",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("name", sa.String(length=200), nullable=False),
            _count("sequence_order"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="NOT_STARTED"),
            _money("budget_allocated"),
            _money("actual_cost"),
            _money("expected_profit"),
            _money("progress_percentage"),
            sa.Column("start_date", sa.DateTime(), nullable=True),
            sa.Column("end_date", sa.DateTime(), nullable=True),
        )

    if not _has_table("milestone_risks"):
        op.create_table(
            "milestone_risks",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("milestone_id", sa.Integer(), sa.ForeignKey("milestones.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("probability", sa.String(length=10), nullable=False, server_default="LOW"),
            sa.Column("impact", sa.String(length=10), nullable=False, server_default="LOW"),
            sa.Column("status", sa.String(length=10), nullable=False, server_default="OPEN"),
        )

    if not _has_table("weekly_budget_updates"):
        op.create_table(
            "weekly_budget_updates",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("milestone_id", sa.Integer(), sa.ForeignKey("milestones.id", ondelete="CASCADE"), nullable=False, index=True),
            _user_fk("created_by_id"),
            sa.Column("week_start_date", sa.DateTime(), nullable=False),
            sa.Column("week_end_date", sa.DateTime(), nullable=False),
            _money("labour_expenditure"),
            _money("material_expenditure"),
            _money("other_expenditure"),
            _money("total_expenditure"),
            _money("progress_percentage"),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    # ---- billing ----
    if not _has_table("quotations"):
        op.create_table(
            "quotations",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True),
            sa.Column("quote_number", sa.String(length=40), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="DRAFT"),
            _money("subtotal"),
            _money("tax"),
            _money("total"),
            _money("company_material_cost"),
            _money("company_labour_cost"),
            sa.Column("created_at", sa.DateTime(), nullable=False, index=True),
        )

    if not _has_table("invoices"):
        op.create_table(
            "invoices",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True),
            sa.Column("invoice_number", sa.String(length=40), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="DRAFT"),
            _money("subtotal"),
            _money("tax"),
            _money("total"),
            sa.Column("due_date", sa.DateTime(), nullable=True),
            sa.Column("paid_date", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, index=True),
        )

    if not _has_table("payment_requests"):
        op.create_table(
            "payment_requests",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("milestone_id", sa.Integer(), sa.ForeignKey("milestones.id", ondelete="SET NULL"), nullable=True, index=True),
            _user_fk("artisan_id", index=True),
            _user_fk("property_manager_id"),
            _money("calculated_amount"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
            sa.Column("paid_date", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, index=True),
        )

    for name in ("operational_expenses", "alternative_revenues"):
        if not _has_table(name):
            op.create_table(
                name,
                sa.Column("id", sa.Integer(), primary_key=True),
                _org_id(),
                _user_fk("created_by_id"),
                sa.Column("creator_role", sa.String(length=30), nullable=False, server_default="junior_admin"),
                sa.Column("date", sa.DateTime(), nullable=False),
                sa.Column("category", sa.String(length=60), nullable=False, server_default="OTHER"),
                _money("amount"),
                sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
            )

    # ---- balance sheet / CRM ----
    if not _has_table("assets"):
        op.create_table(
            "assets",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("name", sa.String(length=160), nullable=False),
            _money("current_value"),
        )

    if not _has_table("liabilities"):
        op.create_table(
            "liabilities",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("name", sa.String(length=160), nullable=False),
            _money("amount"),
            sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        )

    if not _has_table("leads"):
        op.create_table(
            "leads",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("customer_name", sa.String(length=160), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="NEW"),
            sa.Column("created_at", sa.DateTime(), nullable=False, index=True),
        )

    # ---- snapshots ----
    if not _has_table("metric_snapshots"):
        op.create_table(
            "metric_snapshots",
            sa.Column("id", sa.Integer(), primary_key=True),
            _org_id(),
            sa.Column("snapshot_date", sa.DateTime(), nullable=False, index=True),
            sa.Column("metric_type", sa.String(length=10), nullable=False),
            _money("total_revenue"),
            _count("paid_invoices"),
            _money("total_expenses"),
            _money("material_costs"),
            _money("labour_costs"),
            _money("artisan_payments"),
            _money("net_profit"),
            _money("profit_margin"),
            _count("completed_orders"),
            _count("active_orders"),
            _count("new_leads"),
            _money("total_assets"),
            _money("total_liabilities"),
            _money("total_project_budget"),
            _money("total_project_actual_cost"),
            _money("budget_utilization_percentage"),
            _count("projects_over_budget"),
            _count("total_milestones"),
            _count("completed_milestones"),
            _count("in_progress_milestones"),
            _money("milestone_completion_rate"),
            _count("delayed_milestones"),
            _count("total_projects"),
            _count("active_projects"),
            _count("projects_at_risk"),
            sa.Column("average_project_health_score", sa.Float(), nullable=False, server_default=sa.text("100")),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.UniqueConstraint("org_id", "snapshot_date", "metric_type", name="uq_metric_snapshots_org_date_type"),
        )


def downgrade() -> None:
    for name in (
        "metric_snapshots",
        "leads",
        "liabilities",
        "assets",
        "alternative_revenues",
        "operational_expenses",
        "payment_requests",
        "invoices",
        "quotations",
        "weekly_budget_updates",
        "milestone_risks",
        "milestones",
        "projects",
        "orders",
        "maintenance_requests",
        "budget_expenses",
        "budgets",
        "building_payments",
        "rent_payments",
        "building_tenants",
        "buildings",
        "audit_events",
        "org_memberships",
        "app_users",
        "organizations",
    ):
        if _has_table(name):
            op.drop_table(name)
