# backend/app/schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# -------------------- Snapshots --------------------

class CaptureSnapshotIn(BaseModel):
    metric_type: str = Field(default="DAILY", description="DAILY|MONTHLY")
    snapshot_date: Optional[date] = None


class SnapshotOut(BaseModel):
    id: int
    snapshot_date: datetime
    metric_type: str

    total_revenue: float
    paid_invoices: int
    total_expenses: float
    material_costs: float
    labour_costs: float
    artisan_payments: float
    net_profit: float
    profit_margin: float

    completed_orders: int
    active_orders: int
    new_leads: int

    total_assets: float
    total_liabilities: float

    total_project_budget: float
    total_project_actual_cost: float
    budget_utilization_percentage: float
    projects_over_budget: int

    total_milestones: int
    completed_milestones: int
    in_progress_milestones: int
    milestone_completion_rate: float
    delayed_milestones: int

    total_projects: int
    active_projects: int
    projects_at_risk: int
    average_project_health_score: float

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MetricDeltaOut(BaseModel):
    metric: str
    current: float
    previous: Optional[float] = None
    change: Optional[float] = None
    change_percentage: Optional[float] = None


class SnapshotTrendOut(BaseModel):
    metric_type: str
    snapshot_date: datetime
    previous_snapshot_date: datetime
    has_current: bool
    has_previous: bool
    deltas: list[MetricDeltaOut] = Field(default_factory=list)


# -------------------- Projects --------------------

class CostBreakdownOut(BaseModel):
    quotation_costs: float
    invoice_costs: float
    milestone_costs: float
    total_actual_cost: float
    estimated_budget: float
    variance: Optional[float] = None
    variance_percentage: Optional[float] = None


class RecomputeOut(BaseModel):
    project_id: int
    actual_cost: float
    breakdown: CostBreakdownOut


class WeeklyUpdateIn(BaseModel):
    week_start_date: datetime
    week_end_date: datetime
    labour_expenditure: float = Field(default=0.0, ge=0)
    material_expenditure: float = Field(default=0.0, ge=0)
    other_expenditure: float = Field(default=0.0, ge=0)
    progress_percentage: float = Field(default=0.0, ge=0, le=100)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_week(self) -> "WeeklyUpdateIn":
        if self.week_end_date < self.week_start_date:
            raise ValueError("week_end_date cannot be before week_start_date")
        return self


class WeeklyUpdateOut(BaseModel):
    id: int
    milestone_id: int
    week_start_date: datetime
    week_end_date: datetime
    labour_expenditure: float
    material_expenditure: float
    other_expenditure: float
    total_expenditure: float
    progress_percentage: float
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
