# backend/app/domain/financials.py
"""
Pure financial rollups.

Inputs are plain records (ORM rows or any object with the same attribute
names); nothing here touches the database. Every percentage goes through
ratios.pct so an empty period yields zeros, never NaN/Infinity.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Optional, Sequence

from . import statuses
from .periods import Period
from .ratios import mean, money, pct, safe_ratio, total, variance


# ---------------------------------------------------------------------------
# Building scope
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class BuildingRevenue:
    rental_income: float
    expected_rental_income: float
    rent_collection_rate: float
    other_income: float
    total_revenue: float


@dataclass(frozen=True)
class BuildingExpenses:
    budget_expenses: float
    maintenance_cost: float
    total_expenses: float


@dataclass(frozen=True)
class Profitability:
    net_operating_income: float
    profit_margin: float


@dataclass(frozen=True)
class BudgetUsage:
    total_budget: float
    spent: float
    remaining: float
    utilization: float


@dataclass(frozen=True)
class Occupancy:
    total_units: int
    occupied_units: int
    vacant_units: int
    occupancy_rate: float


@dataclass(frozen=True)
class TenantCounts:
    active: int
    overdue_payments: int
    partial_payments: int


@dataclass(frozen=True)
class MaintenanceSummary:
    request_count: int
    total_cost: float
    avg_cost_per_request: float


@dataclass(frozen=True)
class BuildingFinancials:
    building_id: int
    building_name: str
    building_address: str
    revenue: BuildingRevenue
    expenses: BuildingExpenses
    profitability: Profitability
    budget: BudgetUsage
    occupancy: Occupancy
    tenants: TenantCounts
    maintenance: MaintenanceSummary
    scope: str = "building"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def profitability(revenue: float, expenses: float) -> Profitability:
    noi = money(revenue) - money(expenses)
    return Profitability(net_operating_income=noi, profit_margin=pct(noi, revenue))


def budget_usage(total_budget: float, spent: float) -> BudgetUsage:
    return BudgetUsage(
        total_budget=money(total_budget),
        spent=money(spent),
        remaining=money(total_budget) - money(spent),
        utilization=pct(spent, total_budget),
    )


def compute_building_financials(
    building: Any,
    *,
    rent_payments: Sequence[Any],
    other_payments: Sequence[Any],
    budgets: Sequence[Any],
    tenants: Sequence[Any],
    maintenance_requests: Sequence[Any] = (),
) -> BuildingFinancials:
    """
    rent_payments / other_payments: already limited to this building and the period.
    budgets: budgets whose period overlaps the window (with .expenses loaded).
    tenants: the building's tenants; only ACTIVE ones count as occupied.
    """
    rental_income = total(rp.amount_paid for rp in rent_payments)
    expected_rental_income = total(rp.amount for rp in rent_payments)
    other_income = total(p.amount for p in other_payments)
    total_revenue = rental_income + other_income

    budget_expenses = total(e.amount for b in budgets for e in (getattr(b, "expenses", None) or []))
    total_budget = total(b.total_budget for b in budgets)

    # No cost column on maintenance requests; counted, not costed.
    maintenance_cost = 0.0
    total_expenses = budget_expenses + maintenance_cost

    active = statuses.only(tenants, statuses.ACTIVE_TENANT)
    occupied = len(active)
    total_units = int(getattr(building, "number_of_units", None) or 0) or occupied

    return BuildingFinancials(
        building_id=int(building.id),
        building_name=str(getattr(building, "name", "") or ""),
        building_address=str(getattr(building, "address", "") or ""),
        revenue=BuildingRevenue(
            rental_income=rental_income,
            expected_rental_income=expected_rental_income,
            rent_collection_rate=pct(rental_income, expected_rental_income),
            other_income=other_income,
            total_revenue=total_revenue,
        ),
        expenses=BuildingExpenses(
            budget_expenses=budget_expenses,
            maintenance_cost=maintenance_cost,
            total_expenses=total_expenses,
        ),
        profitability=profitability(total_revenue, total_expenses),
        budget=budget_usage(total_budget, budget_expenses),
        occupancy=Occupancy(
            total_units=total_units,
            occupied_units=occupied,
            vacant_units=total_units - occupied,
            occupancy_rate=pct(occupied, total_units),
        ),
        tenants=TenantCounts(
            active=occupied,
            overdue_payments=statuses.count(rent_payments, statuses.RENT_OVERDUE),
            partial_payments=statuses.count(rent_payments, statuses.RENT_PARTIAL),
        ),
        maintenance=MaintenanceSummary(
            request_count=len(maintenance_requests),
            total_cost=maintenance_cost,
            avg_cost_per_request=safe_ratio(maintenance_cost, len(maintenance_requests)),
        ),
    )


# ---------------------------------------------------------------------------
# Portfolio scope
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PortfolioRevenue:
    total: float
    rental_income: float
    other_income: float
    trend: float


@dataclass(frozen=True)
class PortfolioExpenses:
    budget_expenses: float
    contractor_payments: float
    order_costs: float
    total: float


@dataclass(frozen=True)
class Performance:
    revenue_per_unit: float
    expense_per_unit: float
    net_income_per_unit: float
    rent_collection_rate: float


@dataclass(frozen=True)
class ContractorSummary:
    total_payments: float
    payment_count: int
    average_payment: float


@dataclass(frozen=True)
class PortfolioFinancials:
    period: Period
    number_of_properties: int
    total_units: int
    occupied_units: int
    vacant_units: int
    occupancy_rate: float
    revenue: PortfolioRevenue
    expenses: PortfolioExpenses
    profitability: Profitability
    budgets: BudgetUsage
    performance: Performance
    contractors: ContractorSummary
    maintenance: MaintenanceSummary
    buildings: list[BuildingFinancials] = field(default_factory=list)
    scope: str = "portfolio"

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["period"] = self.period.to_dict()
        return out


def rollup_portfolio(
    buildings: Sequence[BuildingFinancials],
    *,
    period: Period,
    contractor_payments: Sequence[Any] = (),
    orders: Sequence[Any] = (),
    maintenance_request_count: int = 0,
    previous_revenue: float = 0.0,
) -> PortfolioFinancials:
    """
    Absolute figures are plain sums of the per-building figures; rate figures
    are unweighted means across buildings (not weighted by units or revenue).

    contractor_payments: only PAID requests count.
    orders: material + labour cost of COMPLETED orders in the window.
    """
    revenue_total = total(b.revenue.total_revenue for b in buildings)
    rental_income = total(b.revenue.rental_income for b in buildings)
    other_income = total(b.revenue.other_income for b in buildings)
    budget_expenses = total(b.expenses.total_expenses for b in buildings)

    paid_contractor = statuses.only(contractor_payments, statuses.PAYMENT_REQUEST_ACTUALIZED)
    contractor_total = total(cp.calculated_amount for cp in paid_contractor)
    completed_orders = statuses.only(orders, statuses.ORDER_ACTUALIZED)
    order_costs = total(money(o.material_cost) + money(o.labour_cost) for o in completed_orders)
    all_expenses = budget_expenses + contractor_total + order_costs

    total_units = sum(b.occupancy.total_units for b in buildings)
    occupied_units = sum(b.occupancy.occupied_units for b in buildings)

    budget_total = total(b.budget.total_budget for b in buildings)
    budget_spent = total(b.budget.spent for b in buildings)

    revenue_per_unit = safe_ratio(revenue_total, total_units)
    expense_per_unit = safe_ratio(all_expenses, total_units)

    # A building with no rent due contributes 0 to the collection-rate mean.
    collection_rates = [
        b.revenue.rent_collection_rate if b.revenue.expected_rental_income > 0 else 0.0 for b in buildings
    ]

    return PortfolioFinancials(
        period=period,
        number_of_properties=len(buildings),
        total_units=total_units,
        occupied_units=occupied_units,
        vacant_units=total_units - occupied_units,
        occupancy_rate=mean([b.occupancy.occupancy_rate for b in buildings]),
        revenue=PortfolioRevenue(
            total=revenue_total,
            rental_income=rental_income,
            other_income=other_income,
            trend=pct(revenue_total - money(previous_revenue), previous_revenue),
        ),
        expenses=PortfolioExpenses(
            budget_expenses=budget_expenses,
            contractor_payments=contractor_total,
            order_costs=order_costs,
            total=all_expenses,
        ),
        profitability=profitability(revenue_total, all_expenses),
        budgets=budget_usage(budget_total, budget_spent),
        performance=Performance(
            revenue_per_unit=revenue_per_unit,
            expense_per_unit=expense_per_unit,
            net_income_per_unit=revenue_per_unit - expense_per_unit,
            rent_collection_rate=mean(collection_rates),
        ),
        contractors=ContractorSummary(
            total_payments=contractor_total,
            payment_count=len(paid_contractor),
            average_payment=safe_ratio(contractor_total, len(paid_contractor)),
        ),
        maintenance=MaintenanceSummary(
            request_count=int(maintenance_request_count),
            total_cost=0.0,
            avg_cost_per_request=0.0,
        ),
        buildings=list(buildings),
    )


# ---------------------------------------------------------------------------
# Project scope (profit analytics)
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MilestoneFinancials:
    id: int
    name: str
    status: str
    sequence_order: int
    budget_allocated: float
    actual_cost: float
    expected_profit: float
    actual_profit: float
    variance: float
    variance_percentage: float
    budget_utilization: float
    progress_percentage: float
    risk_count: int


@dataclass(frozen=True)
class ProjectFinancials:
    id: int
    project_number: str
    name: str
    status: str
    estimated_budget: float
    actual_cost: float
    revenue: float
    expected_profit: float
    actual_profit: float
    variance: float
    variance_percentage: float
    budget_utilization: float
    milestones: list[MilestoneFinancials]
    milestone_count: int
    completed_milestones: int
    health: Optional[dict[str, float]] = None
    scope: str = "project"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_milestone_financials(
    milestone: Any, *, project_budget: float, project_revenue: float
) -> MilestoneFinancials:
    budget = money(getattr(milestone, "budget_allocated", 0.0))
    actual = money(getattr(milestone, "actual_cost", 0.0))
    expected_profit = money(getattr(milestone, "expected_profit", 0.0))

    # Budget share stands in for the milestone's share of project revenue.
    revenue_share = safe_ratio(budget, project_budget) * money(project_revenue)
    actual_profit = revenue_share - actual
    v = variance(actual_profit, expected_profit)

    open_risks = statuses.only(getattr(milestone, "risks", None) or [], statuses.RISK_OPEN)

    return MilestoneFinancials(
        id=int(milestone.id),
        name=str(getattr(milestone, "name", "") or ""),
        status=statuses.norm(getattr(milestone, "status", None)),
        sequence_order=int(getattr(milestone, "sequence_order", 0) or 0),
        budget_allocated=budget,
        actual_cost=actual,
        expected_profit=expected_profit,
        actual_profit=actual_profit,
        variance=v.variance,
        variance_percentage=v.variance_percentage,
        budget_utilization=pct(actual, budget),
        progress_percentage=money(getattr(milestone, "progress_percentage", 0.0)),
        risk_count=len(open_risks),
    )


def compute_project_financials(
    project: Any,
    *,
    invoices: Iterable[Any],
    milestones: Sequence[Any] = (),
) -> ProjectFinancials:
    """
    revenue         = sum of PAID invoices
    expected profit = revenue - estimated budget
    actual profit   = revenue - actual cost (as stored on the project)
    """
    budget = money(getattr(project, "estimated_budget", None))
    actual = money(getattr(project, "actual_cost", None))
    revenue = total(i.total for i in statuses.only(invoices, statuses.INVOICE_ACTUALIZED))

    expected_profit = revenue - budget
    actual_profit = revenue - actual
    v = variance(actual_profit, expected_profit)

    ordered = sorted(milestones, key=lambda m: int(getattr(m, "sequence_order", 0) or 0))
    ms = [compute_milestone_financials(m, project_budget=budget, project_revenue=revenue) for m in ordered]

    return ProjectFinancials(
        id=int(project.id),
        project_number=str(getattr(project, "project_number", "") or ""),
        name=str(getattr(project, "name", "") or ""),
        status=statuses.norm(getattr(project, "status", None)),
        estimated_budget=budget,
        actual_cost=actual,
        revenue=revenue,
        expected_profit=expected_profit,
        actual_profit=actual_profit,
        variance=v.variance,
        variance_percentage=v.variance_percentage,
        budget_utilization=pct(actual, budget),
        milestones=ms,
        milestone_count=len(ms),
        completed_milestones=statuses.count(ordered, statuses.COMPLETED),
    )


@dataclass(frozen=True)
class ProfitSummary:
    total_projects: int
    total_revenue: float
    invoice_revenue: float
    alternative_revenue: float
    total_budget: float
    total_actual_cost: float
    project_costs: float
    operational_expenses: float
    total_expected_profit: float
    total_actual_profit: float
    variance: float
    variance_percentage: float
    profit_margin: float
    expected_profit_margin: float
    budget_utilization: float
    profitable_projects: int
    unprofitable_projects: int
    over_budget_projects: int
    on_track_projects: int


@dataclass(frozen=True)
class ProfitAnalytics:
    summary: ProfitSummary
    projects: list[ProjectFinancials]
    scope: str = "profit"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_profit_analytics(
    projects: Sequence[ProjectFinancials],
    *,
    operational_expenses: Iterable[Any] = (),
    alternative_revenues: Iterable[Any] = (),
) -> ProfitAnalytics:
    """
    Only approved operational expenses / alternative revenues count.

    total revenue         = invoice revenue + alternative revenue
    total actual cost     = project actual costs + operational expenses
    total expected profit = total revenue - total budget - operational expenses
    """
    op_total = total(e.amount for e in operational_expenses if bool(getattr(e, "is_approved", False)))
    alt_total = total(r.amount for r in alternative_revenues if bool(getattr(r, "is_approved", False)))

    invoice_revenue = total(p.revenue for p in projects)
    budget_total = total(p.estimated_budget for p in projects)
    project_costs = total(p.actual_cost for p in projects)

    revenue = invoice_revenue + alt_total
    actual_cost = project_costs + op_total
    actual_profit = revenue - actual_cost
    expected_profit = revenue - budget_total - op_total
    v = variance(actual_profit, expected_profit)

    summary = ProfitSummary(
        total_projects=len(projects),
        total_revenue=revenue,
        invoice_revenue=invoice_revenue,
        alternative_revenue=alt_total,
        total_budget=budget_total,
        total_actual_cost=actual_cost,
        project_costs=project_costs,
        operational_expenses=op_total,
        total_expected_profit=expected_profit,
        total_actual_profit=actual_profit,
        variance=v.variance,
        variance_percentage=v.variance_percentage,
        profit_margin=pct(actual_profit, revenue),
        expected_profit_margin=pct(expected_profit, revenue),
        budget_utilization=pct(project_costs, budget_total),
        profitable_projects=sum(1 for p in projects if p.actual_profit > 0),
        unprofitable_projects=sum(1 for p in projects if p.actual_profit < 0),
        over_budget_projects=sum(1 for p in projects if p.budget_utilization > 100),
        on_track_projects=sum(
            1 for p in projects if p.budget_utilization <= 100 and p.actual_profit >= p.expected_profit
        ),
    )
    return ProfitAnalytics(summary=summary, projects=list(projects))
