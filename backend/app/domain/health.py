# backend/app/domain/health.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from . import statuses
from .ratios import clamp, money, safe_ratio

DEFAULT_WEIGHTS = (0.4, 0.3, 0.3)  # budget, schedule, risk


@dataclass(frozen=True)
class ProjectHealth:
    budget_health: float
    schedule_health: float
    risk_health: float
    score: float
    delayed_milestones: int
    high_risks: int

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def budget_health(estimated_budget: Optional[float], actual_cost: Optional[float]) -> float:
    """100 at or under budget, minus one point per percent of overrun."""
    budget = money(estimated_budget)
    if budget <= 0:
        return 100.0
    return clamp(100.0 - (money(actual_cost) / budget - 1.0) * 100.0, 0.0, 100.0)


def is_delayed(milestone: Any, as_of: datetime) -> bool:
    end = getattr(milestone, "end_date", None)
    if end is None or statuses.is_in(getattr(milestone, "status", None), statuses.COMPLETED):
        return False
    return end < as_of


def delayed_count(milestones: Iterable[Any], as_of: datetime) -> int:
    return sum(1 for m in milestones if is_delayed(m, as_of))


def schedule_health(milestones: Sequence[Any], as_of: datetime) -> float:
    if not milestones:
        return 100.0
    delayed = delayed_count(milestones, as_of)
    return clamp(100.0 - safe_ratio(delayed, len(milestones)) * 100.0, 0.0, 100.0)


def is_high_risk(risk: Any) -> bool:
    return statuses.norm(getattr(risk, "probability", None)) == statuses.HIGH or (
        statuses.norm(getattr(risk, "impact", None)) == statuses.HIGH
    )


def risk_health(risks: Sequence[Any]) -> float:
    if not risks:
        return 100.0
    high = sum(1 for r in risks if is_high_risk(r))
    return clamp(100.0 - safe_ratio(high, len(risks)) * 100.0, 0.0, 100.0)


def _risks_of(milestones: Iterable[Any]) -> list[Any]:
    return [r for m in milestones for r in (getattr(m, "risks", None) or [])]


def project_health(
    project: Any,
    *,
    milestones: Optional[Sequence[Any]] = None,
    as_of: Optional[datetime] = None,
    weights: tuple[float, float, float] = DEFAULT_WEIGHTS,
) -> ProjectHealth:
    """
    score = wb * budget_health + ws * schedule_health + wr * risk_health
    Each sub-score is clamped to [0, 100] before blending.
    """
    as_of = as_of or datetime.utcnow()
    ms = list(milestones if milestones is not None else (getattr(project, "milestones", None) or []))
    risks = _risks_of(ms)

    b = budget_health(getattr(project, "estimated_budget", None), getattr(project, "actual_cost", None))
    s = schedule_health(ms, as_of)
    r = risk_health(risks)
    wb, ws, wr = weights

    return ProjectHealth(
        budget_health=b,
        schedule_health=s,
        risk_health=r,
        score=clamp(wb * b + ws * s + wr * r, 0.0, 100.0),
        delayed_milestones=delayed_count(ms, as_of),
        high_risks=sum(1 for x in risks if is_high_risk(x)),
    )


def project_health_score(project: Any, **kwargs: Any) -> float:
    return project_health(project, **kwargs).score


def is_over_budget(project: Any, threshold: float = 1.10) -> bool:
    budget = money(getattr(project, "estimated_budget", None))
    if budget <= 0:
        return False
    return money(getattr(project, "actual_cost", None)) > budget * threshold


def is_at_risk(project: Any, threshold: float = 0.90) -> bool:
    """Any HIGH risk on any milestone, or spend already past threshold of budget."""
    ms = getattr(project, "milestones", None) or []
    if any(is_high_risk(r) for r in _risks_of(ms)):
        return True
    budget = money(getattr(project, "estimated_budget", None))
    if budget <= 0:
        return False
    return money(getattr(project, "actual_cost", None)) > budget * threshold
