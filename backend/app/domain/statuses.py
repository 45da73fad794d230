# backend/app/domain/statuses.py
from __future__ import annotations

from typing import Any, Iterable

# Actualized sets: only these states mean money has definitely moved.
PAID = frozenset({"PAID"})
APPROVED = frozenset({"APPROVED"})
COMPLETED = frozenset({"COMPLETED"})

INVOICE_ACTUALIZED = PAID
QUOTATION_ACTUALIZED = APPROVED
PAYMENT_REQUEST_ACTUALIZED = PAID
ORDER_ACTUALIZED = COMPLETED

ACTIVE_ORDER = frozenset({"IN_PROGRESS", "ASSIGNED"})
ACTIVE_PROJECT = frozenset({"IN_PROGRESS", "PLANNING"})
IN_PROGRESS = frozenset({"IN_PROGRESS"})

ACTIVE_TENANT = frozenset({"ACTIVE"})
RENT_OVERDUE = frozenset({"OVERDUE"})
RENT_PARTIAL = frozenset({"PARTIAL"})

HIGH = "HIGH"
RISK_OPEN = frozenset({"OPEN"})
NEW_LEAD = frozenset({"NEW"})


def norm(status: Any) -> str:
    return str(status or "").strip().upper()


def is_in(status: Any, allowed: Iterable[str]) -> bool:
    return norm(status) in allowed


def only(rows: Iterable[Any], allowed: Iterable[str], *, attr: str = "status") -> list[Any]:
    allowed = frozenset(allowed)
    return [r for r in rows if is_in(getattr(r, attr, None), allowed)]


def count(rows: Iterable[Any], allowed: Iterable[str], *, attr: str = "status") -> int:
    return len(only(rows, allowed, attr=attr))
