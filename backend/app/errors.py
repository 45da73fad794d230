# backend/app/errors.py
from __future__ import annotations


class FinanceError(Exception):
    """Base class for errors raised by the financial rollup layer."""


class ScopeNotFound(FinanceError):
    """
    The requested scope (building / project / milestone) does not exist inside
    the caller's access scope.

    Distinct from an empty period: an empty period yields zeroed metrics, an
    unknown scope raises this.
    """

    def __init__(self, scope: str, scope_id: int):
        self.scope = str(scope)
        self.scope_id = int(scope_id)
        super().__init__(f"{self.scope} not found: id={self.scope_id}")


class InvalidPeriod(FinanceError, ValueError):
    """Bad period bounds or an unknown snapshot metric type."""
