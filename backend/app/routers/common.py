# backend/app/routers/common.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional

from fastapi import HTTPException

from ..domain.periods import Period, make_period
from ..errors import InvalidPeriod, ScopeNotFound

log = logging.getLogger("facility_finance.routers")

ROLLUP_FAILED = "Failed to compute financial metrics"


@contextmanager
def finance_errors(action: str, **extra) -> Iterator[None]:
    """
    Maps rollup-layer failures onto HTTP:
      ScopeNotFound -> 404, InvalidPeriod / ValueError -> 422,
      anything else -> logged, 500.
    HTTPException passes through untouched.
    """
    try:
        yield
    except HTTPException:
        raise
    except ScopeNotFound as e:
        raise HTTPException(status_code=404, detail=f"{e.scope} not found")
    except (InvalidPeriod, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception:
        log.exception("%s failed", action, extra=extra)
        raise HTTPException(status_code=500, detail=ROLLUP_FAILED)


def period_from_query(start: Optional[date], end: Optional[date]) -> Period:
    try:
        return make_period(start, end)
    except InvalidPeriod as e:
        raise HTTPException(status_code=422, detail=str(e))
