# backend/app/domain/periods.py
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from ..errors import InvalidPeriod

DAILY = "DAILY"
MONTHLY = "MONTHLY"
METRIC_TYPES = (DAILY, MONTHLY)


def _as_datetime(v: Any) -> Optional[datetime]:
    if v is None:
        return None
    if isinstance(v, datetime):
        return v
    if isinstance(v, date):
        return datetime.combine(v, time.min)
    return datetime.fromisoformat(str(v))


def start_of_day(d: date | datetime) -> datetime:
    d = d.date() if isinstance(d, datetime) else d
    return datetime.combine(d, time.min)


def end_of_day(d: date | datetime) -> datetime:
    d = d.date() if isinstance(d, datetime) else d
    return datetime.combine(d, time.max)


def month_bounds(y: int, m: int) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(y, m)[1]
    return start_of_day(date(y, m, 1)), end_of_day(date(y, m, last_day))


@dataclass(frozen=True)
class Period:
    """Inclusive [start, end] window."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidPeriod(f"period start {self.start.isoformat()} is after end {self.end.isoformat()}")

    def contains(self, v: Any) -> bool:
        dt = _as_datetime(v)
        if dt is None:
            return False
        return self.start <= dt <= self.end

    def overlaps(self, start: Any, end: Any) -> bool:
        """Any overlap at all; open ends are unbounded."""
        s = _as_datetime(start) or datetime.min
        e = _as_datetime(end) or datetime.max
        return s <= self.end and e >= self.start

    @property
    def is_calendar_month(self) -> bool:
        ms, me = month_bounds(self.start.year, self.start.month)
        return self.start == ms and self.end == me

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def day_period(d: date | datetime) -> Period:
    return Period(start=start_of_day(d), end=end_of_day(d))


def month_period(d: date | datetime) -> Period:
    start, end = month_bounds(d.year, d.month)
    return Period(start=start, end=end)


def resolve_period(metric_type: str, d: date | datetime | None = None) -> Period:
    """DAILY -> that calendar day; MONTHLY -> the calendar month containing d."""
    mt = str(metric_type or "").strip().upper()
    d = d or datetime.utcnow()
    if mt == DAILY:
        return day_period(d)
    if mt == MONTHLY:
        return month_period(d)
    raise InvalidPeriod(f"unknown metric type: {metric_type!r}")


def current_month(now: Optional[datetime] = None) -> Period:
    return month_period(now or datetime.utcnow())


def _end_bound(end: Any) -> Optional[datetime]:
    # A bare date as an end bound means "through the end of that day".
    if isinstance(end, date) and not isinstance(end, datetime):
        return end_of_day(end)
    return _as_datetime(end)


def make_period(start: Any = None, end: Any = None, *, now: Optional[datetime] = None) -> Period:
    """
    Request-facing constructor. With neither bound, the current month.
    With only `end`, the window opens at the start of end's month; with only
    `start`, it closes at the end of the current month, or of start's month
    when start lies beyond it.
    """
    s = _as_datetime(start)
    e = _end_bound(end)
    if s is None and e is None:
        return current_month(now)
    if s is None:
        s = month_period(e).start
    if e is None:
        e = max(current_month(now).end, month_period(s).end)
    return Period(start=s, end=e)


@dataclass(frozen=True)
class DateRange:
    """Inclusive window where either bound may be open."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidPeriod(f"range start {self.start.isoformat()} is after end {self.end.isoformat()}")

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, v: Any) -> bool:
        dt = _as_datetime(v)
        if dt is None:
            return False
        if self.start is not None and dt < self.start:
            return False
        return self.end is None or dt <= self.end

    def to_dict(self) -> dict[str, Optional[str]]:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
        }


def make_range(start: Any = None, end: Any = None) -> Optional[DateRange]:
    """Filter window from optional request bounds; None when both are missing."""
    rng = DateRange(start=_as_datetime(start), end=_end_bound(end))
    return None if rng.is_open else rng


def _sub_month(dt: datetime) -> datetime:
    y, m = (dt.year - 1, 12) if dt.month == 1 else (dt.year, dt.month - 1)
    day = min(dt.day, calendar.monthrange(y, m)[1])
    return dt.replace(year=y, month=m, day=day)


def previous_period(p: Period) -> Period:
    """
    The comparison window for trends: the previous calendar month for a
    calendar-month window, otherwise both bounds shifted back one month.
    """
    if p.is_calendar_month:
        return month_period(_sub_month(p.start))
    return Period(start=_sub_month(p.start), end=_sub_month(p.end))


def previous_snapshot_date(metric_type: str, snapshot_date: datetime) -> datetime:
    mt = str(metric_type or "").strip().upper()
    if mt == DAILY:
        return start_of_day(snapshot_date) - timedelta(days=1)
    if mt == MONTHLY:
        return month_period(_sub_month(month_period(snapshot_date).start)).start
    raise InvalidPeriod(f"unknown metric type: {metric_type!r}")
