"""
Rota Core Time — Temporal Helpers
===================================
Pure functions for date-window logic.
All functions take explicit arguments — no hidden clock access.

Date windows here are tolerant: an inverted window (end before start)
is a zero-length window, not an error. Upstream HR data is allowed to be
inconsistent; entitlement math must stay defined.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import Decimal
from typing import Optional


# ══════════════════════════════════════════════════════════════
# DATE WINDOW — closed calendar interval [start, end]
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DateWindow:
    """
    A closed calendar interval [start, end].

    No ordering invariant: an inverted window is simply empty.
    """

    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    @property
    def span_days(self) -> int:
        """end - start in days, never negative (0 for inverted windows)."""
        return max(0, (self.end - self.start).days)

    def contains(self, day: date) -> bool:
        """Inclusive membership test."""
        return self.start <= day <= self.end

    def clamp_to(self, outer: "DateWindow") -> "DateWindow":
        """Intersection with `outer`; may come back inverted (empty)."""
        return DateWindow(
            start=max(self.start, outer.start),
            end=min(self.end, outer.end),
        )

    def bounds(self, tz: tzinfo) -> tuple[datetime, datetime]:
        """
        Aware half-open datetime bounds [start 00:00, end+1 00:00) in `tz`.
        Suitable for range queries on timestamp columns.
        """
        lower = datetime.combine(self.start, time.min, tzinfo=tz)
        upper = datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=tz)
        return lower, upper


# ══════════════════════════════════════════════════════════════
# PURE TEMPORAL FUNCTIONS
# ══════════════════════════════════════════════════════════════

def effective_window(
    outer: DateWindow,
    start: Optional[date],
    end: Optional[date],
) -> DateWindow:
    """
    Intersect an optional [start, end] with `outer`.
    Missing bounds default to the outer bounds.
    """
    return DateWindow(
        start=start if start is not None else outer.start,
        end=end if end is not None else outer.end,
    ).clamp_to(outer)


def span_ratio(part: DateWindow, whole: DateWindow) -> Decimal:
    """
    part.span_days / whole.span_days clamped to [0, 1].
    A zero-length whole yields 0.
    """
    total = whole.span_days
    if total <= 0:
        return Decimal(0)
    ratio = Decimal(part.span_days) / Decimal(total)
    return max(Decimal(0), min(Decimal(1), ratio))


def local_date(dt: datetime, tz: tzinfo) -> date:
    """Calendar date of an instant in `tz` (naive values taken as-is)."""
    if dt.tzinfo is None:
        return dt.date()
    return dt.astimezone(tz).date()


def add_years(day: date, years: int) -> date:
    """Same month/day `years` later; 29 Feb falls back to 28 Feb."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)
