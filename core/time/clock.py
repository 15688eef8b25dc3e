"""
Rota Core Time — Explicit Clock Protocol
==========================================
Doctrine: NO datetime.now() inside engine logic.
Time is injected via the Clock protocol so recalculation,
accrual-year resolution and row timestamps stay testable.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Protocol


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Production clock — real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a fixed timestamp.

    Usage:
        clock = FixedClock(datetime(2025, 6, 1, tzinfo=timezone.utc))
        assert clock.now_utc().year == 2025
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        """Advance the fixed time (useful for multi-step test scenarios)."""
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)


# ══════════════════════════════════════════════════════════════
# DEFAULT CLOCK (infrastructure use only)
# ══════════════════════════════════════════════════════════════

_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    """Override the default clock (testing only)."""
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    """Get the current default clock."""
    return _default_clock


def now_utc() -> datetime:
    """Convenience: get current UTC time from default clock."""
    return _default_clock.now_utc()


def local_today(clock: Clock, tz: tzinfo) -> date:
    """Calendar date of the clock's instant in the given zone."""
    return clock.now_utc().astimezone(tz).date()
