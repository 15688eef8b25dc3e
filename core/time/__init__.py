"""
Rota Core Time — Public API
=============================
Explicit clock protocol, date windows and accrual-year resolution.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.accrual import (
    AccrualYear,
    AccrualYearResolver,
    resolve_accrual_year,
)
from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    local_today,
    now_utc,
    set_default_clock,
)
from core.time.temporal import (
    DateWindow,
    add_years,
    effective_window,
    local_date,
    span_ratio,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "local_today",
    "DateWindow",
    "effective_window",
    "span_ratio",
    "local_date",
    "add_years",
    "AccrualYear",
    "AccrualYearResolver",
    "resolve_accrual_year",
]
