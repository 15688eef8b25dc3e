"""
Rota Holiday Engine — Entitlement Calculator
==============================================
Pure accrual math over a staff directory and a shift history.

Two regimes, selected by contracted hours:

Zero-hours (contracted hours 0 or unknown):
    days = worked_hours × accrual_rate ÷ hours_per_day × pro_rata
    Worked hours exclude HOLIDAY shifts. No cap.

Fixed hours:
    days = min(contracted ÷ hours_per_day × statutory_weeks, cap) × pro_rata
         + overtime_hours ÷ hours_per_day
    Overtime is neither capped nor pro-rated.

pro_rata = span(effective window) ÷ span(accrual year), clamped to [0, 1],
applied only when an employment bound is supplied. Spans are end − start
in days.

All arithmetic is Decimal. Results are never rounded and never negative.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from core.config.rules import DEFAULT_RULES, EntitlementRules
from core.time.accrual import AccrualYear
from core.time.temporal import DateWindow, effective_window, local_date, span_ratio
from engines.holiday.errors import InvalidRange, StaffNotFound

logger = logging.getLogger("rota.holiday")

_SECONDS_PER_HOUR = Decimal(3600)
ZERO = Decimal(0)


# ══════════════════════════════════════════════════════════════
# INPUT RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StaffSnapshot:
    id: uuid.UUID
    name: str
    contracted_hours: Optional[Decimal] = None
    employment_start: Optional[date] = None
    employment_end: Optional[date] = None
    is_active: bool = True

    @property
    def is_zero_hours(self) -> bool:
        return not self.contracted_hours


@dataclass(frozen=True)
class ShiftRecord:
    start: datetime
    end: datetime
    shift_type: str
    overtime: bool = False

    @property
    def hours(self) -> Decimal:
        """Duration in hours; an inverted shift counts as zero."""
        seconds = (self.end - self.start) / timedelta(seconds=1)
        if seconds <= 0:
            return ZERO
        return Decimal(str(seconds)) / _SECONDS_PER_HOUR


class StaffDirectory(Protocol):
    def get(self, staff_id: uuid.UUID) -> Optional[StaffSnapshot]: ...
    def by_name(self, name: str) -> Optional[StaffSnapshot]: ...
    def active_staff(self) -> list[StaffSnapshot]: ...


class ShiftHistory(Protocol):
    def shifts_for(
        self, staff_name: str, window: DateWindow, tz: tzinfo
    ) -> Iterable[ShiftRecord]:
        """Shifts whose start falls in `window` (may over-fetch)."""
        ...


# ══════════════════════════════════════════════════════════════
# PURE FORMULAS
# ══════════════════════════════════════════════════════════════

def require_valid_range(start: date, end: date, *, min_days: int = 0) -> DateWindow:
    """
    Strict window constructor for caller-supplied ranges.
    `min_days` is the least end - start difference accepted.
    """
    if (end - start).days < min_days:
        raise InvalidRange(start, end)
    return DateWindow(start, end)


def pro_rata_factor(
    year: DateWindow,
    emp_start: Optional[date],
    emp_end: Optional[date],
) -> Decimal:
    """1 when no employment bound is given, else the clamped day ratio."""
    if emp_start is None and emp_end is None:
        return Decimal(1)
    return span_ratio(effective_window(year, emp_start, emp_end), year)


def statutory_entitlement_days(
    contracted_hours: Decimal,
    emp_start: Optional[date],
    emp_end: Optional[date],
    year_start: date,
    year_end: Optional[date] = None,
    *,
    rules: EntitlementRules = DEFAULT_RULES,
) -> Decimal:
    """
    Fixed-hours base entitlement: 5.6 weeks of contracted days, capped,
    then pro-rated over the employment overlap with the year.
    """
    if year_end is None:
        year_end = AccrualYear.starting(year_start).end
    hours = Decimal(contracted_hours or 0)
    if hours <= 0:
        return ZERO
    full_year = min(rules.hours_to_days(hours) * rules.statutory_weeks, rules.statutory_cap_days)
    return full_year * pro_rata_factor(DateWindow(year_start, year_end), emp_start, emp_end)


# ══════════════════════════════════════════════════════════════
# CALCULATOR
# ══════════════════════════════════════════════════════════════

class EntitlementCalculator:
    """
    Computes entitlement days for one staff member and one accrual year.

    Args:
        staff:  Directory used to resolve staff ids to names.
        shifts: Shift history for worked/overtime hour totals.
        rules:  Accrual constants.
    """

    def __init__(
        self,
        staff: StaffDirectory,
        shifts: ShiftHistory,
        rules: EntitlementRules = DEFAULT_RULES,
    ) -> None:
        self._staff = staff
        self._shifts = shifts
        self._rules = rules

    @property
    def rules(self) -> EntitlementRules:
        return self._rules

    def _require_staff(self, staff_id: uuid.UUID) -> StaffSnapshot:
        staff = self._staff.get(staff_id)
        if staff is None:
            raise StaffNotFound(staff_id)
        return staff

    def shifts_in(self, staff_name: str, window: DateWindow) -> Iterable[ShiftRecord]:
        if window.is_empty:
            return
        tz = self._rules.tz
        for shift in self._shifts.shifts_for(staff_name, window, tz):
            if window.contains(local_date(shift.start, tz)):
                yield shift

    def worked_hours(self, staff_name: str, window: DateWindow) -> Decimal:
        holiday = self._rules.holiday_shift_type
        return sum(
            (s.hours for s in self.shifts_in(staff_name, window) if s.shift_type != holiday),
            ZERO,
        )

    def overtime_hours(self, staff_name: str, window: DateWindow) -> Decimal:
        return sum(
            (s.hours for s in self.shifts_in(staff_name, window) if s.overtime),
            ZERO,
        )

    def calc_zero_hour(
        self,
        staff_id: uuid.UUID,
        year_start: date,
        year_end: date,
        emp_start: Optional[date] = None,
        emp_end: Optional[date] = None,
    ) -> Decimal:
        staff = self._require_staff(staff_id)
        year = DateWindow(year_start, year_end)
        window = effective_window(year, emp_start, emp_end)

        worked = self.worked_hours(staff.name, window)
        base_days = self._rules.hours_to_days(worked * self._rules.accrual_rate)
        factor = pro_rata_factor(year, emp_start, emp_end)
        days = base_days * factor

        logger.debug(
            f"Zero-hours entitlement for {staff.name} {year_start}→{year_end}: "
            f"{worked}h worked, factor {factor} → {days}d"
        )
        return max(ZERO, days)

    def calc_fixed(
        self,
        staff_id: uuid.UUID,
        contracted_hours: Decimal,
        emp_start: Optional[date],
        emp_end: Optional[date],
        year_start: date,
        year_end: date,
    ) -> Decimal:
        staff = self._require_staff(staff_id)
        base_days = statutory_entitlement_days(
            contracted_hours, emp_start, emp_end, year_start, year_end,
            rules=self._rules,
        )
        overtime = self.overtime_hours(staff.name, DateWindow(year_start, year_end))
        days = base_days + self._rules.hours_to_days(overtime)

        logger.debug(
            f"Fixed-hours entitlement for {staff.name} {year_start}→{year_end}: "
            f"base {base_days}d + {overtime}h overtime → {days}d"
        )
        return max(ZERO, days)
