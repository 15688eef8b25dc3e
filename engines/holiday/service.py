"""
Rota Holiday Engine — Recalculation Service
=============================================
Orchestrates one entitlement recompute:

    staff lookup → accrual year → pro-rata anchor → calculator → upserter

Also owns holiday-usage refresh and accrual-year renewal, and applies
policy outcomes produced from row changes.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from core.config.rules import DEFAULT_RULES, EntitlementRules
from core.time.accrual import AccrualYear, AccrualYearResolver
from engines.holiday.calculator import (
    ZERO,
    EntitlementCalculator,
    ShiftHistory,
    StaffDirectory,
    StaffSnapshot,
)
from engines.holiday.errors import StaffNotFound
from engines.holiday.policy import PolicyOutcome, resolve_prorata_anchor
from engines.holiday.upserter import EntitlementValues, UpsertResult

logger = logging.getLogger("rota.holiday")


class ChangeRequestSource(Protocol):
    def contracted_hours_changes(self, staff_id, year: AccrualYear, tz) -> Iterable: ...


class EntitlementWriter(Protocol):
    def lock_staff(self, staff_id) -> None: ...
    def upsert(self, values: EntitlementValues) -> UpsertResult: ...
    def record_usage(self, staff_id, year_start, *, days_taken, hours_taken) -> bool: ...
    def year_has_rows(self, year_start: date) -> bool: ...


class HolidayEntitlementService:
    def __init__(
        self,
        *,
        staff: StaffDirectory,
        shifts: ShiftHistory,
        change_requests: ChangeRequestSource,
        writer: EntitlementWriter,
        years: AccrualYearResolver,
        rules: EntitlementRules = DEFAULT_RULES,
    ) -> None:
        self.staff = staff
        self.shifts = shifts
        self.change_requests = change_requests
        self.writer = writer
        self.years = years
        self.rules = rules
        self.calculator = EntitlementCalculator(staff, shifts, rules)

    def _require_staff(self, staff_id: uuid.UUID) -> StaffSnapshot:
        staff = self.staff.get(staff_id)
        if staff is None:
            raise StaffNotFound(staff_id)
        return staff

    # ══════════════════════════════════════════════════════════
    # RECOMPUTE
    # ══════════════════════════════════════════════════════════

    def compute(
        self,
        staff_id: uuid.UUID,
        employment_end_override: Optional[date] = None,
        *,
        year: Optional[AccrualYear] = None,
    ) -> EntitlementValues:
        """Entitlement for the staff member and year, without writing."""
        staff = self._require_staff(staff_id)
        year = year or self.years.current()
        tz = self.rules.tz

        anchor = resolve_prorata_anchor(
            self.change_requests.contracted_hours_changes(staff.id, year, tz),
            year,
            staff.employment_start,
            tz,
        )
        emp_end = employment_end_override or staff.employment_end

        if staff.is_zero_hours:
            days = self.calculator.calc_zero_hour(
                staff.id, year.start, year.end, anchor, emp_end,
            )
        else:
            days = self.calculator.calc_fixed(
                staff.id, staff.contracted_hours, anchor, emp_end,
                year.start, year.end,
            )

        return EntitlementValues(
            staff_id=staff.id,
            staff_name=staff.name,
            year_start=year.start,
            year_end=year.end,
            contracted_hours=staff.contracted_hours or ZERO,
            entitlement_days=days,
            entitlement_hours=self.rules.days_to_hours(days),
            is_zero_hours=staff.is_zero_hours,
        )

    def recalculate(
        self,
        staff_id: uuid.UUID,
        employment_end_override: Optional[date] = None,
        *,
        year: Optional[AccrualYear] = None,
    ) -> EntitlementValues:
        """
        Recompute and store entitlement for the active (or given) year.

        Raises:
            StaffNotFound:       Unknown staff id; nothing is written.
            ConcurrencyConflict: Retries exhausted.
        """
        self.writer.lock_staff(staff_id)
        values = self.compute(staff_id, employment_end_override, year=year)
        result = self.writer.upsert(values)
        if not result.changed:
            logger.debug(
                f"Entitlement unchanged for {values.staff_name} {values.year_start}"
            )
        return values

    # ══════════════════════════════════════════════════════════
    # USAGE & RENEWAL
    # ══════════════════════════════════════════════════════════

    def usage(self, staff: StaffSnapshot, year: AccrualYear) -> tuple[Decimal, Decimal]:
        """(days taken, hours taken) from HOLIDAY shifts starting in the year."""
        holiday = self.rules.holiday_shift_type
        taken = [
            s for s in self.calculator.shifts_in(staff.name, year.window)
            if s.shift_type == holiday
        ]
        return Decimal(len(taken)), sum((s.hours for s in taken), ZERO)

    def refresh_usage(
        self,
        staff_id: uuid.UUID,
        *,
        year: Optional[AccrualYear] = None,
    ) -> bool:
        self.writer.lock_staff(staff_id)
        staff = self._require_staff(staff_id)
        year = year or self.years.current()
        days, hours = self.usage(staff, year)
        changed = self.writer.record_usage(
            staff.id, year.start, days_taken=days, hours_taken=hours,
        )
        if changed:
            logger.info(
                f"Holiday usage for {staff.name} {year.start}: {days}d / {hours}h"
            )
        return changed

    def renew_year(self, year_end_date: date) -> int:
        """
        Create entitlement rows for every active staff member for the
        year starting the day after `year_end_date`. Runs once per year:
        if any row already exists for that year nothing is created.
        """
        year = AccrualYear.starting(year_end_date + timedelta(days=1))
        if self.writer.year_has_rows(year.start):
            logger.debug(f"Accrual year {year.start} already renewed.")
            return 0

        created = 0
        for staff in self.staff.active_staff():
            result = self.writer.upsert(self.compute(staff.id, year=year))
            created += int(result.created)

        logger.info(f"Accrual year {year.start}→{year.end} renewed for {created} staff.")
        return created

    # ══════════════════════════════════════════════════════════
    # POLICY OUTCOMES
    # ══════════════════════════════════════════════════════════

    def apply(self, outcome: PolicyOutcome) -> None:
        for decision in outcome.decisions:
            if decision.recompute:
                logger.info(
                    f"Recalculating entitlement for {decision.staff_name}: {decision.reason}"
                )
                self.recalculate(decision.staff_id, decision.employment_end_override)
            if decision.refresh_usage:
                self.refresh_usage(decision.staff_id)
        if outcome.renew_after is not None:
            self.renew_year(outcome.renew_after)
