"""
Rota Holiday Engine — Record Store Adapters
=============================================
Read-side adapters over the HR models for the calculator, policy and
accrual-year resolver. Read only; writes go through the upserter.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

from core.time.accrual import AccrualYear
from core.time.temporal import DateWindow, local_date
from engines.hr.models import CONTRACTED_HOURS_CHANGE, ChangeRequest, Shift, Staff
from engines.holiday.calculator import ShiftRecord, StaffSnapshot


def _snapshot(staff: Staff) -> StaffSnapshot:
    return StaffSnapshot(
        id=staff.pk,
        name=staff.name,
        contracted_hours=staff.contracted_hours,
        employment_start=staff.employment_start_date,
        employment_end=staff.employment_end_date,
        is_active=staff.is_active,
    )


class DjangoStaffDirectory:
    def get(self, staff_id: uuid.UUID) -> Optional[StaffSnapshot]:
        staff = Staff.objects.filter(pk=staff_id).first()
        return None if staff is None else _snapshot(staff)

    def by_name(self, name: str) -> Optional[StaffSnapshot]:
        if not name:
            return None
        staff = Staff.objects.filter(name=name).first()
        return None if staff is None else _snapshot(staff)

    def active_staff(self) -> list[StaffSnapshot]:
        return [_snapshot(s) for s in Staff.objects.filter(is_active=True).order_by("name")]


class DjangoShiftHistory:
    def _query(self, staff_name: str, window: DateWindow, tz: tzinfo):
        lower, upper = window.bounds(tz)
        return Shift.objects.filter(
            staff_name=staff_name,
            start__gte=lower,
            start__lt=upper,
        ).order_by("start")

    def shifts_for(
        self, staff_name: str, window: DateWindow, tz: tzinfo
    ) -> Iterable[ShiftRecord]:
        if window.is_empty:
            return []
        return [
            ShiftRecord(
                start=row.start,
                end=row.end,
                shift_type=row.shift_type,
                overtime=row.overtime,
            )
            for row in self._query(staff_name, window, tz)
        ]

    def latest_financial_year_end(self, tz: tzinfo) -> Optional[date]:
        """Local date of the latest shift flagged as financial year end."""
        start = (
            Shift.objects.filter(financial_year_end=True)
            .order_by("-start")
            .values_list("start", flat=True)
            .first()
        )
        return None if start is None else local_date(start, tz)


class DjangoChangeRequestSource:
    def contracted_hours_changes(
        self, staff_id: uuid.UUID, year: AccrualYear, tz: tzinfo
    ) -> Iterable[datetime]:
        """
        Change timestamps inside the year, ascending.

        The queryset is lazy and re-iterable; callers take the first item.
        """
        lower, upper = year.window.bounds(tz)
        return (
            ChangeRequest.objects.filter(
                staff_id=staff_id,
                change_type=CONTRACTED_HOURS_CHANGE,
                changed_at__gte=lower,
                changed_at__lt=upper,
            )
            .order_by("changed_at", "id")
            .values_list("changed_at", flat=True)
        )
