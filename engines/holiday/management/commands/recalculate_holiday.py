"""
Force an entitlement recompute for administrative corrections.

Usage:
    python manage.py recalculate_holiday --staff "Alice"
    python manage.py recalculate_holiday --all
    python manage.py recalculate_holiday --staff-id <uuid> --employment-end 2026-01-31
    python manage.py recalculate_holiday --all --year-start 2025-04-06 --year-end 2026-04-05
"""

from __future__ import annotations

import uuid
from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.time.accrual import AccrualYear
from engines.holiday.calculator import require_valid_range
from engines.holiday.errors import HolidayEngineError
from engines.holiday.wiring import get_service


def _parse_date(value: str, *, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise CommandError(f"{option} must be YYYY-MM-DD, got '{value}'.") from exc


class Command(BaseCommand):
    help = "Recalculate holiday entitlement for one or all staff members."

    def add_arguments(self, parser):
        target = parser.add_mutually_exclusive_group(required=True)
        target.add_argument("--staff", help="Staff name.")
        target.add_argument("--staff-id", help="Staff identifier (UUID).")
        target.add_argument("--all", action="store_true", help="Every active staff member.")
        parser.add_argument("--employment-end", help="Employment end override (YYYY-MM-DD).")
        parser.add_argument("--year-start", help="Accrual year start (YYYY-MM-DD).")
        parser.add_argument("--year-end", help="Accrual year end (YYYY-MM-DD).")
        parser.add_argument("--refresh-usage", action="store_true", help="Also recount holiday taken.")

    def _year(self, options) -> AccrualYear | None:
        start, end = options.get("year_start"), options.get("year_end")
        if not start and not end:
            return None
        if not (start and end):
            raise CommandError("--year-start and --year-end must be given together.")
        try:
            window = require_valid_range(
                _parse_date(start, option="--year-start"),
                _parse_date(end, option="--year-end"),
                min_days=1,
            )
        except HolidayEngineError as exc:
            raise CommandError(str(exc)) from exc
        return AccrualYear(start=window.start, end=window.end)

    def _targets(self, service, options) -> list:
        if options["all"]:
            return [s.id for s in service.staff.active_staff()]
        if options.get("staff"):
            staff = service.staff.by_name(options["staff"])
            if staff is None:
                raise CommandError(f"Unknown staff member '{options['staff']}'.")
            return [staff.id]
        try:
            return [uuid.UUID(options["staff_id"])]
        except ValueError as exc:
            raise CommandError(f"--staff-id is not a UUID: {options['staff_id']}") from exc

    def handle(self, *args, **options):
        service = get_service()
        year = self._year(options)
        override = None
        if options.get("employment_end"):
            override = _parse_date(options["employment_end"], option="--employment-end")

        for staff_id in self._targets(service, options):
            try:
                with transaction.atomic():
                    values = service.recalculate(staff_id, override, year=year)
                    if options["refresh_usage"]:
                        service.refresh_usage(staff_id, year=year)
            except HolidayEngineError as exc:
                raise CommandError(str(exc)) from exc
            self.stdout.write(
                f"{values.staff_name}: {values.entitlement_days} days "
                f"({values.year_start} → {values.year_end})"
            )
