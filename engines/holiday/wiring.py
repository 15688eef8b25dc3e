"""
Rota Holiday Engine — Default Wiring
======================================
Builds the process-wide recalculation service over the Django record
store. Tests may install their own with set_service().
"""

from __future__ import annotations

import threading
from typing import Optional

from core.config.rules import EntitlementRules, load_rules
from core.time.accrual import AccrualYearResolver
from core.time.clock import Clock
from engines.holiday.repository import (
    DjangoChangeRequestSource,
    DjangoShiftHistory,
    DjangoStaffDirectory,
)
from engines.holiday.service import HolidayEntitlementService
from engines.holiday.upserter import DjangoEntitlementUpserter

_lock = threading.Lock()
_service: Optional[HolidayEntitlementService] = None


def build_default_service(
    *,
    clock: Clock | None = None,
    rules: EntitlementRules | None = None,
) -> HolidayEntitlementService:
    rules = rules or load_rules()
    shifts = DjangoShiftHistory()
    years = AccrualYearResolver(
        tz=rules.tz,
        clock=clock,
        flag_source=lambda: shifts.latest_financial_year_end(rules.tz),
        start_month=rules.year_start_month,
        start_day=rules.year_start_day,
    )
    return HolidayEntitlementService(
        staff=DjangoStaffDirectory(),
        shifts=shifts,
        change_requests=DjangoChangeRequestSource(),
        writer=DjangoEntitlementUpserter(clock=clock),
        years=years,
        rules=rules,
    )


def get_service() -> HolidayEntitlementService:
    global _service
    if _service is None:
        with _lock:
            if _service is None:
                _service = build_default_service()
    return _service


def set_service(service: Optional[HolidayEntitlementService]) -> None:
    """Install a service (None resets to the lazily built default)."""
    global _service
    with _lock:
        _service = service
