"""
Rota Holiday Engine — Public API
==================================
    identify(entity_type, *fields)             → deterministic UUID
    calc_zero_hour(staff_id, ys, ye, es, ee)   → entitlement days
    calc_fixed(staff_id, hours, es, ee, ys, ye) → entitlement days
    recalculate(staff_id, employment_end_override=None)
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction

from core.identity.generator import identify
from engines.holiday.upserter import EntitlementValues
from engines.holiday.wiring import get_service


def calc_zero_hour(
    staff_id: uuid.UUID,
    year_start: date,
    year_end: date,
    emp_start: Optional[date] = None,
    emp_end: Optional[date] = None,
) -> Decimal:
    return get_service().calculator.calc_zero_hour(
        staff_id, year_start, year_end, emp_start, emp_end,
    )


def calc_fixed(
    staff_id: uuid.UUID,
    contracted_hours: Decimal,
    emp_start: Optional[date],
    emp_end: Optional[date],
    year_start: date,
    year_end: date,
) -> Decimal:
    return get_service().calculator.calc_fixed(
        staff_id, contracted_hours, emp_start, emp_end, year_start, year_end,
    )


@transaction.atomic
def recalculate(
    staff_id: uuid.UUID,
    employment_end_override: Optional[date] = None,
) -> EntitlementValues:
    return get_service().recalculate(staff_id, employment_end_override)


__all__ = [
    "identify",
    "calc_zero_hour",
    "calc_fixed",
    "recalculate",
]
