"""
Shared fixtures: a fixed clock inside the 2025/26 accrual year and a
fresh holiday service per test.
"""

from datetime import datetime, timezone

import pytest

from core.time.clock import FixedClock, get_default_clock, set_default_clock

# 13:00 Europe/London (BST), inside 2025-04-06 → 2026-04-05
CLOCK_START = datetime(2025, 9, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    original = get_default_clock()
    clock = FixedClock(CLOCK_START)
    set_default_clock(clock)
    try:
        yield clock
    finally:
        set_default_clock(original)


@pytest.fixture(autouse=True)
def _fresh_holiday_service():
    yield
    from engines.holiday.wiring import set_service
    set_service(None)
