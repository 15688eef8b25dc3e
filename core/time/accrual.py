"""
Rota Core Time — Accrual Year
===============================
The statutory holiday year over which entitlement is earned and reset.

Default rule (UK): 6 April to 5 April.
A reference date before 6 April belongs to the year that started the
previous 6 April.

The resolver is a process-wide lookup. An optional flag source can
override the default: when the business flags a financial-year-end day,
the active year starts the day after the latest flagged day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from typing import Callable, Optional

from core.time.clock import Clock, get_default_clock, local_today
from core.time.temporal import DateWindow, add_years

logger = logging.getLogger("rota.time")


DEFAULT_YEAR_START_MONTH = 4
DEFAULT_YEAR_START_DAY = 6


@dataclass(frozen=True)
class AccrualYear:
    """Closed [start, end] accrual window."""

    start: date
    end: date

    @property
    def window(self) -> DateWindow:
        return DateWindow(self.start, self.end)

    @classmethod
    def starting(cls, start: date) -> "AccrualYear":
        """The year beginning on `start` and ending the day before its anniversary."""
        return cls(start=start, end=add_years(start, 1) - timedelta(days=1))

    def following(self) -> "AccrualYear":
        return AccrualYear.starting(self.end + timedelta(days=1))


def resolve_accrual_year(
    reference: date,
    *,
    start_month: int = DEFAULT_YEAR_START_MONTH,
    start_day: int = DEFAULT_YEAR_START_DAY,
) -> AccrualYear:
    """Accrual year containing `reference`."""
    anchor = date(reference.year, start_month, start_day)
    if reference < anchor:
        anchor = date(reference.year - 1, start_month, start_day)
    return AccrualYear.starting(anchor)


class AccrualYearResolver:
    """
    Resolves "the currently active accrual year".

    Args:
        tz:          Zone in which "today" is evaluated.
        clock:       Injected clock; defaults to the process default clock.
        flag_source: Optional callable returning the latest flagged
                     financial-year-end date, or None.
    """

    def __init__(
        self,
        *,
        tz: tzinfo,
        clock: Optional[Clock] = None,
        flag_source: Optional[Callable[[], Optional[date]]] = None,
        start_month: int = DEFAULT_YEAR_START_MONTH,
        start_day: int = DEFAULT_YEAR_START_DAY,
    ) -> None:
        self._tz = tz
        self._clock = clock
        self._flag_source = flag_source
        self._start_month = start_month
        self._start_day = start_day

    def _today(self) -> date:
        clock = self._clock or get_default_clock()
        return local_today(clock, self._tz)

    def current(self) -> AccrualYear:
        """
        The flagged year wins only while it contains today; a stale or
        not-yet-started flagged year falls back to the calendar rule.
        """
        today = self._today()
        if self._flag_source is not None:
            flagged_end = self._flag_source()
            if flagged_end is not None:
                year = AccrualYear.starting(flagged_end + timedelta(days=1))
                if year.window.contains(today):
                    logger.debug(
                        f"Accrual year from financial-year-end flag "
                        f"{flagged_end}: {year.start} -> {year.end}"
                    )
                    return year
        return resolve_accrual_year(
            today,
            start_month=self._start_month,
            start_day=self._start_day,
        )
