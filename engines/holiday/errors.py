"""
Rota Holiday Engine — Errors
==============================
"""

from __future__ import annotations


class HolidayEngineError(Exception):
    """Base for all holiday-entitlement failures."""


class NotFound(HolidayEngineError):
    pass


class StaffNotFound(NotFound):
    """
    The staff identifier resolves to no record.
    Fatal for the request; nothing is written.
    """

    def __init__(self, staff_id):
        self.staff_id = staff_id
        super().__init__(f"Staff member with ID {staff_id} not found.")


class InvalidRange(HolidayEngineError):
    """
    A date window whose end precedes its start, or that is shorter than
    the caller requires.

    Only strict helpers raise this. Recalculation treats such windows
    as zero-length instead.
    """

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Invalid range: {start} to {end}.")


class ConcurrencyConflict(HolidayEngineError):
    """A concurrent writer inserted the same entitlement row first."""

    def __init__(self, entitlement_id, detail: str = ""):
        self.entitlement_id = entitlement_id
        self.detail = detail
        message = f"Entitlement {entitlement_id} conflicted with a concurrent write."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class EntitlementRejected(HolidayEngineError):
    """The record store refused an entitlement row for a reason other than a key race."""

    def __init__(self, entitlement_id, detail: str = ""):
        self.entitlement_id = entitlement_id
        self.detail = detail
        message = f"Entitlement {entitlement_id} rejected by the record store."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
