"""
Rota Identity — Errors
=======================
Identity generation itself never fails on data. These errors cover
programming mistakes and the namespace lock.
"""


class IdentityError(Exception):
    """Base error for identity operations."""
    pass


class InvalidEntityType(IdentityError):
    """Entity type tag is empty or not a string."""

    def __init__(self, entity_type):
        self.entity_type = entity_type
        super().__init__(
            f"Entity type tag must be a non-empty string, got {entity_type!r}."
        )


class NamespaceLockedError(IdentityError):
    """
    Raised when something attempts to change the identity namespace
    outside the explicit rotation path.

    Every identifier in the store is a projection of the namespace.
    Changing it silently would orphan all existing keys.
    """

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Identity namespace is locked: {detail}")
