"""
Rota Event Bus — Row Change Envelope
======================================
A row mutation observed on the record store, expressed as data.

The store's change hook produces one RowChange per insert/update/delete
with before/after snapshots. Handlers receive the envelope and nothing
else, so they can be exercised without a live store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


class ChangeOperation:
    """Row operation kinds."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    ALL = frozenset({"INSERT", "UPDATE", "DELETE"})


def _freeze(snapshot: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    if snapshot is None:
        return None
    return MappingProxyType(dict(snapshot))


@dataclass(frozen=True)
class RowChange:
    """
    One observed row mutation.

    Fields:
        event_type: engine.domain.action routing key (e.g. 'hr.shift.changed').
        operation:  INSERT | UPDATE | DELETE.
        before:     Snapshot before the write (None for INSERT).
        after:      Snapshot after the write (None for DELETE).
        overrides:  Values the writer supplied alongside the row
                    (e.g. an employment end date set in the same call).
    """

    event_type: str
    operation: str
    before: Optional[Mapping[str, Any]] = None
    after: Optional[Mapping[str, Any]] = None
    overrides: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.operation not in ChangeOperation.ALL:
            raise ValueError(
                f"operation '{self.operation}' not valid. "
                f"Must be one of: {sorted(ChangeOperation.ALL)}"
            )
        if self.operation == ChangeOperation.INSERT and self.after is None:
            raise ValueError("INSERT requires an after snapshot.")
        if self.operation == ChangeOperation.DELETE and self.before is None:
            raise ValueError("DELETE requires a before snapshot.")
        if self.operation == ChangeOperation.UPDATE and (
            self.before is None or self.after is None
        ):
            raise ValueError("UPDATE requires before and after snapshots.")
        object.__setattr__(self, "before", _freeze(self.before))
        object.__setattr__(self, "after", _freeze(self.after))
        object.__setattr__(self, "overrides", _freeze(self.overrides))

    def old(self, name: str, default: Any = None) -> Any:
        return default if self.before is None else self.before.get(name, default)

    def new(self, name: str, default: Any = None) -> Any:
        return default if self.after is None else self.after.get(name, default)

    def changed(self, name: str) -> bool:
        """True if the field differs between snapshots (None-aware)."""
        if self.operation != ChangeOperation.UPDATE:
            return True
        return self.old(name) != self.new(name)

    @property
    def current(self) -> Mapping[str, Any]:
        """After snapshot if present, else before."""
        return self.after if self.after is not None else self.before
