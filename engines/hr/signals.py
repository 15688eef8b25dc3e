"""
Rota HR Record Store - Change Hooks
===================================
Turns Django model signals into RowChange envelopes and dispatches them
synchronously on the HR change registry.

Flow:
    pre_save    → capture before-image (fresh read by pk)
    post_save   → INSERT or UPDATE envelope
    post_delete → DELETE envelope

Dispatch runs inside transaction.atomic(): a failing subscriber rolls
back the write that triggered it.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from core.events.change import ChangeOperation, RowChange
from core.events.dispatcher import dispatch
from core.events.registry import SubscriberRegistry
from engines.hr.models import Shift, Staff

logger = logging.getLogger("rota.events")


SHIFT_CHANGED = "hr.shift.changed"
STAFF_CHANGED = "hr.staff.changed"

EVENT_TYPE_BY_MODEL = {
    Shift: SHIFT_CHANGED,
    Staff: STAFF_CHANGED,
}

change_registry = SubscriberRegistry()

_BEFORE_ATTR = "_rota_before_image"
_OVERRIDES_ATTR = "_rota_change_overrides"

_muted = threading.local()


# ══════════════════════════════════════════════════════════════
# WRITER HELPERS
# ══════════════════════════════════════════════════════════════

def attach_overrides(instance, **overrides: Any) -> None:
    """Values published with the next change of `instance`."""
    setattr(instance, _OVERRIDES_ATTR, dict(overrides))


@contextmanager
def muted_changes() -> Iterator[None]:
    """Suppress change dispatch on this thread (bulk removals)."""
    _muted.depth = getattr(_muted, "depth", 0) + 1
    try:
        yield
    finally:
        _muted.depth -= 1


def _is_muted() -> bool:
    return getattr(_muted, "depth", 0) > 0


def publish(change: RowChange) -> dict:
    connection = transaction.get_connection()
    if not connection.in_atomic_block:
        logger.warning(
            f"{change.event_type}/{change.operation} dispatched outside a "
            "transaction; use engines.hr.service for writes."
        )
    with transaction.atomic():
        return dispatch(change, change_registry)


def publish_update(sender, before: Mapping[str, Any], after: Mapping[str, Any]) -> dict:
    """Publish an UPDATE for a write made under muted_changes (e.g. a rekey)."""
    return publish(
        RowChange(
            event_type=EVENT_TYPE_BY_MODEL[sender],
            operation=ChangeOperation.UPDATE,
            before=before,
            after=after,
        )
    )


# ══════════════════════════════════════════════════════════════
# SIGNAL RECEIVERS
# ══════════════════════════════════════════════════════════════

def _fresh_snapshot(sender, pk) -> Optional[Mapping[str, Any]]:
    if pk is None:
        return None
    row = sender._default_manager.filter(pk=pk).first()
    return None if row is None else row.snapshot()


@receiver(pre_save, sender=Shift)
@receiver(pre_save, sender=Staff)
def capture_before_image(sender, instance, raw=False, **kwargs):
    if raw or _is_muted():
        return
    # Models assign their pk in save(), so pk is set here for new rows too
    setattr(instance, _BEFORE_ATTR, _fresh_snapshot(sender, instance.pk))


@receiver(post_save, sender=Shift)
@receiver(post_save, sender=Staff)
def publish_saved_row(sender, instance, raw=False, **kwargs):
    if raw or _is_muted():
        return
    before = instance.__dict__.pop(_BEFORE_ATTR, None)
    overrides = instance.__dict__.pop(_OVERRIDES_ATTR, {})
    operation = ChangeOperation.INSERT if before is None else ChangeOperation.UPDATE
    publish(
        RowChange(
            event_type=EVENT_TYPE_BY_MODEL[sender],
            operation=operation,
            before=before,
            after=instance.snapshot(),
            overrides=overrides,
        )
    )


@receiver(post_delete, sender=Shift)
@receiver(post_delete, sender=Staff)
def publish_deleted_row(sender, instance, **kwargs):
    if _is_muted():
        return
    instance.__dict__.pop(_OVERRIDES_ATTR, None)
    publish(
        RowChange(
            event_type=EVENT_TYPE_BY_MODEL[sender],
            operation=ChangeOperation.DELETE,
            before=instance.snapshot(),
        )
    )
