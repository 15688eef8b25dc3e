"""
Rota Identity Store - Namespace Pin Service
===========================================
Pins the process namespace into the database and guards its rotation.

Rules:
- The first pin records whatever namespace the process runs under
- A later process with a different namespace is refused
- Rotation is an explicit, acknowledged, one-way step
- Rotation is refused while any deterministically keyed row exists
  (rekeying existing rows belongs to offline migration tooling)
"""

from __future__ import annotations

import logging
from typing import Optional

from django.apps import apps
from django.db import IntegrityError, transaction

from core.identity.errors import NamespaceLockedError
from core.identity.namespace import (
    IdentityNamespace,
    _reset_for_rotation,
    active_namespace,
)
from core.identity_store.models import PIN_SLOT, NamespacePin
from core.time.clock import Clock, get_default_clock

logger = logging.getLogger("rota.identity")


def _pinned_row(*, for_update: bool = False) -> Optional[NamespacePin]:
    qs = NamespacePin.objects.filter(slot=PIN_SLOT)
    if for_update:
        qs = qs.select_for_update()
    return qs.first()


def keyed_row_count() -> int:
    """
    Rows whose primary key was derived from a natural key.

    Models opt in by declaring an `identity_entity` class attribute.
    """
    total = 0
    for model in apps.get_models():
        if getattr(model, "identity_entity", None):
            total += model._default_manager.count()
    return total


def pinned_namespace() -> Optional[IdentityNamespace]:
    row = _pinned_row()
    return None if row is None else row.as_namespace()


@transaction.atomic
def pin_namespace(
    namespace: IdentityNamespace | None = None,
    *,
    clock: Clock | None = None,
) -> NamespacePin:
    """
    Record the namespace in force. Idempotent for the same namespace.

    Raises:
        NamespaceLockedError: A different namespace is already pinned.
    """
    ns = namespace or active_namespace()
    pin = _pinned_row(for_update=True)
    if pin is None:
        at = (clock or get_default_clock()).now_utc()
        try:
            with transaction.atomic():
                pin = NamespacePin.objects.create(
                    slot=PIN_SLOT,
                    version=ns.version,
                    namespace=ns.value,
                    pinned_at=at,
                )
        except IntegrityError:
            pin = _pinned_row(for_update=True)
            if pin is None:
                raise
        else:
            logger.info(f"Identity namespace pinned: {ns}")
            return pin

    if pin.as_namespace() != ns:
        raise NamespaceLockedError(
            f"database is pinned to {pin.as_namespace()}, process runs {ns}."
        )
    return pin


def verify_namespace_pin(namespace: IdentityNamespace | None = None) -> Optional[IdentityNamespace]:
    """
    Compare the configured namespace with the pin.

    Returns the pinned namespace, or None when nothing is pinned yet.

    Raises:
        NamespaceLockedError: Pin and configuration disagree.
    """
    ns = namespace or active_namespace()
    pinned = pinned_namespace()
    if pinned is not None and pinned != ns:
        raise NamespaceLockedError(
            f"database is pinned to {pinned}, process runs {ns}."
        )
    return pinned


@transaction.atomic
def rotate_namespace(
    new: IdentityNamespace,
    *,
    acknowledge_irreversible: bool = False,
    clock: Clock | None = None,
) -> NamespacePin:
    """
    Move the deployment to a new namespace version.

    Every refusal raises NamespaceLockedError:
    - acknowledge_irreversible was not set
    - new.version is not strictly greater than the current version
    - new.value equals the current namespace UUID
    - deterministically keyed rows already exist
    """
    if not acknowledge_irreversible:
        raise NamespaceLockedError(
            "namespace rotation requires acknowledge_irreversible=True."
        )

    pin = _pinned_row(for_update=True)
    current = pin.as_namespace() if pin is not None else active_namespace()

    if new.version <= current.version:
        raise NamespaceLockedError(
            f"rotation must increase the version (current {current.version}, "
            f"requested {new.version})."
        )
    if new.value == current.value:
        raise NamespaceLockedError(
            f"rotation to v{new.version} reuses namespace {current.value}."
        )

    existing = keyed_row_count()
    if existing:
        raise NamespaceLockedError(
            f"{existing} keyed rows exist under {current}; "
            "rekey them with migration tooling before rotating."
        )

    at = (clock or get_default_clock()).now_utc()
    if pin is None:
        pin = NamespacePin(slot=PIN_SLOT)
    pin.previous_version = current.version
    pin.previous_namespace = current.value
    pin.version = new.version
    pin.namespace = new.value
    pin.pinned_at = at
    pin.save()

    transaction.on_commit(lambda: _reset_for_rotation(new))
    logger.warning(f"Identity namespace rotation recorded: {current} -> {new}")
    return pin
