"""
Tests for core.identity_store — namespace pin and guarded rotation.
"""

from __future__ import annotations

import uuid

import pytest

import core.identity.namespace as namespace_module
from core.identity import DEFAULT_NAMESPACE, IdentityNamespace, NamespaceLockedError
from core.identity.namespace import active_namespace
from core.identity_store.models import NamespacePin
from core.identity_store.service import (
    keyed_row_count,
    pin_namespace,
    pinned_namespace,
    rotate_namespace,
    verify_namespace_pin,
)
from engines.hr.service import create_staff

pytestmark = pytest.mark.django_db(transaction=True)

V2 = IdentityNamespace(version=2, value=uuid.UUID("0f4a8c3e-5d1b-4c8e-9a7f-2b6d1e3c4a5f"))


@pytest.fixture(autouse=True)
def default_namespace(monkeypatch):
    monkeypatch.setattr(namespace_module, "_active", DEFAULT_NAMESPACE)


class TestPin:
    def test_first_pin_records_namespace(self, fixed_clock):
        pin = pin_namespace()
        assert pin.version == 1
        assert pin.namespace == DEFAULT_NAMESPACE.value
        assert pin.pinned_at == fixed_clock.now_utc()
        assert pinned_namespace() == DEFAULT_NAMESPACE

    def test_pin_is_idempotent(self, fixed_clock):
        pin_namespace()
        pin_namespace()
        assert NamespacePin.objects.count() == 1

    def test_pin_refuses_other_namespace(self, fixed_clock):
        pin_namespace()
        with pytest.raises(NamespaceLockedError, match="pinned to"):
            pin_namespace(V2)

    def test_verify_without_pin(self):
        assert verify_namespace_pin() is None

    def test_verify_mismatch(self, fixed_clock):
        pin_namespace(V2)
        with pytest.raises(NamespaceLockedError):
            verify_namespace_pin(DEFAULT_NAMESPACE)


class TestRotation:
    def test_requires_acknowledgement(self):
        with pytest.raises(NamespaceLockedError, match="acknowledge_irreversible"):
            rotate_namespace(V2)

    def test_requires_greater_version(self, fixed_clock):
        pin_namespace(V2)
        lower = IdentityNamespace(version=2, value=uuid.uuid4())
        with pytest.raises(NamespaceLockedError, match="increase the version"):
            rotate_namespace(lower, acknowledge_irreversible=True)

    def test_requires_new_uuid(self):
        same = IdentityNamespace(version=5, value=DEFAULT_NAMESPACE.value)
        with pytest.raises(NamespaceLockedError, match="reuses"):
            rotate_namespace(same, acknowledge_irreversible=True)

    def test_refused_while_keyed_rows_exist(self, fixed_clock):
        create_staff(name="Alice", contracted_hours=0)
        assert keyed_row_count() > 0
        with pytest.raises(NamespaceLockedError, match="keyed rows exist"):
            rotate_namespace(V2, acknowledge_irreversible=True)
        assert active_namespace() == DEFAULT_NAMESPACE

    def test_rotation_on_empty_store(self, fixed_clock):
        pin_namespace()
        pin = rotate_namespace(V2, acknowledge_irreversible=True)
        assert pin.version == 2
        assert pin.previous_version == 1
        assert pin.previous_namespace == DEFAULT_NAMESPACE.value
        assert pinned_namespace() == V2
        assert active_namespace() == V2
