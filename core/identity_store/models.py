"""
Rota Identity Store - Namespace Pin
===================================
Single-row table recording which identity namespace keyed this database.

Every deterministic primary key in the store was derived under the pinned
namespace. A process configured with a different namespace would compute
different keys for the same natural keys, so startup compares the two.
"""

from __future__ import annotations

import uuid

from django.db import models

from core.identity.namespace import IdentityNamespace

PIN_SLOT = 1


class NamespacePin(models.Model):
    slot = models.PositiveSmallIntegerField(primary_key=True, default=PIN_SLOT, editable=False)
    version = models.PositiveIntegerField()
    namespace = models.UUIDField()
    previous_version = models.PositiveIntegerField(null=True, blank=True)
    previous_namespace = models.UUIDField(null=True, blank=True)
    pinned_at = models.DateTimeField()

    class Meta:
        db_table = "rota_identity_namespace_pin"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(slot=PIN_SLOT),
                name="ck_namespace_pin_single_row",
            ),
        ]

    def as_namespace(self) -> IdentityNamespace:
        return IdentityNamespace(version=self.version, value=uuid.UUID(str(self.namespace)))

    def __str__(self) -> str:
        return f"v{self.version}:{self.namespace}"
