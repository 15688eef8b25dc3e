"""
Rota Identity — Versioned Namespace
====================================
Every deterministic identifier is a UUIDv5 under ONE namespace UUID.

Rules:
- The namespace is injected once per process (from Django settings)
- Once configured it cannot be replaced for the life of the process
- The namespace carries a version; rotation must strictly increase it
- Rotation of persisted data goes through core.identity_store.service

Same namespace + same natural key = same identifier, on every replica.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from core.identity.errors import NamespaceLockedError

logger = logging.getLogger("rota.identity")


DEFAULT_NAMESPACE_UUID = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")
DEFAULT_NAMESPACE_VERSION = 1


@dataclass(frozen=True)
class IdentityNamespace:
    """Namespace UUID plus the version it was introduced under."""

    version: int
    value: uuid.UUID

    def __post_init__(self) -> None:
        if not isinstance(self.version, int) or isinstance(self.version, bool):
            raise ValueError("Namespace version must be an integer.")
        if self.version < 1:
            raise ValueError("Namespace version must be >= 1.")
        if not isinstance(self.value, uuid.UUID):
            raise ValueError("Namespace value must be a uuid.UUID.")

    @classmethod
    def from_setting(cls, raw: Mapping[str, Any] | None) -> "IdentityNamespace":
        """Build from the ROTA_IDENTITY_NAMESPACE settings mapping."""
        if raw is None:
            return DEFAULT_NAMESPACE
        try:
            version = int(raw["version"])
            value = uuid.UUID(str(raw["uuid"]).strip())
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(
                "ROTA_IDENTITY_NAMESPACE must provide 'version' and 'uuid'."
            ) from exc
        return cls(version=version, value=value)

    def __str__(self) -> str:
        return f"v{self.version}:{self.value}"


DEFAULT_NAMESPACE = IdentityNamespace(
    version=DEFAULT_NAMESPACE_VERSION,
    value=DEFAULT_NAMESPACE_UUID,
)


_lock = threading.Lock()
_active: IdentityNamespace | None = None


def configure_namespace(namespace: IdentityNamespace) -> IdentityNamespace:
    """
    Install the process-wide namespace.

    Re-configuring with the identical namespace is a no-op.
    Any other value raises NamespaceLockedError.
    """
    global _active
    with _lock:
        if _active is None:
            _active = namespace
            logger.info(f"Identity namespace configured: {namespace}")
            return namespace
        if _active != namespace:
            raise NamespaceLockedError(
                f"process already runs under {_active}; refusing {namespace}. "
                "Use the namespace rotation migration instead."
            )
        return _active


def _load_from_settings() -> IdentityNamespace:
    from django.conf import settings

    return IdentityNamespace.from_setting(
        getattr(settings, "ROTA_IDENTITY_NAMESPACE", None)
    )


def active_namespace() -> IdentityNamespace:
    """Return the configured namespace, loading it from settings on first use."""
    if _active is not None:
        return _active
    return configure_namespace(_load_from_settings())


def _reset_for_rotation(namespace: IdentityNamespace) -> None:
    """
    Swap the process namespace after a successful guarded rotation.
    Only core.identity_store.service may call this.
    """
    global _active
    with _lock:
        previous = _active
        _active = namespace
    logger.warning(f"Identity namespace rotated: {previous} -> {namespace}")
