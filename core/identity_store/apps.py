"""
Rota Identity Store - App Configuration
=======================================
Persistent record of the identity namespace a deployment runs under.
"""

from django.apps import AppConfig


class CoreIdentityStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.identity_store"
    label = "core_identity_store"
    verbose_name = "Rota Identity Store"
