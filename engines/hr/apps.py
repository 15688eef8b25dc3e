"""
Rota HR Record Store - App Configuration
========================================
Staff, periods, shifts, change-of-terms requests and holiday entitlements.
"""

from django.apps import AppConfig


class HrConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "engines.hr"
    label = "hr"
    verbose_name = "Rota HR Records"

    def ready(self):
        # Connects the change hooks
        from engines.hr import signals  # noqa: F401
