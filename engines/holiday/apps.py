"""
Rota Holiday Engine - App Configuration
=======================================
No models of its own: entitlement rows live in the HR record store.
"""

from django.apps import AppConfig


class HolidayConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "engines.holiday"
    label = "holiday"
    verbose_name = "Rota Holiday Entitlement"

    def ready(self):
        from engines.holiday.subscriptions import register_subscriptions
        register_subscriptions()
