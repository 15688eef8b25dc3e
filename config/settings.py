"""
Rota – Django Settings (Infrastructure Only)
=============================================
Django serves as the ORM, migration and signal container for Rota.
Deployment values come from environment variables; the defaults are for
local development.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("ROTA_SECRET_KEY", "rota-dev-key-replace-before-deployment")

DEBUG = os.environ.get("ROTA_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
# Order matters: the HR change hooks must exist before the holiday
# engine registers its subscribers; bootstrap checks run last.
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "core.identity_store",
    "engines.hr",
    "engines.holiday",
    "core.bootstrap",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Set ROTA_DB_ENGINE etc. for PostgreSQL.
DATABASES = {
    "default": {
        "ENGINE": os.environ.get("ROTA_DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("ROTA_DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("ROTA_DB_USER", ""),
        "PASSWORD": os.environ.get("ROTA_DB_PASSWORD", ""),
        "HOST": os.environ.get("ROTA_DB_HOST", ""),
        "PORT": os.environ.get("ROTA_DB_PORT", ""),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-gb"
TIME_ZONE = os.environ.get("ROTA_TIME_ZONE", "Europe/London")
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Identity ──────────────────────────────────────────────────
# Pinned into the database on first boot. Changing it afterwards is
# refused at startup; use core.identity_store.service.rotate_namespace.
ROTA_IDENTITY_NAMESPACE = {
    "version": int(os.environ.get("ROTA_IDENTITY_NAMESPACE_VERSION", "1")),
    "uuid": os.environ.get(
        "ROTA_IDENTITY_NAMESPACE_UUID",
        "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
    ),
}

# ── Holiday Entitlement ───────────────────────────────────────
# Any key of core.config.rules.EntitlementRules may be overridden.
ROTA_ENTITLEMENT_RULES = {
    "accrual_rate": "0.1207",
    "hours_per_day": "12",
    "statutory_weeks": "5.6",
    "statutory_cap_days": "28",
    "holiday_shift_type": "HOLIDAY",
    "time_zone": TIME_ZONE,
}

# ── Logging ───────────────────────────────────────────────────
ROTA_LOG_LEVEL = os.environ.get("ROTA_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "rota": {
            "handlers": ["console"],
            "level": ROTA_LOG_LEVEL,
            "propagate": True,
        },
    },
}
