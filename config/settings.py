"""
Yardbook – Django Settings (Infrastructure Only)
=================================================
Django hosts the document store adapter. The engines never import
Django; they reach persistence through the DocumentStore protocol.

Engine tunables are read from YARDBOOK_RULES by
core.config.LedgerRules.from_settings().
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("YARDBOOK_SECRET_KEY", "yardbook-dev-key-replace-before-deployment")

DEBUG = os.environ.get("YARDBOOK_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── Yardbook Modules ──────────────────────────────────
    "core.document_store",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("YARDBOOK_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# Stored documents use UUIDs explicitly. This is a Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Engine Rules ──────────────────────────────────────────────
YARDBOOK_RULES = {
    "money_epsilon": "0.005",
    "pickup_reminder_business_days": 7,
    "over_receipt_tolerance": "0",
    "tax_rate": "0",
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "yardbook": {
            "handlers": ["console"],
            "level": os.environ.get("YARDBOOK_LOG_LEVEL", "INFO"),
        },
    },
}
