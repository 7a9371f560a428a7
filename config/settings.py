"""
Retail Ledger - Django Settings (Infrastructure Only)
=====================================================
Django serves as the framework container for the ledger.
Engines never read settings; adapters/django_api/wiring.py does.
"""

import json
import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("LEDGER_SECRET_KEY", "ledger-dev-key-replace-before-deployment")

DEBUG = os.environ.get("LEDGER_DEBUG", "1") == "1"

ALLOWED_HOSTS = [h for h in os.environ.get("LEDGER_ALLOWED_HOSTS", "").split(",") if h]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # ── Ledger Modules ────────────────────────────────────
    "core.ledger_store",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Database ──────────────────────────────────────────────────
# SQLite by default; LEDGER_DB_ENGINE=postgres selects PostgreSQL.
if os.environ.get("LEDGER_DB_ENGINE", "sqlite") == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("LEDGER_DB_NAME", "ledger"),
            "USER": os.environ.get("LEDGER_DB_USER", "ledger"),
            "PASSWORD": os.environ.get("LEDGER_DB_PASSWORD", ""),
            "HOST": os.environ.get("LEDGER_DB_HOST", "localhost"),
            "PORT": os.environ.get("LEDGER_DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Ledger ────────────────────────────────────────────────────
# Tenant-local zone for the invoice year, report windows and day buckets.
LEDGER_TIME_ZONE = os.environ.get("LEDGER_TIME_ZONE", TIME_ZONE)
LEDGER_LOW_STOCK_THRESHOLD = int(os.environ.get("LEDGER_LOW_STOCK_THRESHOLD", "5"))
LEDGER_SIDE_EFFECT_MAX_ATTEMPTS = int(os.environ.get("LEDGER_SIDE_EFFECT_MAX_ATTEMPTS", "3"))
LEDGER_STORAGE = os.environ.get("LEDGER_STORAGE", "database")

# {"<api key>": {"tenant_id": "<uuid>", "actor_id": "...", "tenant_name": "..."}}
LEDGER_API_KEYS = json.loads(os.environ.get("LEDGER_API_KEYS", "{}"))

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "ledger": {
            "handlers": ["console"],
            "level": os.environ.get("LEDGER_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
