"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite (fast, isolated)
- Fast password hashing
- Throttling off so API tests never hit rate limits
- Ledger posting on: the tests exercise the accounting side effects
"""

from __future__ import annotations

import copy

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

ACCOUNTING_POSTING_ENABLED = True
VARIANCE_TOLERANCE_PCT = 2.0
VARIANCE_TOLERANCE_ABS = 1.0
VAT_RATE = 0.16
FOOD_COST_TARGET_PCT = 30.0

LOGGING = copy.deepcopy(LOGGING)
LOGGING["root"]["level"] = "CRITICAL"
for _name in ("accounting", "inventory", "recipes", "payroll", "scheduling", "branches"):
    LOGGING["loggers"][_name]["level"] = "CRITICAL"
