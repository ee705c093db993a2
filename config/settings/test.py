from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK
from .base import *  # noqa

# Test settings: SQLite by default; set DATABASE_ENGINE=postgres to run threaded tests
DEBUG = False

if DB_ENGINE.lower() != "postgres":  # noqa: F405
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test_db.sqlite3",  # noqa: F405
        }
    }

# Keep console email backend in tests
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Plain static storage so tests do not need collectstatic manifests
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

ADMIN_SECRET = "test-admin-secret"
SITE_URL = "https://api.slabshop.test"
FRONTEND_URL = "https://slabshop.test"

PAYPAL_CLIENT_ID = "paypal-client"
PAYPAL_CLIENT_SECRET = "paypal-secret"
MERCADOPAGO_ACCESS_TOKEN = "mp-token"
MERCADOPAGO_USD_RATE = 1000.0
MERCADOPAGO_WEBHOOK_SECRET = ""

# Slightly relax throttling for tests to reduce flakiness
REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    **BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {}),
    "user": "10000/min",
    "anon": "10000/min",
    "signin": "1000/min",
    "signout": "1000/min",
    "token_refresh": "1000/min",
    "register": "1000/min",
    "profile": "1000/min",
    "catalog": "1000/min",
    "favorites": "1000/min",
    "cart": "1000/min",
    "cart_write": "1000/min",
    "orders": "1000/min",
    "orders_write": "1000/min",
    "payments": "1000/min",
    "webhooks": "1000/min",
    "admin_orders": "1000/min",
    "inventory": "1000/min",
}
