"""
Test settings for the voting engine.
"""

from .base import *  # noqa: F403, F401

# SQLite for tests; row locks are no-ops here, so concurrency tests
# run against test_postgresql instead
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": str(BASE_DIR / "backend" / "test_db.sqlite3"),  # noqa: F405
        "OPTIONS": {
            "timeout": 20,
        },
    }
}

# Password hashing for tests (faster)
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable security features for tests
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Celery configuration for tests (synchronous execution)
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

# Disable logging during tests
LOGGING_CONFIG = None

# Dummy cache so every read goes to the database
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.dummy.DummyCache",
    }
}

# No backoff sleeps in tests
VOTE_CONFLICT_BACKOFF_SECONDS = 0
DISABLE_RATE_LIMITING = True
