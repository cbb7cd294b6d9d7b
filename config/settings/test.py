"""
With these settings, tests run faster.
"""

import tempfile

from .base import *  # noqa: F403
from .base import LOGGING
from .base import TEMPLATES
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="pXbY2l0uHcQ7pXQ2WvJ9nTq0m1Qk5Sx8Dg3Kf6Lh4Zr7Ve2Na9Bw1Ct8Ys5Uj3Mi",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#test-runner
TEST_RUNNER = "django.test.runner.DiscoverRunner"

# DATABASES
# ------------------------------------------------------------------------------
# In-memory SQLite unless a DATABASE_URL is provided (e.g. Postgres in CI).
DATABASES = {"default": env.db("DATABASE_URL", default="sqlite://:memory:")}
DATABASES["default"]["ATOMIC_REQUESTS"] = True

# PASSWORDS
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#password-hashers
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# DEBUGGING FOR TEMPLATES
# ------------------------------------------------------------------------------
TEMPLATES[0]["OPTIONS"]["debug"] = True  # type: ignore[index]

# MEDIA
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#media-url
MEDIA_URL = "http://media.testserver/"
MEDIA_ROOT = tempfile.mkdtemp(prefix="projectflow-media-")

# REALTIME
# ------------------------------------------------------------------------------
REALTIME_RECONNECT_DELAY = 0.01
REALTIME_RECONNECT_DELAY_MAX = 0.05
# In-process Socket.IO client manager.
REDIS_URL = ""

# LOGGING
# ------------------------------------------------------------------------------
# Let realtime records reach the root logger so caplog sees them.
LOGGING["loggers"]["projectflow.realtime"]["propagate"] = True
