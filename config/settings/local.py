from .base import *  # noqa: F403
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = True
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="Wq3nB7xR2kLm9PzT4vYc8HdJ1sFg6Ae5Nu0Ko7Ib2Xp4Qt9Ml3Zw8Vr1Sy6Dh5Cj",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#allowed-hosts
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"]  # noqa: S104

# REALTIME
# ------------------------------------------------------------------------------
REALTIME_LOG_LEVEL = "DEBUG"
LOGGING["loggers"]["projectflow.realtime"]["level"] = REALTIME_LOG_LEVEL  # noqa: F405
