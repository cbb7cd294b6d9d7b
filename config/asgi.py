"""
ASGI config for the ProjectFlow project.

It exposes the ASGI callable as a module-level variable named ``application``.

For more information on this file, see
https://docs.djangoproject.com/en/dev/howto/deployment/asgi/

"""

import os

from django.core.asgi import get_asgi_application

# If DJANGO_SETTINGS_MODULE is unset, select a default based on BUILD_ENV.
if "DJANGO_SETTINGS_MODULE" not in os.environ:
    build_env = os.environ.get("BUILD_ENV", "production").lower()
    default_settings = (
        "config.settings.local"
        if build_env == "local"
        else "config.settings.production"
    )
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", default_settings)

django_application = get_asgi_application()

from django.conf import settings  # noqa: E402
from socketio import ASGIApp  # noqa: E402

from projectflow.realtime.socketio import sio  # noqa: E402

# Socket.IO wraps Django: it answers Engine.IO polling and WebSocket upgrades
# under REALTIME_SOCKETIO_PATH and forwards everything else.
application = ASGIApp(
    sio,
    other_asgi_app=django_application,
    socketio_path=settings.REALTIME_SOCKETIO_PATH,
)
