from __future__ import annotations

import logging
import time

logger = logging.getLogger(__name__)


def get_client_ip(request) -> str | None:
    """Best-effort client IP: first `X-Forwarded-For` hop, then `REMOTE_ADDR`."""
    meta = getattr(request, "META", {}) or {}
    xff = meta.get("HTTP_X_FORWARDED_FOR")
    if xff:
        first = str(xff).split(",")[0].strip()
        return first or None
    real_ip = meta.get("HTTP_X_REAL_IP")
    if real_ip:
        return str(real_ip).strip() or None
    ra = meta.get("REMOTE_ADDR")
    return str(ra).strip() if ra else None


class RequestLoggingMiddleware:
    """Log method, path, client IP, status and elapsed time of each request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s from %s -> %s (%.1f ms)",
            request.method,
            request.path,
            get_client_ip(request) or "-",
            response.status_code,
            elapsed_ms,
        )
        return response
