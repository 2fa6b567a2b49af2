from __future__ import annotations

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.utils.logger import get_logger

logger = get_logger(__name__)

# Embeds poll these; logging them at info would drown everything else.
QUIET_PREFIXES = ("/static/", "/embed/", "/metrics")


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_ip = request.client.host if request.client else None
        path = request.url.path
        method = request.method
        log = logger.debug if path.startswith(QUIET_PREFIXES) else logger.info
        log(
            "access_start",
            method=method,
            path=path,
            client_ip=client_ip,
            ua=request.headers.get("user-agent"),
            origin=request.headers.get("origin"),
        )
        started = time.perf_counter()
        resp = await call_next(request)
        log(
            "access_end",
            method=method,
            path=path,
            status_code=resp.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            client_ip=client_ip,
        )
        return resp
