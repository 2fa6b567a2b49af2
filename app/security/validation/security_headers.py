from __future__ import annotations

from typing import Callable, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import settings

# Pages third-party sites load in an iframe.
FRAMEABLE_PREFIXES = ("/widget/",)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        *,
        csp: str | None = None,
        frame_csp: str | None = None,
        frameable_prefixes: Sequence[str] = FRAMEABLE_PREFIXES,
    ):
        super().__init__(app)
        self.csp = csp or settings.CSP_POLICY
        self.frame_csp = frame_csp or settings.WIDGET_FRAME_CSP
        self.frameable_prefixes = tuple(frameable_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.url.path.startswith(self.frameable_prefixes):
            response.headers.setdefault("Content-Security-Policy", self.frame_csp)
        else:
            response.headers.setdefault("X-Frame-Options", "DENY")
            response.headers.setdefault("Content-Security-Policy", self.csp)
        if request.url.scheme == "https":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=63072000; includeSubDomains; preload",
            )
        return response
