from __future__ import annotations

from typing import Callable, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import settings

OPEN_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class PublicCorsMiddleware(BaseHTTPMiddleware):
    """
    Open CORS for endpoints embedded on arbitrary host pages.

    Must wrap the credentialed dashboard CORSMiddleware so public preflights
    are answered here instead of being rejected for an unknown origin.
    """

    def __init__(self, app, *, prefixes: Sequence[str] | None = None):
        super().__init__(app)
        self.prefixes = tuple(prefixes if prefixes is not None else settings.PUBLIC_CORS_PATHS)

    def is_public(self, path: str) -> bool:
        return bool(self.prefixes) and path.startswith(self.prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.is_public(request.url.path):
            return await call_next(request)
        if request.method == "OPTIONS" and "access-control-request-method" in request.headers:
            return Response(status_code=200, headers=OPEN_CORS_HEADERS)
        response = await call_next(request)
        # Drop origin echoes added by the dashboard CORS layer.
        if "Access-Control-Allow-Credentials" in response.headers:
            del response.headers["Access-Control-Allow-Credentials"]
        if response.headers.get("Vary") == "Origin":
            del response.headers["Vary"]
        for name, value in OPEN_CORS_HEADERS.items():
            response.headers[name] = value
        return response
