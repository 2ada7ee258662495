"""
HTTP middleware stack: response hardening headers, JSON-only request bodies
and request correlation IDs.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware

# The API only ever returns JSON, so nothing may be framed or sniffed
BASE_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(BASE_SECURITY_HEADERS)
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response


class JsonBodyOnlyMiddleware(BaseHTTPMiddleware):
    """
    Reject write requests whose declared body is not JSON with 415.

    Requests without a Content-Type (e.g. an empty POST to close a session)
    pass through.
    """

    WRITE_METHODS = frozenset({"POST", "PUT", "PATCH"})

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method in self.WRITE_METHODS:
            media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
            if media_type and media_type != "application/json":
                return JSONResponse(
                    status_code=415,
                    content={"error": f"Unsupported media type '{media_type}', send application/json"},
                )
        return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    # Starlette runs the last registered middleware first: correlation is outermost
    app.add_middleware(JsonBodyOnlyMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
