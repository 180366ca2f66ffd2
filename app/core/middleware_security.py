from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from app.core.errors import PayloadTooLarge


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, production: bool = False):
        super().__init__(app)
        self.production = production

    async def dispatch(self, request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        content_type = response.headers.get("content-type", "").lower()
        if content_type.startswith("text/html"):
            response.headers["Content-Security-Policy"] = " ".join(
                [
                    "default-src 'self';",
                    "script-src 'self' 'unsafe-inline';",
                    "style-src 'self' 'unsafe-inline';",
                    "img-src 'self' data:;",
                    "media-src 'self';",
                    "object-src 'none';",
                    "base-uri 'self';",
                    "form-action 'self';",
                ]
            )
        if self.production:
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
        return response


class JsonBodyLimitMiddleware(BaseHTTPMiddleware):
    """Reject JSON requests whose declared length exceeds ``max_bytes``."""

    def __init__(self, app: ASGIApp, max_bytes: int):
        super().__init__(app)
        self.max_bytes = int(max_bytes)

    async def dispatch(self, request, call_next):
        content_type = request.headers.get("content-type", "").lower()
        length = request.headers.get("content-length")
        if content_type.startswith("application/json") and length and length.isdigit():
            if self.max_bytes and int(length) > self.max_bytes:
                err = PayloadTooLarge("Request body too large")
                return JSONResponse(err.to_dict(), status_code=err.status_code)
        return await call_next(request)
