import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from app.core.errors import RateLimited
from app.services.rate_limit import RateLimiter

audit = logging.getLogger("audit")


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request, call_next):
        client = request.client.host if request.client else "unknown"
        if not self.limiter.allow(client):
            audit.warning(
                "request.rate_limited",
                extra={"client": client, "path": request.url.path},
            )
            err = RateLimited()
            return JSONResponse(err.to_dict(), status_code=err.status_code)
        return await call_next(request)
