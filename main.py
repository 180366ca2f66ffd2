import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import sentry_sdk
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sentry_sdk.integrations.starlette import StarletteIntegration
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from app.api import admin, countdown, gallery, misc, tours, uploads
from app.core.errors import ApiError
from app.core.logging_utils import configure_logging
from app.core.middleware_rate_limit import RateLimitMiddleware
from app.core.middleware_security import JsonBodyLimitMiddleware, SecurityHeadersMiddleware
from app.core.settings import Settings, settings
from app.services.legacy_import import import_legacy_json
from app.services.media_storage import MediaDirectory
from app.services.rate_limit import RateLimiter
from app.services.store import BandStore
from db import Database

load_dotenv()

logger = logging.getLogger("app")

_STATUS_CATEGORIES = {
    400: "validation_error",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "upload_rejected",
    429: "rate_limited",
}


def _error_response(request: Request, status: int, body: dict) -> JSONResponse:
    resp = JSONResponse(body, status_code=status)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        resp.headers["X-Request-ID"] = str(request_id)
    return resp


def _init_sentry(app_settings: Settings) -> None:
    if app_settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=app_settings.SENTRY_DSN,
            integrations=[StarletteIntegration()],
            traces_sample_rate=float(app_settings.SENTRY_TRACES_SAMPLE_RATE or 0.0),
            send_default_pii=False,
        )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    media = MediaDirectory(Path(app_settings.MEDIA_DIR))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(app_settings)
        _init_sentry(app_settings)
        database = Database(app_settings.database_path()).open()
        store = BandStore(database)
        media.ensure()
        try:
            import_legacy_json(store, Path(app_settings.LEGACY_DATA_DIR))
        except SQLAlchemyError:
            logger.exception("legacy_import.failed")
        app.state.database = database
        app.state.store = store
        logger.info(
            "app.startup",
            extra={
                "env": app_settings.ENV,
                "database": str(database.path),
                "media_dir": str(media.root),
                "admin_configured": bool(app_settings.ADMIN_PASSWORD),
            },
        )
        try:
            yield
        finally:
            logger.info("app.shutdown")
            database.close()

    app = FastAPI(title="Band Site API", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.media = media
    app.state.rate_limiter = RateLimiter(
        limit=app_settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=app_settings.RATE_LIMIT_WINDOW_SECONDS,
    )

    # Last added runs first: request logging wraps everything below it
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(JsonBodyLimitMiddleware, max_bytes=app_settings.MAX_JSON_BYTES)
    app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter)
    app.add_middleware(SecurityHeadersMiddleware, production=app_settings.is_production)

    app.include_router(tours.router)
    app.include_router(countdown.router)
    app.include_router(gallery.router)
    app.include_router(uploads.router)
    app.include_router(admin.router)
    app.include_router(misc.router)

    # Uploaded media is served straight from disk
    app.mount(
        "/assets/gallery",
        StaticFiles(directory=str(media.root), check_dir=False),
        name="gallery-media",
    )

    # Request logging middleware with request id
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start = time.perf_counter()
        request.state.request_id = request_id
        extra_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
        }
        logger.info("request.start", extra=extra_ctx)
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.exception("request.error", extra={**extra_ctx, "duration_ms": duration_ms})
            raise
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={**extra_ctx, "status_code": response.status_code, "duration_ms": duration_ms},
        )
        return response

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "request.failed",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
                "status_code": exc.status_code,
                "category": exc.category,
                "error_message": exc.message,
            },
        )
        return _error_response(request, exc.status_code, exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            loc = ".".join(str(part) for part in errors[0].get("loc", ()))
            message = f"{loc}: {errors[0].get('msg', 'invalid value')}"
        return _error_response(request, 400, {"error": "validation_error", "message": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        status = exc.status_code or 500
        category = _STATUS_CATEGORIES.get(status, "server_error" if status >= 500 else "error")
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return _error_response(request, status, {"error": category, "message": message})

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception):
        logger.error(
            "request.unhandled",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
            },
        )
        return _error_response(
            request, 500, {"error": "server_error", "message": "Internal Server Error"}
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
