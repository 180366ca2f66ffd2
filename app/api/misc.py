"""Misc public endpoints (health, band info)."""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from app.core.dependencies import get_settings
from app.core.errors import ApiError
from app.core.settings import Settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(request: Request, settings: Settings = Depends(get_settings)):
    missing = []
    if not settings.ADMIN_PASSWORD:
        missing.append("ADMIN_PASSWORD")

    # Check DB connectivity best-effort
    db_ok = False
    db_error = None
    store = getattr(request.app.state, "store", None)
    try:
        with store.database.engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        db_ok = True
    except Exception as exc:
        logger.warning("health.db_unavailable", extra={"error": str(exc)})
        db_error = "unavailable"

    status = "ok" if db_ok and not missing else ("degraded" if db_ok else "error")
    payload = {
        "status": status,
        "time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "env": settings.ENV,
        "missing": missing,
        "db": {"ok": db_ok, "error": db_error},
    }
    # Always 200; status is in the payload
    return JSONResponse(content=payload, status_code=200)


@router.get("/health.txt")
def health_text():
    # simple OK text for load balancer checks
    return Response(content="OK", media_type="text/plain")


@router.get("/api/band-info")
def band_info(settings: Settings = Depends(get_settings)):
    try:
        with open(settings.BAND_INFO_PATH, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError):
        logger.exception("band_info.unreadable")
        raise ApiError("Failed to load band information") from None
