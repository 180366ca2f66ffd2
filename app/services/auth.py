import hmac
import logging
from typing import Optional

from fastapi import Request

from app.core.errors import ServerMisconfigured, Unauthorized

audit = logging.getLogger("audit")

BEARER_PREFIX = "Bearer "


def secrets_match(configured: str, provided: Optional[str]) -> bool:
    """Constant-time comparison; an unconfigured secret never matches."""
    if not configured or provided is None:
        return False
    return hmac.compare_digest(configured.encode("utf-8"), provided.encode("utf-8"))


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization")
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):]


# FastAPI dependency for every mutating endpoint


def require_admin(request: Request) -> None:
    """Refuse the request unless it carries ``Authorization: Bearer <ADMIN_PASSWORD>``.

    With no password configured every call is refused with a distinct
    misconfiguration error rather than being let through.
    """
    configured = request.app.state.settings.ADMIN_PASSWORD
    if not configured:
        audit.error(
            "auth.misconfigured",
            extra={
                "path": request.url.path,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
        raise ServerMisconfigured()
    if not secrets_match(configured, bearer_token(request)):
        audit.warning(
            "auth.rejected",
            extra={
                "path": request.url.path,
                "client": request.client.host if request.client else None,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
        raise Unauthorized()
