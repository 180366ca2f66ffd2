"""Dependencies for FastAPI routes."""
import json
from typing import Any

from fastapi import Request

from app.core.errors import PayloadTooLarge, ValidationFailed
from app.core.settings import Settings
from app.services.media_storage import MediaDirectory
from app.services.store import BandStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> BandStore:
    """Store handle opened by the application lifespan."""
    return request.app.state.store


def get_media(request: Request) -> MediaDirectory:
    return request.app.state.media


async def json_body(request: Request) -> Any:
    """Parse the JSON body, counting bytes as they arrive.

    JsonBodyLimitMiddleware only sees a declared Content-Length; chunked
    bodies are bounded here.
    """
    max_bytes = request.app.state.settings.MAX_JSON_BYTES
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if max_bytes and len(body) > max_bytes:
            raise PayloadTooLarge("Request body too large")
    try:
        return json.loads(bytes(body))
    except ValueError:
        raise ValidationFailed("Request body must be valid JSON") from None
