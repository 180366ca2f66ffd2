"""Uploads endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import FormData, UploadFile

from app.core.dependencies import get_media, get_settings, get_store
from app.core.errors import PayloadTooLarge, UploadRejected, storage_errors
from app.core.settings import Settings
from app.services.auth import require_admin
from app.services.gallery_service import FILE_FIELDS, register_upload
from app.services.media_storage import MediaDirectory
from app.services.store import BandStore

router = APIRouter()
audit = logging.getLogger("audit")

# Room for multipart boundaries and the small text fields
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def _check_declared_size(request: Request, max_bytes: int) -> None:
    length = request.headers.get("content-length")
    if max_bytes and length and length.isdigit():
        if int(length) > max_bytes + MULTIPART_OVERHEAD_BYTES:
            audit.warning(
                "gallery.upload.rejected_size",
                extra={
                    "size": int(length),
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
            raise PayloadTooLarge("File too large")


async def _read_form(request: Request) -> FormData:
    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith("multipart/form-data"):
        raise UploadRejected("Expected multipart/form-data")
    form = await request.form(max_files=len(FILE_FIELDS), max_fields=20)
    for key, value in form.multi_items():
        if isinstance(value, UploadFile) and key not in FILE_FIELDS:
            await form.close()
            raise UploadRejected(f"Unexpected file field '{key}'")
    return form


def _text(form: FormData, key: str) -> Optional[str]:
    value = form.get(key)
    return value if isinstance(value, str) else None


def _file(form: FormData, key: str) -> Optional[UploadFile]:
    value = form.get(key)
    return value if isinstance(value, UploadFile) else None


async def _handle_upload(
    request: Request, store: BandStore, media: MediaDirectory, settings: Settings
) -> dict:
    _check_declared_size(request, settings.MAX_UPLOAD_BYTES)
    form = await _read_form(request)
    try:
        with storage_errors("Error uploading photo"):
            photo = await register_upload(
                store,
                media,
                photo=_file(form, "photo"),
                thumbnail=_file(form, "thumbnail"),
                title=_text(form, "title"),
                description=_text(form, "description"),
                order=_text(form, "order"),
                media_type=_text(form, "mediaType"),
                max_bytes=settings.MAX_UPLOAD_BYTES,
                allowed_prefixes=tuple(settings.ALLOWED_UPLOAD_MIME_PREFIXES),
            )
    finally:
        await form.close()
    return {"success": True, "photo": photo, "message": "Photo uploaded successfully"}


@router.post("/admin/add-photo", dependencies=[Depends(require_admin)])
async def add_photo(
    request: Request,
    store: BandStore = Depends(get_store),
    media: MediaDirectory = Depends(get_media),
    settings: Settings = Depends(get_settings),
):
    return await _handle_upload(request, store, media, settings)


# Older admin panels post here; same pipeline
@router.post("/upload", dependencies=[Depends(require_admin)])
async def legacy_upload(
    request: Request,
    store: BandStore = Depends(get_store),
    media: MediaDirectory = Depends(get_media),
    settings: Settings = Depends(get_settings),
):
    return await _handle_upload(request, store, media, settings)
