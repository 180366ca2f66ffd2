"""Upload registration and deletion for gallery items.

Both operations span the store and the media directory. Uploads write the
files first and remove them again if the row cannot be inserted; deletions
remove the row first and treat file removal as best effort.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import NotFound, StorageFailure, UploadRejected, ValidationFailed
from app.services.media_storage import MediaDirectory
from app.services.mime_utils import SNIFF_BYTES, is_allowed_mime, media_type_for
from app.services.store import BandStore, DuplicateIdentifier
from app.services.validation import sanitize_gallery_text

logger = logging.getLogger(__name__)
audit = logging.getLogger("audit")

PRIMARY_FIELD = "photo"
THUMBNAIL_FIELD = "thumbnail"
FILE_FIELDS = (PRIMARY_FIELD, THUMBNAIL_FIELD)


def new_item_id() -> str:
    return str(uuid.uuid4())


def insert_with_fresh_id(
    store: BandStore,
    item: Dict[str, Any],
    make_id: Callable[[], str] = new_item_id,
) -> Dict[str, Any]:
    """Insert ``item``; on an id collision regenerate the id and retry exactly once."""
    try:
        return store.add_gallery_item(item)
    except DuplicateIdentifier as exc:
        logger.warning("gallery.id_collision", extra={"item_id": exc.item_id})
    return store.add_gallery_item({**item, "id": make_id()})


def parse_order(raw: Optional[str]) -> Optional[int]:
    if raw is None or not str(raw).strip():
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationFailed("Field 'order' must be an integer") from None


async def _sniff(upload: UploadFile, allowed_prefixes, fallback: Optional[str]) -> tuple[bool, str]:
    head = await upload.read(SNIFF_BYTES)
    await upload.seek(0)
    if not head:
        raise UploadRejected("Uploaded file is empty")
    return is_allowed_mime(head, allowed_prefixes=allowed_prefixes, fallback_content_type=fallback)


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(getattr(upload, "filename", None))


async def register_upload(
    store: BandStore,
    media: MediaDirectory,
    *,
    photo: Optional[UploadFile],
    thumbnail: Optional[UploadFile] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    order: Optional[str] = None,
    media_type: Optional[str] = None,
    max_bytes: int = 0,
    allowed_prefixes=("image/", "video/"),
    make_id: Callable[[], str] = new_item_id,
) -> Dict[str, Any]:
    """Validate, store the file(s) and register the gallery row. Returns the row."""
    if not _has_file(photo):
        raise UploadRejected("No photo uploaded")
    requested_type = (media_type or "").strip().lower()
    if requested_type and requested_type not in ("photo", "video"):
        raise ValidationFailed("Field 'mediaType' must be 'photo' or 'video'")
    explicit_order = parse_order(order)

    allowed, mime = await _sniff(photo, allowed_prefixes, photo.content_type)
    if not allowed:
        audit.warning("gallery.upload.rejected_mime", extra={"mime": mime})
        raise UploadRejected("Only image or video files are allowed")
    if _has_file(thumbnail):
        thumb_ok, thumb_mime = await _sniff(thumbnail, ("image/",), thumbnail.content_type)
        if not thumb_ok:
            audit.warning("gallery.upload.rejected_thumbnail", extra={"mime": thumb_mime})
            raise UploadRejected("Thumbnail must be an image")

    written: List[str] = []
    try:
        stored = await media.save_upload(photo, PRIMARY_FIELD, max_bytes)
        written.append(stored.filename)
        thumb_name = None
        if _has_file(thumbnail):
            budget = max(1, max_bytes - stored.size) if max_bytes else 0
            stored_thumb = await media.save_upload(thumbnail, THUMBNAIL_FIELD, budget)
            written.append(stored_thumb.filename)
            thumb_name = stored_thumb.filename

        clean_title, clean_description = sanitize_gallery_text(
            title or photo.filename, description or ""
        )
        item = {
            "id": make_id(),
            "filename": stored.filename,
            "title": clean_title,
            "description": clean_description,
            "order": explicit_order if explicit_order is not None else store.next_gallery_order(),
            "mediaType": media_type_for(mime, requested_type),
            "thumbnail": thumb_name,
            "mimeType": mime,
        }
        created = insert_with_fresh_id(store, item, make_id=make_id)
    except (SQLAlchemyError, DuplicateIdentifier, OSError):
        logger.exception("gallery.upload.store_failed")
        for name in written:
            media.remove(name)
        raise StorageFailure("Error uploading photo")
    except BaseException:
        for name in written:
            media.remove(name)
        raise

    audit.info(
        "gallery.photo.added",
        extra={"item_id": created["id"], "media_file": created["filename"], "mime": mime},
    )
    return created


def delete_item(store: BandStore, media: MediaDirectory, item_id: str) -> Dict[str, Any]:
    """Delete the row, then best-effort remove its file and distinct thumbnail."""
    item = store.get_gallery_item(item_id)
    if item is None:
        raise NotFound("Photo not found")
    if not store.delete_gallery_item(item_id):
        raise NotFound("Photo not found in database")

    removed = []
    for name in {item["filename"], item.get("thumbnail")}:
        if name and media.remove(name):
            removed.append(name)
    kept = sorted({item["filename"], item.get("thumbnail")} - set(removed) - {None})
    if kept:
        logger.warning(
            "gallery.delete.orphaned_files", extra={"item_id": item_id, "media_files": kept}
        )
    audit.info("gallery.photo.deleted", extra={"item_id": item_id, "files_removed": removed})
    return {"item": item, "filesRemoved": sorted(removed), "filesKept": kept}
