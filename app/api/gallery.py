"""Gallery listing, visibility flag, deletion and reordering."""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.core.dependencies import get_media, get_store, json_body
from app.core.errors import ValidationFailed, storage_errors
from app.services.auth import require_admin
from app.services.gallery_service import delete_item
from app.services.media_storage import MediaDirectory
from app.services.photo_order_service import reorder_gallery
from app.services.store import BandStore
from app.services.validation import (
    validate_gallery_settings,
    validate_photo_id,
    validate_reorder_request,
)

router = APIRouter()
audit = logging.getLogger("audit")


@router.get("/api/gallery")
def gallery_data(store: BandStore = Depends(get_store)):
    with storage_errors("Failed to load gallery data"):
        gallery = store.list_gallery()
    return {"gallery": {"enabled": gallery["enabled"], "photos": gallery["items"]}}


@router.post("/api/gallery/settings", dependencies=[Depends(require_admin)])
def gallery_settings(data: Any = Depends(json_body), store: BandStore = Depends(get_store)):
    error = validate_gallery_settings(data)
    if error:
        raise ValidationFailed(error)
    with storage_errors("Failed to update gallery settings"):
        store.set_gallery_enabled(data["enabled"])
        enabled = store.gallery_enabled()
    audit.info("gallery.settings.updated", extra={"enabled": enabled})
    return {"success": True, "enabled": enabled}


@router.delete("/admin/delete-photo", dependencies=[Depends(require_admin)])
def delete_photo(
    data: Any = Depends(json_body),
    store: BandStore = Depends(get_store),
    media: MediaDirectory = Depends(get_media),
):
    error = validate_photo_id(data)
    if error:
        raise ValidationFailed(error)
    with storage_errors("Error deleting photo"):
        result = delete_item(store, media, data["photoId"])
    message = "Photo and file deleted successfully"
    if result["filesKept"]:
        message = "Photo deleted; some files could not be removed"
    return {"success": True, "message": message, "photoId": data["photoId"]}


@router.post("/admin/reorder-photos", dependencies=[Depends(require_admin)])
def reorder_photos(data: Any = Depends(json_body), store: BandStore = Depends(get_store)):
    error = validate_reorder_request(data)
    if error:
        raise ValidationFailed(error)
    with storage_errors("Error reordering photos"):
        order = reorder_gallery(store, data["photoId"], data["targetIndex"])
    audit.info(
        "gallery.reordered",
        extra={"item_id": data["photoId"], "target_index": data["targetIndex"]},
    )
    return {"success": True, "message": "Photos reordered successfully", "order": order}
