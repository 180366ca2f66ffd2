import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.core.dependencies import get_store, json_body
from app.core.errors import ValidationFailed, storage_errors
from app.services.auth import require_admin
from app.services.store import BandStore
from app.services.validation import sanitize_countdown_data, validate_countdown_data

router = APIRouter()
audit = logging.getLogger("audit")


@router.get("/api/countdown")
def get_countdown(store: BandStore = Depends(get_store)):
    with storage_errors("Failed to load countdown data"):
        return {"release": store.get_countdown()}


@router.post("/api/countdown", dependencies=[Depends(require_admin)])
def update_countdown(data: Any = Depends(json_body), store: BandStore = Depends(get_store)):
    error = validate_countdown_data(data)
    if error:
        raise ValidationFailed(error)
    with storage_errors("Failed to update countdown data"):
        # Fields the client left out keep their stored values
        merged = {**store.get_countdown(), **sanitize_countdown_data(data)}
        release = store.upsert_countdown(merged)
    audit.info(
        "countdown.updated",
        extra={"enabled": release["enabled"], "release_date": release["releaseDate"]},
    )
    return {"success": True, "data": {"release": release}}
