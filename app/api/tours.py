"""Tour dates: public listing plus authenticated create/update/delete."""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.core.dependencies import get_store, json_body
from app.core.errors import NotFound, ValidationFailed, storage_errors
from app.services.auth import require_admin
from app.services.store import BandStore
from app.services.validation import clean_tour_data

router = APIRouter()
audit = logging.getLogger("audit")


def _parse_tour_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValidationFailed("Invalid tour ID") from None


@router.get("/api/tours")
def list_tours(store: BandStore = Depends(get_store)):
    with storage_errors("Failed to load tours data"):
        return {"tours": store.list_tours()}


@router.post("/api/tours", dependencies=[Depends(require_admin)])
def create_tour(data: Any = Depends(json_body), store: BandStore = Depends(get_store)):
    error, tour = clean_tour_data(data)
    if error:
        raise ValidationFailed(error)
    with storage_errors("Error saving tour"):
        created = store.add_tour(tour)
    audit.info("tour.created", extra={"tour_id": created["id"]})
    return created


@router.put("/api/tours/{tour_id}", dependencies=[Depends(require_admin)])
def update_tour(
    tour_id: str, data: Any = Depends(json_body), store: BandStore = Depends(get_store)
):
    tid = _parse_tour_id(tour_id)
    error, tour = clean_tour_data(data)
    if error:
        raise ValidationFailed(error)
    with storage_errors("Error updating tour"):
        if not store.update_tour(tid, tour):
            raise NotFound("Tour not found")
        updated = store.get_tour(tid) or {"id": tid, **tour}
    audit.info("tour.updated", extra={"tour_id": tid})
    return {"success": True, **updated}


@router.delete("/api/tours/{tour_id}", dependencies=[Depends(require_admin)])
def delete_tour(tour_id: str, store: BandStore = Depends(get_store)):
    tid = _parse_tour_id(tour_id)
    with storage_errors("Error deleting tour"):
        if not store.delete_tour(tid):
            raise NotFound("Tour not found")
    audit.info("tour.deleted", extra={"tour_id": tid})
    return {"success": True}
