"""Persistence for tours, gallery items, the countdown and the gallery flag.

Callers validate and sanitize before calling in; the store does not re-check
field contents. Every method is one session and at most one commit.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import func, literal_column
from sqlalchemy.exc import IntegrityError

from app.models import Countdown, GalleryItem, GallerySettings, Tour
from app.services.singleton import SingletonRecord
from db import Database

logger = logging.getLogger(__name__)

# API field name -> column name
COUNTDOWN_FIELDS = {
    "title": "title",
    "description": "description",
    "releaseDate": "release_date",
    "enabled": "enabled",
    "completedTitle": "completed_title",
    "completedDescription": "completed_description",
    "preReleaseMessage": "pre_release_message",
}

_countdown = SingletonRecord(
    Countdown,
    {
        "title": "",
        "description": "",
        "release_date": "",
        "enabled": False,
        "completed_title": "",
        "completed_description": "",
        "pre_release_message": "",
    },
)
_gallery_settings = SingletonRecord(GallerySettings, {"enabled": True})


class DuplicateIdentifier(Exception):
    """A gallery item with this id already exists."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Gallery item id already exists: {item_id}")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def tour_to_dict(t: Tour) -> Dict[str, Any]:
    return {
        "id": t.id,
        "date": t.date,
        "city": t.city,
        "venue": t.venue,
        "ticketLink": t.ticket_link or "",
        "created_at": _iso(t.created_at),
        "updated_at": _iso(t.updated_at),
    }


def gallery_item_to_dict(g: GalleryItem) -> Dict[str, Any]:
    return {
        "id": g.id,
        "filename": g.filename,
        "title": g.title or "",
        "description": g.description or "",
        "order": g.order_num,
        "mediaType": g.media_type,
        "thumbnail": g.thumbnail,
        "mimeType": g.mime_type,
        "created_at": _iso(g.created_at),
    }


def countdown_to_dict(values: Dict[str, Any]) -> Dict[str, Any]:
    out = {api: values[col] for api, col in COUNTDOWN_FIELDS.items()}
    out["enabled"] = bool(out["enabled"])
    return out


class BandStore:
    def __init__(self, database: Database):
        self.database = database

    # --- Tours ---

    def list_tours(self) -> List[Dict[str, Any]]:
        with self.database.session() as db:
            # Lexicographic on the stored text, not calendar-aware
            rows = db.query(Tour).order_by(Tour.date.desc(), Tour.id.asc()).all()
            return [tour_to_dict(t) for t in rows]

    def get_tour(self, tour_id: int) -> Optional[Dict[str, Any]]:
        with self.database.session() as db:
            t = db.get(Tour, tour_id)
            return tour_to_dict(t) if t is not None else None

    def add_tour(self, data: Dict[str, Any]) -> Dict[str, Any]:
        with self.database.session() as db:
            t = Tour(
                date=data["date"],
                city=data["city"],
                venue=data["venue"],
                ticket_link=data.get("ticketLink") or "",
            )
            db.add(t)
            db.commit()
            db.refresh(t)
            return tour_to_dict(t)

    def update_tour(self, tour_id: int, data: Dict[str, Any]) -> bool:
        with self.database.session() as db:
            t = db.get(Tour, tour_id)
            if t is None:
                return False
            t.date = data["date"]
            t.city = data["city"]
            t.venue = data["venue"]
            t.ticket_link = data.get("ticketLink") or ""
            t.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
            db.commit()
            return True

    def delete_tour(self, tour_id: int) -> bool:
        with self.database.session() as db:
            deleted = db.query(Tour).filter(Tour.id == tour_id).delete(synchronize_session=False)
            db.commit()
            return deleted > 0

    # --- Gallery ---

    def _ordered_gallery(self, db) -> List[GalleryItem]:
        return (
            db.query(GalleryItem)
            .order_by(
                GalleryItem.order_num.asc(),
                GalleryItem.created_at.asc(),
                literal_column("gallery.rowid").asc(),
            )
            .all()
        )

    def list_gallery(self) -> Dict[str, Any]:
        with self.database.session() as db:
            items = [gallery_item_to_dict(g) for g in self._ordered_gallery(db)]
            enabled = bool(_gallery_settings.values(db)["enabled"])
            return {"enabled": enabled, "items": items}

    def get_gallery_item(self, item_id: str) -> Optional[Dict[str, Any]]:
        with self.database.session() as db:
            g = db.get(GalleryItem, item_id)
            return gallery_item_to_dict(g) if g is not None else None

    def add_gallery_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        with self.database.session() as db:
            g = GalleryItem(
                id=item["id"],
                filename=item["filename"],
                title=item.get("title") or "",
                description=item.get("description") or "",
                order_num=int(item.get("order") or 0),
                media_type=item.get("mediaType") or "photo",
                thumbnail=item.get("thumbnail"),
                mime_type=item.get("mimeType"),
            )
            if item.get("created_at") is not None:
                g.created_at = item["created_at"]
            db.add(g)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if db.get(GalleryItem, item["id"]) is not None:
                    raise DuplicateIdentifier(item["id"])
                raise
            db.refresh(g)
            return gallery_item_to_dict(g)

    def update_gallery_item(self, item_id: str, item: Dict[str, Any]) -> bool:
        with self.database.session() as db:
            g = db.get(GalleryItem, item_id)
            if g is None:
                return False
            g.filename = item["filename"]
            g.title = item.get("title") or ""
            g.description = item.get("description") or ""
            g.order_num = int(item.get("order") or 0)
            if "mediaType" in item:
                g.media_type = item["mediaType"] or "photo"
            if "thumbnail" in item:
                g.thumbnail = item["thumbnail"]
            if "mimeType" in item:
                g.mime_type = item["mimeType"]
            db.commit()
            return True

    def delete_gallery_item(self, item_id: str) -> bool:
        with self.database.session() as db:
            deleted = (
                db.query(GalleryItem)
                .filter(GalleryItem.id == item_id)
                .delete(synchronize_session=False)
            )
            db.commit()
            return deleted > 0

    def rewrite_gallery_order(self, item_ids: Iterable[str]) -> int:
        """Set order to 1..n following ``item_ids``, in a single transaction."""
        updated = 0
        with self.database.session() as db:
            for position, item_id in enumerate(item_ids, start=1):
                updated += (
                    db.query(GalleryItem)
                    .filter(GalleryItem.id == item_id)
                    .update({"order_num": position}, synchronize_session=False)
                )
            db.commit()
        return updated

    def next_gallery_order(self) -> int:
        with self.database.session() as db:
            current = db.query(func.max(GalleryItem.order_num)).scalar()
            return int(current) + 1 if current is not None else 1

    def registered_media_filenames(self) -> Set[str]:
        with self.database.session() as db:
            names: Set[str] = set()
            for filename, thumbnail in db.query(GalleryItem.filename, GalleryItem.thumbnail):
                names.add(filename)
                if thumbnail:
                    names.add(thumbnail)
            return names

    def gallery_enabled(self) -> bool:
        with self.database.session() as db:
            return bool(_gallery_settings.values(db)["enabled"])

    def set_gallery_enabled(self, enabled: bool) -> None:
        with self.database.session() as db:
            _gallery_settings.upsert(db, {"enabled": bool(enabled)})

    # --- Countdown ---

    def get_countdown(self) -> Dict[str, Any]:
        with self.database.session() as db:
            return countdown_to_dict(_countdown.values(db))

    def upsert_countdown(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = {col: data[api] for api, col in COUNTDOWN_FIELDS.items() if api in data}
        if "enabled" in values:
            values["enabled"] = bool(values["enabled"])
        with self.database.session() as db:
            _countdown.upsert(db, values)
            return countdown_to_dict(_countdown.values(db))

    # --- Maintenance ---

    def tour_count(self) -> int:
        with self.database.session() as db:
            return db.query(Tour).count()

    def has_countdown(self) -> bool:
        with self.database.session() as db:
            return _countdown.get(db) is not None

    def backup(self, backup_dir: Path) -> Path:
        """Copy the database into ``backup_dir`` under a timestamped name."""
        backup_dir = Path(backup_dir)
        backup_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        target_path = backup_dir / f"band-backup-{stamp}.db"
        raw = self.database.engine.raw_connection()
        try:
            target = sqlite3.connect(str(target_path))
            try:
                # Online backup API: includes pages still sitting in the WAL
                raw.driver_connection.backup(target)
            finally:
                target.close()
        finally:
            raw.close()
        logger.info("store.backup", extra={"backup_path": str(target_path)})
        return target_path
