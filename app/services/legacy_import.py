"""One-time import of the JSON files the site used before it had a database.

``tours.json`` is ``{"tours": [...]}`` and ``countdown.json`` is
``{"release": {...}}``. Each kind is imported only while its table is still
empty, so restarting never duplicates data.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from app.services.store import BandStore
from app.services.validation import (
    clean_tour_data,
    sanitize_countdown_data,
    validate_countdown_data,
)

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def import_legacy_json(store: BandStore, data_dir: Path) -> Dict[str, int]:
    data_dir = Path(data_dir)
    result = {"tours": 0, "countdown": 0}

    tours_path = data_dir / "tours.json"
    if tours_path.is_file() and store.tour_count() == 0:
        try:
            tours = _read_json(tours_path).get("tours") or []
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("legacy_import.tours.unreadable", extra={"error": str(exc)})
            tours = []
        for raw in tours:
            error, tour = clean_tour_data(raw)
            if error:
                logger.warning("legacy_import.tour.skipped", extra={"reason": error})
                continue
            store.add_tour(tour)
            result["tours"] += 1

    countdown_path = data_dir / "countdown.json"
    if countdown_path.is_file() and not store.has_countdown():
        try:
            release = _read_json(countdown_path).get("release")
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("legacy_import.countdown.unreadable", extra={"error": str(exc)})
            release = None
        if isinstance(release, dict):
            error = validate_countdown_data(release)
            if error:
                logger.warning("legacy_import.countdown.skipped", extra={"reason": error})
            else:
                store.upsert_countdown(sanitize_countdown_data(release))
                result["countdown"] = 1

    if result["tours"] or result["countdown"]:
        logger.info("legacy_import.done", extra=result)
    return result
