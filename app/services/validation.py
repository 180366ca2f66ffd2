"""Input checks and sanitizers applied before anything reaches the store.

Validators return ``None`` when the input is acceptable, otherwise a short
description of the first problem found. Nothing here touches the database
or the filesystem.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Optional

# Matches a tag, or an unterminated "<..." running to the end of the string
_TAG_RE = re.compile(r"<[^>]*>?")

DEFAULT_MAX_LENGTH = 200
TOUR_MAX_LENGTHS = {"date": 50, "city": 100, "venue": 200}
TOUR_REQUIRED = ("date", "city", "venue")
TICKET_LINK_MAX_LENGTH = 200
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
RELEASE_DATE_MAX_LENGTH = 50


def sanitize_string(value: Any, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Strip markup tags and truncate. Non-strings become an empty string."""
    if not isinstance(value, str):
        return ""
    return _TAG_RE.sub("", value)[:max_length]


def validate_tour_data(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return "Request body must be a JSON object"
    for field in TOUR_REQUIRED:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            return f"Field '{field}' is required and must be a non-empty string"
    for field, max_length in TOUR_MAX_LENGTHS.items():
        if len(data[field]) > max_length:
            return f"Field '{field}' must be at most {max_length} characters"
    link = data.get("ticketLink")
    if link is not None and not isinstance(link, str):
        return "Field 'ticketLink' must be a string"
    return None


def sanitize_tour_data(data: Dict[str, Any]) -> Dict[str, str]:
    return {
        "date": sanitize_string(data.get("date"), TOUR_MAX_LENGTHS["date"]).strip(),
        "city": sanitize_string(data.get("city"), TOUR_MAX_LENGTHS["city"]).strip(),
        "venue": sanitize_string(data.get("venue"), TOUR_MAX_LENGTHS["venue"]).strip(),
        "ticketLink": sanitize_string(data.get("ticketLink") or "", TICKET_LINK_MAX_LENGTH).strip(),
    }


def clean_tour_data(data: Any) -> tuple[Optional[str], Dict[str, str]]:
    """Validate, sanitize, then re-check that required fields survived sanitizing.

    Returns ``(error, cleaned)``; ``cleaned`` is empty when ``error`` is set.
    """
    error = validate_tour_data(data)
    if error:
        return error, {}
    cleaned = sanitize_tour_data(data)
    error = validate_tour_data(cleaned)
    if error:
        return error, {}
    return None, cleaned


def parse_release_date(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime; a trailing ``Z`` means UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def validate_countdown_data(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return "Request body must be a JSON object"
    release = data.get("releaseDate")
    if release is not None:
        if not isinstance(release, str):
            return "Field 'releaseDate' must be a string"
        if len(release) > RELEASE_DATE_MAX_LENGTH:
            return f"Field 'releaseDate' must be at most {RELEASE_DATE_MAX_LENGTH} characters"
        if release.strip() and parse_release_date(release) is None:
            return "Field 'releaseDate' must be an ISO-8601 date or datetime"
    if "enabled" in data and not isinstance(data["enabled"], bool):
        return "Field 'enabled' must be a boolean"
    for field in ("title", "description", "completedTitle", "completedDescription",
                  "preReleaseMessage"):
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            return f"Field '{field}' must be a string"
    return None


def sanitize_countdown_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize only the fields present; callers merge with the stored record."""
    limits = {
        "title": TITLE_MAX_LENGTH,
        "description": DESCRIPTION_MAX_LENGTH,
        "completedTitle": TITLE_MAX_LENGTH,
        "completedDescription": DESCRIPTION_MAX_LENGTH,
        "preReleaseMessage": DESCRIPTION_MAX_LENGTH,
    }
    out: Dict[str, Any] = {}
    for field, max_length in limits.items():
        if field in data:
            out[field] = sanitize_string(data[field], max_length)
    if "releaseDate" in data:
        out["releaseDate"] = (data["releaseDate"] or "").strip()
    if "enabled" in data:
        out["enabled"] = bool(data["enabled"])
    return out


def validate_reorder_request(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return "Request body must be a JSON object"
    photo_id = data.get("photoId")
    if not isinstance(photo_id, str) or not photo_id.strip():
        return "Field 'photoId' is required and must be a non-empty string"
    target = data.get("targetIndex")
    # bool is an int subclass; reject it explicitly
    if isinstance(target, bool) or not isinstance(target, int):
        return "Field 'targetIndex' is required and must be an integer"
    return None


def validate_photo_id(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return "Request body must be a JSON object"
    photo_id = data.get("photoId")
    if not isinstance(photo_id, str) or not photo_id.strip():
        return "Field 'photoId' is required and must be a non-empty string"
    return None


def validate_gallery_settings(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return "Request body must be a JSON object"
    if not isinstance(data.get("enabled"), bool):
        return "Field 'enabled' is required and must be a boolean"
    return None


def sanitize_gallery_text(title: Any, description: Any) -> tuple[str, str]:
    return (
        sanitize_string(title, TITLE_MAX_LENGTH).strip(),
        sanitize_string(description, DESCRIPTION_MAX_LENGTH).strip(),
    )
