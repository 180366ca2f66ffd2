"""MIME detection helpers.

Uses `magic` if available (provided by python-magic or python-magic-bin).
The declared content type is only consulted when libmagic cannot be loaded.
"""

from __future__ import annotations

from typing import Optional, Tuple

GENERIC_MIME = "application/octet-stream"
SNIFF_BYTES = 2048


def _detect(data: bytes) -> Optional[str]:
    """libmagic's verdict for ``data``, or None when libmagic is unavailable."""
    try:
        import magic  # type: ignore

        try:
            detected = magic.Magic(mime=True).from_buffer(data)
        except Exception:
            # Some variants expose from_buffer at module level
            detected = magic.from_buffer(data, mime=True)  # type: ignore
    except Exception:
        return None
    if isinstance(detected, str) and detected:
        return detected.lower()
    return None


def sniff_mime(data: bytes, fallback_content_type: Optional[str] = None) -> str:
    detected = _detect(data)
    if detected is not None:
        # Unidentifiable content stays octet-stream; the client's claim doesn't override it
        return detected
    return (fallback_content_type or "").split(";")[0].strip().lower() or GENERIC_MIME


def is_allowed_mime(
    data: bytes,
    allowed_prefixes: Tuple[str, ...] = ("image/", "video/"),
    fallback_content_type: Optional[str] = None,
) -> tuple[bool, str]:
    """Return (allowed, mime) using sniffed MIME with fallback."""
    mime = sniff_mime(data, fallback_content_type)
    if not allowed_prefixes:
        return True, mime
    return any(mime.startswith(p) for p in allowed_prefixes), mime


def media_type_for(mime: str, requested: Optional[str] = None) -> str:
    """Gallery media type: explicit caller intent wins, else inferred from MIME."""
    choice = (requested or "").strip().lower()
    if choice in ("photo", "video"):
        return choice
    return "video" if (mime or "").startswith("video/") else "photo"
