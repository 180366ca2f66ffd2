from app.services import mime_utils
from app.services.mime_utils import is_allowed_mime, media_type_for, sniff_mime


def test_detected_type_wins_over_declared(monkeypatch):
    monkeypatch.setattr(mime_utils, "_detect", lambda data: "text/plain")
    assert sniff_mime(b"hello", "image/png") == "text/plain"


def test_unidentified_content_is_not_upgraded_by_declared_type(monkeypatch):
    monkeypatch.setattr(mime_utils, "_detect", lambda data: "application/octet-stream")
    assert is_allowed_mime(b"\x00\x01", fallback_content_type="image/png") == (
        False,
        "application/octet-stream",
    )


def test_declared_type_used_when_libmagic_missing(monkeypatch):
    monkeypatch.setattr(mime_utils, "_detect", lambda data: None)
    assert sniff_mime(b"\x00", "Image/PNG; charset=binary") == "image/png"
    assert sniff_mime(b"\x00", None) == "application/octet-stream"


def test_media_type_for():
    assert media_type_for("video/mp4") == "video"
    assert media_type_for("image/jpeg") == "photo"
    assert media_type_for("image/png", "video") == "video"
