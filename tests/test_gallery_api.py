import re

import pytest
from fastapi.testclient import TestClient

from app.services.gallery_service import insert_with_fresh_id
from app.services.store import DuplicateIdentifier
from conftest import ADMIN_PASSWORD, MP4_BYTES, PNG_BYTES, make_settings, upload_photo

NAME_RE = re.compile(r"^photo-\d{13}-\d+\.png$")


def gallery(client):
    return client.get("/api/gallery").json()["gallery"]


def test_upload_photo(client, auth_headers, media_dir):
    resp = upload_photo(
        client, auth_headers, title="Concert a <b>Vic</b>", description="Primera fila"
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Photo uploaded successfully"
    photo = body["photo"]
    assert NAME_RE.match(photo["filename"])
    assert photo["title"] == "Concert a Vic"
    assert photo["mediaType"] == "photo"
    assert photo["mimeType"] == "image/png"
    assert photo["order"] == 1
    assert (media_dir / photo["filename"]).read_bytes() == PNG_BYTES

    listed = gallery(client)
    assert listed["enabled"] is True
    assert [p["id"] for p in listed["photos"]] == [photo["id"]]


def test_uploaded_file_is_served(client, auth_headers):
    photo = upload_photo(client, auth_headers).json()["photo"]
    resp = client.get(f"/assets/gallery/{photo['filename']}")
    assert resp.status_code == 200
    assert resp.content == PNG_BYTES


def test_upload_defaults_title_to_original_name(client, auth_headers):
    photo = upload_photo(client, auth_headers, name="assaig.png").json()["photo"]
    assert photo["title"] == "assaig.png"


def test_upload_order_appends_after_last(client, auth_headers):
    upload_photo(client, auth_headers, order="5")
    second = upload_photo(client, auth_headers).json()["photo"]
    assert second["order"] == 6


def test_upload_video_with_thumbnail(client, auth_headers, media_dir):
    resp = client.post(
        "/admin/add-photo",
        files={
            "photo": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("clip.png", PNG_BYTES, "image/png"),
        },
        data={"title": "Videoclip", "mediaType": "video"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    photo = resp.json()["photo"]
    assert photo["mediaType"] == "video"
    assert photo["thumbnail"].startswith("thumbnail-")
    assert (media_dir / photo["filename"]).is_file()
    assert (media_dir / photo["thumbnail"]).read_bytes() == PNG_BYTES


def test_legacy_upload_path(client, auth_headers):
    resp = client.post(
        "/upload",
        files={"photo": ("cover.png", PNG_BYTES, "image/png")},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert len(gallery(client)["photos"]) == 1


def test_upload_requires_file(client, auth_headers):
    resp = client.post("/admin/add-photo", data={"title": "sense fitxer"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "upload_rejected"


def test_upload_rejects_text_file(client, auth_headers, media_dir):
    resp = upload_photo(
        client, auth_headers, content=b"just some notes\n" * 4, name="notes.txt", mime="text/plain"
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "upload_rejected"
    assert gallery(client)["photos"] == []
    assert list(media_dir.iterdir()) == []


def test_upload_rejects_non_image_thumbnail(client, auth_headers, media_dir):
    resp = client.post(
        "/admin/add-photo",
        files={
            "photo": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("thumb.txt", b"plain text thumbnail\n", "text/plain"),
        },
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert list(media_dir.iterdir()) == []


def test_upload_rejects_unexpected_file_field(client, auth_headers, media_dir):
    resp = client.post(
        "/admin/add-photo",
        files={"avatar": ("cover.png", PNG_BYTES, "image/png")},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert "avatar" in resp.json()["message"]
    assert gallery(client)["photos"] == []


def test_upload_rejects_bad_order(client, auth_headers, media_dir):
    resp = upload_photo(client, auth_headers, order="first")
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"
    assert list(media_dir.iterdir()) == []


def test_upload_requires_multipart(client, auth_headers):
    resp = client.post("/admin/add-photo", json={"photo": "x"}, headers=auth_headers)
    assert resp.status_code == 400


def test_oversize_upload_rejected_from_declared_length(tmp_path):
    app_settings = make_settings(tmp_path, MAX_UPLOAD_BYTES=1000)
    from main import create_app

    with TestClient(create_app(app_settings)) as c:
        resp = upload_photo(
            c,
            {"Authorization": f"Bearer {ADMIN_PASSWORD}"},
            content=PNG_BYTES + b"\x00" * 100_000,
        )
        assert resp.status_code == 413
        assert resp.json()["error"] == "upload_rejected"
        assert c.get("/api/gallery").json()["gallery"]["photos"] == []


def test_oversize_upload_rejected_while_copying(tmp_path):
    app_settings = make_settings(tmp_path, MAX_UPLOAD_BYTES=1000)
    from main import create_app

    with TestClient(create_app(app_settings)) as c:
        resp = upload_photo(
            c,
            {"Authorization": f"Bearer {ADMIN_PASSWORD}"},
            content=PNG_BYTES + b"\x00" * 10_000,
        )
        assert resp.status_code == 413
        assert c.get("/api/gallery").json()["gallery"]["photos"] == []
    # The partial copy is removed
    assert list((tmp_path / "media").iterdir()) == []


def test_delete_photo_removes_row_and_file(client, auth_headers, media_dir):
    photo = upload_photo(client, auth_headers).json()["photo"]
    resp = client.request(
        "DELETE", "/admin/delete-photo", json={"photoId": photo["id"]}, headers=auth_headers
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Photo and file deleted successfully",
        "photoId": photo["id"],
    }
    assert gallery(client)["photos"] == []
    assert not (media_dir / photo["filename"]).exists()


def test_delete_photo_with_file_already_gone(client, auth_headers, media_dir):
    photo = upload_photo(client, auth_headers).json()["photo"]
    (media_dir / photo["filename"]).unlink()
    resp = client.request(
        "DELETE", "/admin/delete-photo", json={"photoId": photo["id"]}, headers=auth_headers
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert gallery(client)["photos"] == []


def test_delete_video_removes_thumbnail(client, auth_headers, media_dir):
    photo = client.post(
        "/admin/add-photo",
        files={
            "photo": ("clip.mp4", MP4_BYTES, "video/mp4"),
            "thumbnail": ("clip.png", PNG_BYTES, "image/png"),
        },
        headers=auth_headers,
    ).json()["photo"]
    client.request(
        "DELETE", "/admin/delete-photo", json={"photoId": photo["id"]}, headers=auth_headers
    )
    assert list(media_dir.iterdir()) == []


def test_delete_unknown_photo(client, auth_headers):
    resp = client.request(
        "DELETE", "/admin/delete-photo", json={"photoId": "missing"}, headers=auth_headers
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_delete_requires_photo_id(client, auth_headers):
    resp = client.request("DELETE", "/admin/delete-photo", json={}, headers=auth_headers)
    assert resp.status_code == 400


def _three_photos(client, headers):
    return [upload_photo(client, headers, title=t).json()["photo"]["id"] for t in "abc"]


def test_reorder_moves_item_and_renumbers(client, auth_headers):
    a, b, c = _three_photos(client, auth_headers)
    resp = client.post(
        "/admin/reorder-photos", json={"photoId": c, "targetIndex": 0}, headers=auth_headers
    )
    assert resp.status_code == 200
    assert resp.json()["order"] == [c, a, b]
    photos = gallery(client)["photos"]
    assert [(p["id"], p["order"]) for p in photos] == [(c, 1), (a, 2), (b, 3)]


def test_reorder_clamps_target_index(client, auth_headers):
    a, b, c = _three_photos(client, auth_headers)
    client.post(
        "/admin/reorder-photos", json={"photoId": a, "targetIndex": 99}, headers=auth_headers
    )
    assert [p["id"] for p in gallery(client)["photos"]] == [b, c, a]
    client.post(
        "/admin/reorder-photos", json={"photoId": a, "targetIndex": -5}, headers=auth_headers
    )
    assert [p["order"] for p in gallery(client)["photos"]] == [1, 2, 3]
    assert gallery(client)["photos"][0]["id"] == a


@pytest.mark.parametrize("body", [{"photoId": "x"}, {"photoId": "x", "targetIndex": "1"},
                                  {"photoId": "x", "targetIndex": True}])
def test_reorder_validation(client, auth_headers, body):
    resp = client.post("/admin/reorder-photos", json=body, headers=auth_headers)
    assert resp.status_code == 400


def test_reorder_unknown_photo(client, auth_headers):
    _three_photos(client, auth_headers)
    resp = client.post(
        "/admin/reorder-photos", json={"photoId": "nope", "targetIndex": 0}, headers=auth_headers
    )
    assert resp.status_code == 404


def test_gallery_settings_toggle(client, auth_headers):
    resp = client.post("/api/gallery/settings", json={"enabled": False}, headers=auth_headers)
    assert resp.json() == {"success": True, "enabled": False}
    assert gallery(client)["enabled"] is False
    client.post("/api/gallery/settings", json={"enabled": True}, headers=auth_headers)
    assert gallery(client)["enabled"] is True


def test_gallery_settings_requires_boolean(client, auth_headers):
    resp = client.post("/api/gallery/settings", json={"enabled": "no"}, headers=auth_headers)
    assert resp.status_code == 400


def _item(item_id):
    return {"id": item_id, "filename": f"{item_id}.png", "title": "t", "order": 1}


def test_insert_with_fresh_id_retries_once(db_store):
    db_store.add_gallery_item(_item("taken"))
    created = insert_with_fresh_id(db_store, _item("taken"), make_id=lambda: "fresh")
    assert created["id"] == "fresh"
    assert {i["id"] for i in db_store.list_gallery()["items"]} == {"taken", "fresh"}


def test_insert_with_fresh_id_gives_up_after_second_collision(db_store):
    db_store.add_gallery_item(_item("taken"))
    with pytest.raises(DuplicateIdentifier):
        insert_with_fresh_id(db_store, _item("taken"), make_id=lambda: "taken")
    assert len(db_store.list_gallery()["items"]) == 1


def test_upload_rejects_content_magic_cannot_identify(
    client, auth_headers, media_dir, monkeypatch
):
    from app.services import mime_utils

    monkeypatch.setattr(mime_utils, "_detect", lambda data: "application/octet-stream")
    resp = upload_photo(client, auth_headers, content=bytes(range(256)) * 16)
    assert resp.status_code == 400
    assert resp.json()["error"] == "upload_rejected"
    assert list(media_dir.iterdir()) == []
    assert gallery(client)["photos"] == []


def test_upload_rejects_random_bytes_declared_as_image(client, auth_headers, media_dir):
    pytest.importorskip("magic")
    import random

    noise = random.Random(1234).randbytes(4096)
    resp = upload_photo(client, auth_headers, content=noise, name="noise.png", mime="image/png")
    assert resp.status_code == 400
    assert list(media_dir.iterdir()) == []
