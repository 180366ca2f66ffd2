import base64
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.settings import Settings
from app.services.media_storage import MediaDirectory
from app.services.store import BandStore
from db import Database

ADMIN_PASSWORD = "s3cret-test-password"

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
# ISO base media header (ftyp box, isom brand) followed by padding
MP4_BYTES = (
    b"\x00\x00\x00\x20ftypisom\x00\x00\x02\x00isomiso2avc1mp41"
    + b"\x00\x00\x00\x08free"
    + b"\x00" * 256
)


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        DATABASE_PATH=str(tmp_path / "data" / "band.db"),
        MEDIA_DIR=str(tmp_path / "media"),
        BACKUP_DIR=str(tmp_path / "backups"),
        BAND_INFO_PATH=str(tmp_path / "band-info.json"),
        LEGACY_DATA_DIR=str(tmp_path / "legacy"),
        LOG_FILE="",
        LOG_JSON=False,
        RATE_LIMIT_MAX_REQUESTS=10_000,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def client(app_settings):
    # Import here so each test gets a fresh app bound to its own temp directory
    from main import create_app

    with TestClient(create_app(app_settings)) as c:
        yield c


@pytest.fixture
def store(client) -> BandStore:
    """The store the running test app writes to."""
    return client.app.state.store


@pytest.fixture
def media_dir(app_settings) -> Path:
    return Path(app_settings.MEDIA_DIR)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {ADMIN_PASSWORD}"}


@pytest.fixture
def db_store(tmp_path):
    """A store with no HTTP app in front of it."""
    database = Database(tmp_path / "store.db").open()
    try:
        yield BandStore(database)
    finally:
        database.close()


@pytest.fixture
def media(tmp_path) -> MediaDirectory:
    directory = MediaDirectory(tmp_path / "media")
    directory.ensure()
    return directory


def upload_photo(client, headers, content=PNG_BYTES, name="cover.png", mime="image/png", **data):
    return client.post(
        "/admin/add-photo",
        files={"photo": (name, content, mime)},
        data=data,
        headers=headers,
    )
