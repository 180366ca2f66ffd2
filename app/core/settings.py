from pathlib import Path
from typing import Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Shared secret for every mutating endpoint (set via .env; never hardcode)
    ADMIN_PASSWORD: str = ""

    # Server
    PORT: int = 3001
    ENV: str = "development"  # development | production

    # Storage
    DATABASE_PATH: str = ""  # empty -> derived from ENV, see database_path()
    MEDIA_DIR: str = "assets/gallery"
    BACKUP_DIR: str = "backups"
    BAND_INFO_PATH: str = "data/band-info.json"
    LEGACY_DATA_DIR: str = "data"  # tours.json / countdown.json imported once

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_JSON: bool = True
    LOG_FILE: str = "logs/app.log"  # empty disables the file handler
    LOG_MAX_BYTES: int = 5_000_000  # 5 MB
    LOG_BACKUP_COUNT: int = 5

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.0

    # Upload/request limits
    MAX_UPLOAD_BYTES: int = 200_000_000  # 200 MB, covers short videos
    MAX_JSON_BYTES: int = 1_000_000
    ALLOWED_UPLOAD_MIME_PREFIXES: Tuple[str, ...] = ("image/", "video/")

    # Rate limiting (per client address, fixed window)
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return (self.ENV or "").lower() in ("prod", "production")

    def database_path(self) -> Path:
        if self.DATABASE_PATH:
            return Path(self.DATABASE_PATH)
        # Persistent volume in production, working copy locally
        if self.is_production:
            return Path("/app/data/band.db")
        return Path("data/band.db")


settings = Settings()

if not settings.ADMIN_PASSWORD:
    # Do not crash imports in some tools; mutating endpoints fail closed instead.
    import warnings

    warnings.warn(
        "ADMIN_PASSWORD is not set. Admin endpoints will refuse every request "
        "until it is configured in .env."
    )
