from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.models.base import Base


def _utcnow() -> datetime:
    # Naive UTC with microseconds so uploads in the same second still sort
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GalleryItem(Base):
    __tablename__ = "gallery"
    # Generated by the uploader (uuid4), not by the database
    id = Column(String(64), primary_key=True)
    filename = Column(String(255), nullable=False)
    title = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    # Not unique; ties fall back to created_at
    order_num = Column(Integer, nullable=False, default=0)
    media_type = Column(String(16), nullable=False, default="photo")
    thumbnail = Column(String(255), nullable=True)
    mime_type = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=_utcnow, server_default=func.now())


class GallerySettings(Base):
    __tablename__ = "gallery_settings"
    __table_args__ = (CheckConstraint("id = 1", name="ck_gallery_settings_singleton"),)

    id = Column(Integer, primary_key=True)
    enabled = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
