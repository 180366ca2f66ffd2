from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.models.base import Base


class Countdown(Base):
    __tablename__ = "countdown"
    __table_args__ = (CheckConstraint("id = 1", name="ck_countdown_singleton"),)

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    release_date = Column(String(50), nullable=False, default="")
    enabled = Column(Boolean, nullable=False, default=False)
    completed_title = Column(String(200), nullable=False, default="")
    completed_description = Column(Text, nullable=False, default="")
    pre_release_message = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
