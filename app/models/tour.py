from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.models.base import Base


class Tour(Base):
    __tablename__ = "tours"
    # AUTOINCREMENT: ids of deleted tours are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, autoincrement=True)
    # Free text: stored as entered ("2025-12-31", "15 Agost 2025"), sorted lexicographically
    date = Column(String(50), nullable=False)
    city = Column(String(100), nullable=False)
    venue = Column(String(200), nullable=False)
    ticket_link = Column(String(200), nullable=False, default="")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
