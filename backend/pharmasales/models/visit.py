"""Visit: append-only page-visit audit row. Never updated or deleted by the application."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pharmasales.db.base import Base


class Visit(Base):
    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)  # kept when the user is deleted
    path = Column(String(512), nullable=False, index=True)
    method = Column(String(8), nullable=False, default="GET")
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    referer = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", backref="visits")
