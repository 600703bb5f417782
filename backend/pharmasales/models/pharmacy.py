from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from pharmasales.db.base import Base

# Composite primary key: a pharmacist is listed at most once per pharmacy
pharmacy_pharmacists = Table(
    "pharmacy_pharmacists",
    Base.metadata,
    Column("pharmacy_id", Integer, ForeignKey("pharmacies.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Pharmacy(Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True, index=True)
    branch_code = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(JSON, nullable=False)  # street, city, state, zipCode, country
    contact = Column(JSON, nullable=False)  # phone, email
    working_hours = Column(JSON, nullable=True)  # open, close, days
    location = Column(JSON, nullable=True)  # latitude, longitude
    is_active = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=True)
    supervisor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    supervisor = relationship("User", foreign_keys=[supervisor_id], backref="supervised_pharmacies")
    pharmacists = relationship("User", secondary=pharmacy_pharmacists, backref="pharmacies", order_by="User.id")
