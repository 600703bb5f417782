import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from pharmasales.db.base import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"
    PHARMACIST = "pharmacist"
    SUPERVISOR = "pharmacy supervisor"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, nullable=False, index=True)  # stored lower-cased
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lower-cased
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(150), nullable=False)
    last_name = Column(String(150), nullable=False)
    role = Column(String(32), nullable=False, default=UserRole.USER.value)
    phone = Column(String(64), nullable=False)
    whatsapp = Column(String(64), nullable=True)
    address = Column(JSON, nullable=True)  # street, city, state, zipCode, country
    is_active = Column(Boolean, nullable=False, default=True)
    profile_picture = Column(String(512), nullable=True)
    allowed_pages = Column(JSON, nullable=False, default=list)  # coarse page ACL, e.g. ["/baby-joy"]
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == UserRole.ADMIN.value

    @property
    def is_supervisor(self) -> bool:
        return (self.role or "").lower() == UserRole.SUPERVISOR.value
