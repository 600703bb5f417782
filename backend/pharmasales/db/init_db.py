"""Create all tables and bootstrap the first administrator.

The bootstrap password is random and logged once; change it after first login.
"""
import logging
import secrets

from pharmasales.core.config import settings
from pharmasales.core.security import get_password_hash
from pharmasales.db.base import Base
from pharmasales.db.session import SessionLocal, engine
from pharmasales import models  # noqa: F401 - register models
from pharmasales.models.user import User, UserRole

logger = logging.getLogger(__name__)


def init_db():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if db.query(User).count() == 0:
            default_password = secrets.token_urlsafe(16)
            db.add(
                User(
                    username=settings.DEFAULT_ADMIN_USERNAME.lower(),
                    email=settings.DEFAULT_ADMIN_EMAIL.lower(),
                    hashed_password=get_password_hash(default_password),
                    first_name="System",
                    last_name="Administrator",
                    phone="-",
                    role=UserRole.ADMIN.value,
                )
            )
            db.commit()
            logger.warning(
                "Default admin user created: username=%s password=%s (change it after first login)",
                settings.DEFAULT_ADMIN_USERNAME,
                default_password,
            )
    finally:
        db.close()
