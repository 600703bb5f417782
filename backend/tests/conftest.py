"""
Shared pytest fixtures.

The app runs against an in-memory SQLite database shared through a
StaticPool. Seed helpers open their own short-lived session and close it
before any request is made, so test and request sessions never hold a
transaction on the shared connection at the same time.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmasales import models  # noqa: F401 - register models
from pharmasales.api.deps import get_db
from pharmasales.core.rate_limiter import login_limiter
from pharmasales.core.security import create_access_token, get_password_hash
from pharmasales.db.base import Base
from pharmasales.db.session import enable_sqlite_savepoints
from pharmasales.main import app
from pharmasales.models import DetailedSale, HeaderSale, Pharmacy, User
from pharmasales.services.customer_sets import get_customer_sets

PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would bootstrap the configured database.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_module_state():
    login_limiter.reset()
    get_customer_sets.cache_clear()
    yield
    login_limiter.reset()


@pytest.fixture
def seed(session_factory):
    """Persist ORM objects and return them detached, with ids loaded."""

    def _seed(*objects):
        db = session_factory()
        try:
            db.add_all(objects)
            db.commit()
            return objects[0] if len(objects) == 1 else objects
        finally:
            db.close()

    return _seed


@pytest.fixture
def fetch(session_factory):
    """Run `fn(db)` in a fresh session and return its result."""

    def _fetch(fn):
        db = session_factory()
        try:
            return fn(db)
        finally:
            db.close()

    return _fetch


def _user(username, role, **extra):
    return User(
        username=username,
        email=f"{username}@pharma.com",
        hashed_password=PASSWORD_HASH,
        first_name=username.capitalize(),
        last_name="Tester",
        phone="0100000000",
        role=role,
        allowed_pages=extra.pop("allowed_pages", []),
        **extra,
    )


def _principal(user):
    token = create_access_token(subject=str(user.id), role=user.role)
    return SimpleNamespace(
        id=user.id,
        username=user.username,
        role=user.role,
        token=token,
        headers={"Authorization": f"Bearer {token}"},
    )


@pytest.fixture
def admin(seed):
    return _principal(seed(_user("admin", "admin")))


@pytest.fixture
def supervisor(seed):
    return _principal(seed(_user("supervisor", "pharmacy supervisor")))


@pytest.fixture
def other_supervisor(seed):
    return _principal(seed(_user("othersup", "pharmacy supervisor")))


@pytest.fixture
def pharmacist(seed):
    return _principal(seed(_user("pharmacist", "pharmacist")))


@pytest.fixture
def plain_user(seed):
    return _principal(seed(_user("viewer", "user", allowed_pages=["/baby-joy"])))


@pytest.fixture
def make_pharmacy(seed):
    def _make(branch_code, supervisor_id=None, **extra):
        return seed(
            Pharmacy(
                branch_code=branch_code,
                name=extra.pop("name", f"Branch {branch_code}"),
                address=extra.pop("address", {"street": "1 Main St", "city": "Cairo", "country": "Egypt"}),
                contact=extra.pop("contact", {"phone": "0223456789"}),
                working_hours={"open": "09:00", "close": "22:00", "days": []},
                supervisor_id=supervisor_id,
                **extra,
            )
        )

    return _make


@pytest.fixture
def make_sale():
    """Build (unsaved) DetailedSale rows with sensible defaults."""

    def _make(**overrides):
        values = dict(
            branch_code=101,
            invoice_number="INV-1",
            invoice_date=datetime(2024, 1, 15, 10, 30),
            invoice_time="10:30",
            invoice_type="Normal",
            sales_name="Ahmed",
            material_number=5001,
            name="Panadol 500mg",
            unit_of_measurement="BOX",
            quantity=1,
            item_unit_price=100,
            total_discount=0,
            items_net_price=100,
            total_vat=0,
            net_total=100,
            delivery_fees=0,
            customer_name="Cash Customer",
        )
        values.update(overrides)
        return DetailedSale(**values)

    return _make


@pytest.fixture
def make_header():
    """Build (unsaved) HeaderSale rows with sensible defaults."""

    def _make(**overrides):
        values = dict(
            store_code=101,
            invoice_number="H-1",
            year=2024,
            month="Jan",
            date=date(2024, 1, 15),
            time="10:30",
            invoice_type="Normal",
            customer_name="Cash Customer",
            consumer_name="",
            user_name="Ahmed",
            total_amount_after_discount=100,
        )
        values.update(overrides)
        return HeaderSale(**values)

    return _make


@pytest.fixture
def password():
    return PASSWORD
