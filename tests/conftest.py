from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from gstledger.core.config import settings  # noqa: E402
from gstledger.db import session as db_session  # noqa: E402
from gstledger.db.base_class import Base  # noqa: E402
from gstledger.db.session import SessionLocal  # noqa: E402
from gstledger.models import tax_models  # noqa: E402,F401  registers tables

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
db_session.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def service(db_session):
    from gstledger.services.gst import build_gst_service

    return build_gst_service(db_session)


@pytest.fixture
def slab_factory(service):
    """Factory to create tax slabs for tests."""
    def _create(name: str = "GST 18%", rate="18", **overrides):
        data = {"name": name, "rate": rate, "category": "Standard"}
        data.update(overrides)
        return service.create_slab(data)
    return _create


@pytest.fixture
def entry_factory(service):
    """Factory to record tax entries for tests."""
    counter = {"n": 0}

    def _create(items, **overrides):
        counter["n"] += 1
        data = {
            "invoice_no": f"INV-{counter['n']:04d}",
            "date": "2024-03-15",
            "customer": "Acme Traders",
            "gstin": "29ABCDE1234F1Z5",
            "items": items,
            "gst_return": "GSTR-1",
        }
        data.update(overrides)
        return service.create_entry(data)
    return _create


# FastAPI TestClient fixture for endpoint tests
from fastapi.testclient import TestClient  # noqa: E402
from gstledger.api.main import app  # noqa: E402


@pytest.fixture
def client():
    """Provide a FastAPI TestClient bound to the application."""
    return TestClient(app)
