"""Database engine setup.

For test runs (ENV=test) we use a shared-cache in-memory SQLite database when
DATABASE_URL is unset or points at ``:memory:``, so logic tests need no
PostgreSQL driver.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from gstledger.core.config import settings
from gstledger.core.exceptions import ConfigurationError

raw_url = settings.DATABASE_URL
if not raw_url:
    raise ConfigurationError("DATABASE_URL")

use_sqlite_memory = settings.ENV.lower() == "test" and raw_url.startswith("sqlite:///:memory:")

if use_sqlite_memory:
    # shared cache enables multiple connections to the same in-memory database
    raw_url = "sqlite:///file:test_db?mode=memory&cache=shared&uri=true"
    engine = create_engine(raw_url, future=True)
elif raw_url.startswith("postgresql"):
    engine = create_engine(
        raw_url,
        future=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
        pool_pre_ping=True,
    )
else:
    engine = create_engine(raw_url, future=True)
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
