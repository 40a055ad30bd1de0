"""
Pytest configuration and fixtures.
Every test gets a fresh in-memory SQLite database, never the configured one.
"""

import os
import pytest

# Set test environment BEFORE importing app
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['ENVIRONMENT'] = 'test'

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app import models  # noqa: F401  (registers tables on Base.metadata)


@pytest.fixture
def engine():
    """In-memory SQLite shared across connections via StaticPool."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    """TestClient with get_db bound to the test database and rate limits off."""
    from fastapi.testclient import TestClient
    from app.main import app
    from app.utils.rate_limiter import limiter

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
