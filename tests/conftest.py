"""
Test configuration for pytest
"""

import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from typing import Generator

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"

import tinbr.models  # noqa: E402,F401
from tinbr.core.database import get_session  # noqa: E402


# In-memory SQLite shared by every thread of a test (TestClient runs
# sync endpoints in a threadpool)
test_engine = create_engine(
    "sqlite://",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    # Create all tables
    SQLModel.metadata.create_all(test_engine)

    # Create session
    with Session(test_engine) as session:
        yield session

    # Cleanup
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(scope="function")
def client(db: Session):
    """API client bound to the test session"""
    from fastapi.testclient import TestClient
    from tinbr.main import app

    app.dependency_overrides[get_session] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
