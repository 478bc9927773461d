"""
pytest fixtures: a SQLite test database behind the app's get_db dependency.

Every test gets a fresh owner id, so rows written by one test never show up
in another test's queries.
"""
import os
import uuid

TEST_DATABASE_URL = "sqlite:///./test_daylog.db"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

import daylog.models  # noqa: F401
from daylog.db.base import Base, get_db
from daylog.main import app

test_engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestSession = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def _test_db():
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session", autouse=True)
def schema():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def db():
    yield from _test_db()


@pytest.fixture()
def client():
    app.dependency_overrides[get_db] = _test_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def owner_id():
    return f"owner-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def headers(owner_id):
    return {"X-Owner-Id": owner_id}


class _BrokenQuery:
    """A query whose execution fails inside the driver."""

    def filter(self, *args, **kwargs):
        return self

    def order_by(self, *args, **kwargs):
        return self

    def all(self):
        raise OperationalError(
            "SELECT * FROM config WHERE owner_id = ?",
            ("private-owner",),
            Exception("disk I/O error"),
        )


class _BrokenSession:
    def query(self, *args):
        return _BrokenQuery()

    def close(self):
        pass


@pytest.fixture()
def broken_session():
    return _BrokenSession()
