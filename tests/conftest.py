"""Shared test fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from scoreboard.config import settings
from scoreboard.crud import register_user, unlock
from scoreboard.db import make_engine, make_session_factory
from scoreboard.models import Base

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'scoreboard.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    with session_factory() as session:
        yield session


@pytest.fixture
def seed_user(db):
    """Register a user and unlock one flag per given points value."""

    def _seed(username: str, *points: int) -> None:
        register_user(db, username)
        for idx, value in enumerate(points):
            unlock(db, username, f"{username}-flag{idx}", value)

    return _seed


@pytest.fixture
def client(session_factory, monkeypatch) -> Iterator[TestClient]:
    import api_main
    from scoreboard.api.deps import get_db

    def _get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(settings, "ADMIN_API_TOKEN", ADMIN_TOKEN)
    api_main.app.dependency_overrides[get_db] = _get_db
    yield TestClient(api_main.app)
    api_main.app.dependency_overrides.clear()
