import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db, get_session_factory
from app.config import settings
from factories import make_match, start_innings


@pytest.fixture
def match():
    return make_match()


@pytest.fixture
def live_match():
    """2-over match with openers and the first bowler selected"""
    return start_innings(make_match())


@pytest.fixture
def session_factory():
    """In-memory SQLite shared by every session of one test"""
    import app.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr(settings, "SAVE_RETRY_BACKOFF_SECONDS", 0)


@pytest.fixture
def client(session_factory, no_backoff):
    from main import app
    from app.api import match as match_api

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    match_api.active_matches.clear()

    # No context manager: the startup hook would create tables in the on-disk database
    yield TestClient(app)

    app.dependency_overrides.clear()
    match_api.active_matches.clear()
