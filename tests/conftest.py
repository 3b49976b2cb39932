"""
- Spins up a temp in-memory SQLite DB
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) that already has the DB override applied.
- Provide an in-memory GameStore + services for the pure service tests.
"""
import os
import pytest
from typing import Generator

# Must be set before mastermind.db is imported: it refuses to start without a URL,
# and the dev-only startup hook would create tables on the real DB.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mastermind.db import Base, get_db
from mastermind.main import app
from mastermind import models  # noqa: F401
from mastermind.games import GameService
from mastermind.multiplayer import MultiplayerService
from mastermind.store import GameStore
from mastermind.types import PRESETS

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db_session(session_factory) -> Generator:
    """Provide a clean session per test with rollback."""
    db = session_factory()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits inside requests, so wipe rows before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM multiplayer_games"))
        conn.execute(text("DELETE FROM games"))
    yield


@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


# --- Fixed secrets, so outcomes are predictable ---

FIXED_SECRETS = {
    4: [0, 1, 2, 3],
    6: [0, 1, 2, 3, 4, 5],
    8: [0, 1, 2, 3, 4, 5, 6, 7],
}


def fake_generate_code(difficulty):
    return list(FIXED_SECRETS[PRESETS[difficulty].secret_length])


@pytest.fixture
def memory_store() -> GameStore:
    return GameStore()


@pytest.fixture
def game_service(memory_store) -> GameService:
    return GameService(memory_store, code_generator=fake_generate_code)


@pytest.fixture
def multiplayer_service(memory_store, game_service) -> MultiplayerService:
    return MultiplayerService(memory_store, game_service)


@pytest.fixture
def pin_secrets(monkeypatch):
    """Patch the bound symbol that main.py actually hands to the game service."""
    import mastermind.main as app_main
    monkeypatch.setattr(app_main, "generate_code", fake_generate_code)
