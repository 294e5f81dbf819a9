from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from arenaslot.database import create_db_engine, get_db, init_db
from arenaslot.main import app
from arenaslot.redis_client import get_redis
from arenaslot.services.booking_store import BookingStore


# Fixed clock for service-level tests
NOW = datetime(2026, 10, 19, 8, 0)
TOMORROW = date(2026, 10, 20)


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'arenaslot.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    # Every SQLite transaction holds the write lock: close this session
    # before handing work to other sessions (threads, API requests).
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def game(db):
    return BookingStore(db).insert_game({
        "name": "Badminton Court 1",
        "description": "Indoor, wooden floor",
        "price_per_hour": 500,
        "max_players": 4,
    })


@pytest.fixture
def redis():
    redis = MagicMock()
    redis.exists.return_value = 0
    return redis


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: None
    # No context manager: the lifespan (init_db on the real engine) must not run
    yield TestClient(app)
    app.dependency_overrides.clear()
