"""Shared pytest fixtures for dota-sync tests."""
import os
import sys
from pathlib import Path
from typing import Generator
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Keep the module-level engine in database.py off the real DB file
os.environ.setdefault("DATABASE_URL", "sqlite://")

from dota_sync.database import Base  # noqa: E402
from dota_sync.store import SqlStore  # noqa: E402
import dota_sync.models  # noqa: F401, E402  (imported for Base registration)


@pytest.fixture(scope="function")
def engine():
    """Isolated in-memory database with every table created."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db_session: Session) -> SqlStore:
    return SqlStore(db_session)


@pytest.fixture
def client() -> Mock:
    """Stand-in for SteamWebApiClient; tests set return values per method."""
    return Mock()


class FakeRedis:
    """Just enough of redis.Redis (decode_responses=True) for RedisCache."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.pipelines: list["FakePipeline"] = []

    def exists(self, key):
        return int(key in self.data)

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        assert isinstance(value, str)
        self.data[key] = value
        return True

    def pipeline(self, transaction=True):
        pipe = FakePipeline(self, transaction)
        self.pipelines.append(pipe)
        return pipe


class FakePipeline:
    def __init__(self, owner: FakeRedis, transaction: bool):
        self.owner = owner
        self.transaction = transaction
        self.queued: list[tuple[str, str]] = []
        self.executed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def set(self, key, value):
        self.queued.append((key, value))

    def execute(self):
        for key, value in self.queued:
            self.owner.set(key, value)
        self.executed = True
        return [True] * len(self.queued)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
