"""
Pytest fixtures for testing
"""
import random
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from questledger.application.quests import DAILY_TEMPLATES_BY_ID
from questledger.application.seed import seed_state
from questledger.application.store import BudgetStore
from questledger.config import Settings
from questledger.domain.gamification import QuestType
from questledger.domain.state import BudgetState
from questledger.infrastructure.db import models  # noqa: F401  registers the tables
from questledger.infrastructure.db.session import Base
from questledger.infrastructure.persistence.repository import BudgetDocumentRepository

# Monday, mid-month, mid-morning
NOW = datetime(2024, 1, 15, 10, 0)


@pytest.fixture
def db_engine():
    """Create in-memory SQLite engine for tests"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def state(now, rng) -> BudgetState:
    """Fresh seeded state; daily quests are replaced by a known set"""
    s = seed_state(now, rng)
    s.game.quests = [q for q in s.game.quests if q.type != QuestType.DAILY]
    return s


@pytest.fixture
def with_daily_quests(state, now):
    """Install the given daily quest templates for today, return the quests"""
    def _install(*template_ids):
        quests = [DAILY_TEMPLATES_BY_ID[tid].instantiate(now) for tid in template_ids]
        state.game.quests = quests + state.game.quests
        return quests
    return _install


@pytest.fixture
def settings() -> Settings:
    return Settings(AUTOSAVE=True, STRICT_LOAD=False, DOCUMENT_KEY="test")


@pytest.fixture
def repository(db_session) -> BudgetDocumentRepository:
    return BudgetDocumentRepository(db_session, key="test")


class Clock:
    """Settable clock for store tests"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock(now) -> Clock:
    return Clock(now)


@pytest.fixture
def store(repository, clock, rng, settings) -> BudgetStore:
    return BudgetStore(repository=repository, clock=clock, rng=rng, settings=settings).open()
