"""Pytest configuration and fixtures."""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tonic.db import get_db
from tonic.db.database import Base
from tonic.engine.catalog import load_catalog
from tonic.engine.checkin import DailyCheckIn
from tonic.engine.insights import CheckInInsightGenerator
from tonic.engine.profile import HealthGoal, Sex, UserProfile
from tonic.engine.recommender import RecommendationEngine
from tonic.main import app
from tonic.models import User


@pytest.fixture(scope="session")
def catalog():
    """The bundled supplement catalog."""
    return load_catalog()


@pytest.fixture
def engine(catalog):
    return RecommendationEngine(catalog)


@pytest.fixture
def generator(catalog):
    return CheckInInsightGenerator(catalog)


@pytest.fixture
def make_profile():
    """Factory for profiles; keyword arguments override the defaults."""
    def _make(**overrides):
        fields = {
            "name": "Test User",
            "age": 32,
            "sex": Sex.PREFER_NOT_TO_SAY,
            "health_goals": [HealthGoal.SLEEP],
        }
        fields.update(overrides)
        return UserProfile(**fields)
    return _make


@pytest.fixture
def make_history():
    """
    Factory for completed check-ins on the days before `today`, newest first.

    Each row is a dict of score overrides; row 0 is yesterday.
    """
    def _make(today: date, rows):
        history = []
        for offset, scores in enumerate(rows, start=1):
            history.append(DailyCheckIn(
                check_in_date=today - timedelta(days=offset),
                wellbeing_completed=True,
                **scores
            ))
        return history
    return _make


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def user(db_session):
    user = User(name="Test User")
    user.health_goals = ["sleep", "stress_anxiety"]
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def client(db_session):
    """API client bound to the test database."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
