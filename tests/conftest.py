"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import models  # noqa: F401  (registers tables on Base)
from app.schemas.matching_schemas import Assignment, CandidateProfile

# Assignment location used by every builder; candidates are placed due north
ORIGIN = (45.0, 4.0)
KM_PER_DEGREE_LAT = 6371 * 3.141592653589793 / 180


def point_north_of_origin(km: float):
    return (ORIGIN[0] + km / KM_PER_DEGREE_LAT, ORIGIN[1])


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 3, 14, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_assignment():
    """Factory for an emergency-care day assignment at ORIGIN."""
    def _make(**overrides) -> Assignment:
        data = dict(
            id=10,
            establishment_id=1,
            title="Renfort urgences",
            specialization="urgences",
            required_experience=2,
            required_certifications={"BLS"},
            shift="jour",
            urgency="medium",
            patient_type="adult",
            team_size=5,
            stress_level=3,
            latitude=ORIGIN[0],
            longitude=ORIGIN[1],
        )
        data.update(overrides)
        return Assignment(**data)
    return _make


@pytest.fixture
def make_candidate():
    """
    Factory for an eligible nurse 1 km from ORIGIN.

    With the default assignment this candidate scores 83:
    specialization 30, experience 25, proximity 15, certifications 3,
    adaptability 8, availability 2, history 0, bonus 0.
    """
    def _make(distance_km: float = 1.0, **overrides) -> CandidateProfile:
        lat, lon = point_north_of_origin(distance_km)
        data = dict(
            id=1,
            first_name="Sophie",
            last_name="Martin",
            specializations={"urgences"},
            experience=5,
            certifications={"BLS"},
            rating=4.0,
            completed_missions=0,
            latitude=lat,
            longitude=lon,
            max_distance=40,
            mobility="public_transport",
            stress_resistance=3,
            teamwork=3,
            flexibility=3,
        )
        data.update(overrides)
        return CandidateProfile(**data)
    return _make


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient bound to the in-memory database."""
    from fastapi.testclient import TestClient
    from app.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
