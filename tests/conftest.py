"""Pytest configuration and fixtures."""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from herdbook.database.schema import Base

TODAY = date(2025, 6, 15)


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def herd():
    """Three cows used throughout the query tests."""
    return [
        {"id": "1", "ear_tag": "BOV001", "name": "Luna", "breed": "Holstein", "health_status": "healthy", "weight": 520.0},
        {"id": "2", "ear_tag": "BOV002", "name": "Rosa", "breed": "Angus", "health_status": "sick", "weight": 480.0},
        {"id": "3", "ear_tag": "BOV003", "name": "Bella", "breed": "Holstein", "health_status": "healthy", "weight": 610.0},
    ]
