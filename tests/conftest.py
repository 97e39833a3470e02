"""Pytest configuration and shared fixtures."""

import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from schedule_advisor.domain.entities import Assignment, Site, Worker
from schedule_advisor.domain.models import Base


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_assignment():
    """Factory for assignments with sequential ids (a1, a2, ...)."""
    counter = itertools.count(1)

    def _make(day="monday", client="Acme", site="HQ", workers=("Ann",), hours=2.0, **kwargs):
        if isinstance(workers, str):
            workers = (workers,)
        kwargs.setdefault("id", f"a{next(counter)}")
        return Assignment(day=day, client=client, site=site, workers=tuple(workers), hours=hours, **kwargs)

    return _make


@pytest.fixture
def roster():
    """Ann (low), Bob (medium), Cara (high) and the inactive Dan (high)."""
    return [
        Worker("Ann", "low"),
        Worker("Bob", "medium"),
        Worker("Cara", "high"),
        Worker("Dan", "high", active=False),
    ]


@pytest.fixture
def sites():
    """Two open Acme sites, a high-security bank vault and a medium-security clinic."""
    return [
        Site("Acme", "HQ"),
        Site("Acme", "Warehouse"),
        Site("Bank", "Vault", "high"),
        Site("Clinic", "Ward", "medium"),
    ]
