"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from mirrorcache.database.backend import SqlBackend
from mirrorcache.database.models import Base
from mirrorcache.engine.permissions import PermissionResolver
from mirrorcache.services.synchronizer import EventSynchronizer

from factories import fixed_clock


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with every cache table.

    Uses StaticPool so all threads share the same in-memory database
    (required by the ``asyncio.to_thread`` bridge in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def backend(db_engine: Engine) -> SqlBackend:
    return SqlBackend(db_engine)


@pytest.fixture
def sync(backend: SqlBackend) -> EventSynchronizer:
    return EventSynchronizer(backend)


@pytest.fixture
def resolver(backend: SqlBackend) -> PermissionResolver:
    return PermissionResolver(backend, clock=fixed_clock)
