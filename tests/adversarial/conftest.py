"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition and flood tests.
The migrated pool comes from the top-level conftest.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from waitlist.adapters.repository.postgres import PostgresSignupRepository


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresSignupRepository:
    """Create repository instance for each test."""
    return PostgresSignupRepository(pool)


@pytest.fixture(autouse=True)
def _clean(clean_database: None) -> Generator[None, None, None]:
    """Every adversarial test starts from empty tables."""
    yield
