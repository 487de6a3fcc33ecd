"""Repository adapters - Database implementations."""

from .postgres import PostgresRateLimitStore, PostgresSignupRepository, run_migrations

__all__ = ["PostgresRateLimitStore", "PostgresSignupRepository", "run_migrations"]
