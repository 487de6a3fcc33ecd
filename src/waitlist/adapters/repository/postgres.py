"""
PostgreSQL repository adapters - Implement SignupRepository and RateLimitStore.

This module provides the PostgreSQL implementations of the domain's
persistence ports using psycopg3 with raw SQL.

Concurrency Design:
-------------------
1. **Email uniqueness**: create() uses INSERT ... ON CONFLICT (email) DO NOTHING.
   The UNIQUE constraint decides concurrent inserts for the same email;
   exactly one caller gets a row back, the others get None.

2. **Referral counts**: increment_referral_count() is a single
   UPDATE ... SET referral_count = referral_count + 1 statement. The row
   lock taken by UPDATE serializes concurrent referrals, so no increment
   is lost.

3. **Rate-limit budget**: PostgresRateLimitStore.acquire() counts and inserts
   under pg_advisory_xact_lock for the (ip, endpoint) key, so a burst of
   concurrent requests cannot all read the same stale count.

All psycopg errors are re-raised as domain StorageError so the domain can
decide which failures are fatal without importing the driver.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from waitlist.domain.exceptions import StorageError
from waitlist.domain.models import Signup

logger = logging.getLogger(__name__)

SIGNUP_COLUMNS = (
    "id, full_name, email, brand_name, created_at, referral_code, referred_by, referral_count"
)


def _row_to_signup(row: tuple) -> Signup:
    return Signup(
        id=str(row[0]),
        full_name=row[1],
        email=row[2],
        brand_name=row[3],
        created_at=row[4],
        referral_code=row[5],
        referred_by=row[6],
        referral_count=row[7],
    )


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Translate driver and pool failures into StorageError."""
    try:
        yield
    except psycopg.Error as e:
        raise StorageError(f"{operation} failed: {e}") from e


class PostgresSignupRepository:
    """
    Implements SignupRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> Signup | None:
        sql = f"SELECT {SIGNUP_COLUMNS} FROM waitlist_signups WHERE email = %s"

        with _storage_errors("find_by_email"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email,))
                row = cursor.fetchone()

        return _row_to_signup(row) if row is not None else None

    def create(
        self,
        full_name: str,
        email: str,
        referral_code: str,
        brand_name: str | None = None,
        referred_by: str | None = None,
    ) -> Signup | None:
        """
        Atomically insert a new signup.

        Returns:
            The created Signup, or None if the email already exists
        """
        sql = f"""
            INSERT INTO waitlist_signups (full_name, email, brand_name, referral_code, referred_by)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {SIGNUP_COLUMNS}
        """

        with _storage_errors("create"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (full_name, email, brand_name, referral_code, referred_by))
                row = cursor.fetchone()
                conn.commit()

        return _row_to_signup(row) if row is not None else None

    def increment_referral_count(self, referral_code: str) -> bool:
        sql = """
            UPDATE waitlist_signups
            SET referral_count = referral_count + 1
            WHERE referral_code = %s
        """

        with _storage_errors("increment_referral_count"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (referral_code,))
                conn.commit()
                return cursor.rowcount == 1

    def list_referrals(self, referral_code: str, limit: int) -> list[Signup]:
        sql = f"""
            SELECT {SIGNUP_COLUMNS} FROM waitlist_signups
            WHERE referred_by = %s
            ORDER BY created_at DESC
            LIMIT %s
        """

        with _storage_errors("list_referrals"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (referral_code, limit))
                rows = cursor.fetchall()

        return [_row_to_signup(row) for row in rows]

    def top_by_referrals(self, limit: int) -> list[Signup]:
        sql = f"""
            SELECT {SIGNUP_COLUMNS} FROM waitlist_signups
            ORDER BY referral_count DESC, created_at ASC, id ASC
            LIMIT %s
        """

        with _storage_errors("top_by_referrals"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (limit,))
                rows = cursor.fetchall()

        return [_row_to_signup(row) for row in rows]


class PostgresRateLimitStore:
    """
    Implements RateLimitStore protocol via psycopg3.

    acquire() runs in one transaction holding a transaction-scoped advisory
    lock on hashtext(ip|endpoint), so callers for the same key take turns
    between the count and the insert. Different keys never wait on each other.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def acquire(
        self, ip: str, endpoint: str, at: datetime, window_start: datetime, max_requests: int
    ) -> bool:
        lock_sql = "SELECT pg_advisory_xact_lock(hashtext(%s || '|' || %s))"
        prune_sql = """
            DELETE FROM waitlist_rate_limits
            WHERE ip = %s AND endpoint = %s AND created_at < %s
        """
        count_sql = """
            SELECT COUNT(*) FROM waitlist_rate_limits
            WHERE ip = %s AND endpoint = %s AND created_at >= %s
        """
        insert_sql = """
            INSERT INTO waitlist_rate_limits (ip, endpoint, created_at)
            VALUES (%s, %s, %s)
        """

        with _storage_errors("acquire"):
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(lock_sql, (ip, endpoint))
                cursor.execute(prune_sql, (ip, endpoint, window_start))
                cursor.execute(count_sql, (ip, endpoint, window_start))
                (count,) = cursor.fetchone()

                allowed = count < max_requests
                if allowed:
                    cursor.execute(insert_sql, (ip, endpoint, at))
                # Commit releases the advisory lock
                conn.commit()

        return allowed


def run_migrations(pool: ConnectionPool, migrations_dir: Path | None = None) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
        migrations_dir: Directory of .sql files; defaults to migrations/ at the repo root
    """
    if migrations_dir is None:
        # Structure: src/waitlist/adapters/repository/postgres.py -> migrations/
        migrations_dir = Path(__file__).parents[4] / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
