"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Concurrency Design:
-------------------
Every mutation is a single-row statement, so each one is atomic on its
own and no explicit row locks are needed:

1. **UNIQUE (email)**: The authoritative backstop for concurrent
   registrations of one email. The losing INSERT raises UniqueViolation,
   which is translated to EmailAlreadyRegistered.

2. **Conditional UPDATE for activation**: ``WHERE activation_token = %s
   AND inactive`` matches at most once; a second activation with the same
   token updates zero rows.

3. **COALESCE for bearer tokens**: Concurrent token issues for one user
   converge on whichever token was stored first.

4. **CHECK (users_activation_state)**: A PENDING row always holds a token
   and an ACTIVE row never does.
"""

import logging
from pathlib import Path

from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.ports import User

logger = logging.getLogger(__name__)

_EMAIL_CONSTRAINT = "users_email_unique"

_COLUMNS = (
    "id, username, email, password_hash, inactive, activation_token, bearer_token, created_at"
)


def _to_user(row: tuple) -> User:
    return User(
        id=row[0],
        username=row[1],
        email=row[2],
        password_hash=row[3],
        inactive=row[4],
        activation_token=row[5],
        bearer_token=row[6],
        created_at=row[7],
    )


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

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

    def create(
        self, username: str, email: str, password_hash: str, activation_token: str
    ) -> User:
        """
        Insert a PENDING user and commit before returning.

        Raises:
            EmailAlreadyRegistered: If the UNIQUE (email) constraint fires
        """
        sql = f"""
            INSERT INTO users (username, email, password_hash, inactive, activation_token)
            VALUES (%s, %s, %s, TRUE, %s)
            RETURNING {_COLUMNS}
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (username, email, password_hash, activation_token))
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as exc:
            if exc.diag.constraint_name == _EMAIL_CONSTRAINT:
                raise EmailAlreadyRegistered(email) from exc
            raise
        return _to_user(row)

    def delete(self, user_id: int) -> None:
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM users WHERE id = %s", (user_id,))
            conn.commit()

    def find_by_id(self, user_id: int) -> User | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM users WHERE id = %s", (user_id,))

    def find_by_email(self, email: str) -> User | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM users WHERE email = %s", (email,))

    def find_by_bearer_token(self, token: str) -> User | None:
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM users WHERE bearer_token = %s", (token,)
        )

    def activate(self, activation_token: str) -> bool:
        """
        Transition PENDING -> ACTIVE for the row holding the token.

        Returns:
            True if exactly one row was activated
        """
        sql = """
            UPDATE users
            SET inactive = FALSE, activation_token = NULL
            WHERE activation_token = %s AND inactive
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (activation_token,))
            conn.commit()
            return cursor.rowcount == 1

    def update_username(self, user_id: int, username: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("UPDATE users SET username = %s WHERE id = %s", (username, user_id))
            conn.commit()
            return cursor.rowcount == 1

    def ensure_bearer_token(self, user_id: int, token: str) -> str | None:
        sql = """
            UPDATE users
            SET bearer_token = COALESCE(bearer_token, %s)
            WHERE id = %s
            RETURNING bearer_token
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (token, user_id))
            row = cursor.fetchone()
            conn.commit()
        return row[0] if row is not None else None

    def list_active(
        self, offset: int, limit: int, exclude_id: int | None = None
    ) -> tuple[list[User], int]:
        where = "WHERE NOT inactive"
        params: tuple = ()
        if exclude_id is not None:
            where += " AND id <> %s"
            params = (exclude_id,)

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(f"SELECT COUNT(*) FROM users {where}", params)
            total = cursor.fetchone()[0]
            cursor.execute(
                f"SELECT {_COLUMNS} FROM users {where} ORDER BY id LIMIT %s OFFSET %s",
                (*params, limit, offset),
            )
            rows = cursor.fetchall()
        return [_to_user(row) for row in rows], total

    def _fetch_one(self, sql: str, params: tuple) -> User | None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return _to_user(row) if row is not None else None


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

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
