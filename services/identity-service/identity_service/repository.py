"""Database repository for the account aggregate and its satellite records."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

import psycopg
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import (
    AccountRecord,
    EmailRecord,
    LoginData,
    PasswordRecord,
    PublicIdRecord,
    SaltRecord,
)
from .schema import EMAIL_UNIQUE_CONSTRAINT


class StoreError(Exception):
    """Raised when Postgres rejects a query or cannot be reached."""


class EmailTakenError(StoreError):
    """Raised when an insert collides with the unique email constraint."""


_LOGIN_DATA_QUERY = """
    SELECT a.account_id, a.email_signup, a.created_at, a.modified_at,
           e.email_id, e.email, e.created_at, e.modified_at,
           p.password_id, p.password_hash, p.salt, p.created_at, p.modified_at,
           s.salt_id, s.salt, s.created_at, s.modified_at,
           pid.public_id, pid.created_at, pid.modified_at
    FROM accounts a
    JOIN account_emails e ON e.account_id = a.account_id
    JOIN account_passwords p ON p.account_id = a.account_id
    JOIN account_salts s ON s.account_id = a.account_id
    JOIN account_public_ids pid ON pid.account_id = a.account_id
    WHERE e.email = %s
"""


class AccountWriter:
    """Inserts the records of one account inside an open transaction."""

    def __init__(self, cursor: psycopg.Cursor) -> None:
        self._cur = cursor

    def create_account(self, *, email_signup: bool, created_at: datetime) -> AccountRecord:
        """Insert the root account row."""
        self._cur.execute(
            """
            INSERT INTO accounts (account_id, email_signup, created_at)
            VALUES (%s, %s, %s)
            RETURNING account_id, email_signup, created_at, modified_at
            """,
            (uuid.uuid4(), email_signup, created_at),
        )
        row = self._cur.fetchone()
        return AccountRecord(str(row[0]), row[1], row[2], row[3])

    def create_email(self, account_id: str, email: str, created_at: datetime) -> EmailRecord:
        self._cur.execute(
            """
            INSERT INTO account_emails (email_id, account_id, email, created_at)
            VALUES (%s, %s, %s, %s)
            RETURNING email_id, account_id, email, created_at, modified_at
            """,
            (uuid.uuid4(), account_id, email, created_at),
        )
        row = self._cur.fetchone()
        return EmailRecord(str(row[0]), str(row[1]), row[2], row[3], row[4])

    def create_password(
        self, account_id: str, password_hash: str, salt: str, created_at: datetime
    ) -> PasswordRecord:
        self._cur.execute(
            """
            INSERT INTO account_passwords (password_id, account_id, password_hash, salt, created_at)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING password_id, account_id, password_hash, salt, created_at, modified_at
            """,
            (uuid.uuid4(), account_id, password_hash, salt, created_at),
        )
        row = self._cur.fetchone()
        return PasswordRecord(str(row[0]), str(row[1]), row[2], row[3], row[4], row[5])

    def create_salt(self, account_id: str, salt: str, created_at: datetime) -> SaltRecord:
        self._cur.execute(
            """
            INSERT INTO account_salts (salt_id, account_id, salt, created_at)
            VALUES (%s, %s, %s, %s)
            RETURNING salt_id, account_id, salt, created_at, modified_at
            """,
            (uuid.uuid4(), account_id, salt, created_at),
        )
        row = self._cur.fetchone()
        return SaltRecord(str(row[0]), str(row[1]), row[2], row[3], row[4])

    def create_public_id(self, account_id: str, created_at: datetime) -> PublicIdRecord:
        self._cur.execute(
            """
            INSERT INTO account_public_ids (public_id, account_id, created_at)
            VALUES (%s, %s, %s)
            RETURNING public_id, account_id, created_at, modified_at
            """,
            (uuid.uuid4(), account_id, created_at),
        )
        row = self._cur.fetchone()
        return PublicIdRecord(str(row[0]), str(row[1]), row[2], row[3])


class AccountRepository:
    """Postgres-backed account persistence."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def email_exists(self, email: str) -> bool:
        """Return ``True`` when an account already uses the email address."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        "SELECT EXISTS (SELECT 1 FROM account_emails WHERE email = %s)",
                        (email,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"email lookup failed: {exc}") from exc
        return bool(row[0])

    @contextmanager
    def provisioning(self) -> Iterator[AccountWriter]:
        """Yield a writer whose inserts commit together or not at all.

        Any exception raised inside the block rolls back every row written so
        far. Database failures are re-raised as :class:`StoreError`, with
        collisions on the email constraint surfacing as :class:`EmailTakenError`.
        """
        try:
            with self._pool.connection() as conn:
                with conn.transaction():
                    with conn.cursor(row_factory=tuple_row) as cur:
                        yield AccountWriter(cur)
        except psycopg.errors.UniqueViolation as exc:
            if exc.diag.constraint_name == EMAIL_UNIQUE_CONSTRAINT:
                raise EmailTakenError("email already registered") from exc
            raise StoreError(f"account insert rejected: {exc}") from exc
        except psycopg.Error as exc:
            raise StoreError(f"account insert failed: {exc}") from exc

    def get_login_data_by_email(self, email: str) -> LoginData | None:
        """Fetch every record of the account owning ``email`` or return ``None``."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(_LOGIN_DATA_QUERY, (email,))
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"login data lookup failed: {exc}") from exc
        if not row:
            return None
        return self._map_login_data(row)

    def _map_login_data(self, row: tuple) -> LoginData:
        """Split a joined row into its per-table records."""
        account_id = str(row[0])
        return LoginData(
            account=AccountRecord(account_id, row[1], row[2], row[3]),
            email=EmailRecord(str(row[4]), account_id, row[5], row[6], row[7]),
            password=PasswordRecord(str(row[8]), account_id, row[9], row[10], row[11], row[12]),
            salt=SaltRecord(str(row[13]), account_id, row[14], row[15], row[16]),
            public_id=PublicIdRecord(str(row[17]), account_id, row[18], row[19]),
        )
