"""Table definitions for the account aggregate.

Each satellite table holds exactly one row per account, enforced by a UNIQUE
foreign key. Tables are created when absent; there are no migrations.
"""

from __future__ import annotations

import logging

from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id UUID PRIMARY KEY,
    email_signup BOOLEAN NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    modified_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS account_emails (
    email_id UUID PRIMARY KEY,
    account_id UUID NOT NULL UNIQUE REFERENCES accounts (account_id),
    email TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    modified_at TIMESTAMPTZ,
    CONSTRAINT account_emails_email_key UNIQUE (email)
);

CREATE TABLE IF NOT EXISTS account_passwords (
    password_id UUID PRIMARY KEY,
    account_id UUID NOT NULL UNIQUE REFERENCES accounts (account_id),
    password_hash TEXT NOT NULL,
    salt TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    modified_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS account_salts (
    salt_id UUID PRIMARY KEY,
    account_id UUID NOT NULL UNIQUE REFERENCES accounts (account_id),
    salt TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    modified_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS account_public_ids (
    public_id UUID PRIMARY KEY,
    account_id UUID NOT NULL UNIQUE REFERENCES accounts (account_id),
    created_at TIMESTAMPTZ NOT NULL,
    modified_at TIMESTAMPTZ
);
"""

EMAIL_UNIQUE_CONSTRAINT = "account_emails_email_key"


def ensure_schema(pool: ConnectionPool) -> None:
    """Create the account tables if they do not exist yet."""
    with pool.connection() as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
    logger.info("account schema ensured")
