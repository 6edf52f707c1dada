"""Repository behaviour that does not need a live Postgres."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

import psycopg
import pytest

from identity_service.repository import AccountRepository, StoreError


class UnreachablePool:
    """Pool stand-in whose connections always fail."""

    @contextmanager
    def connection(self):
        raise psycopg.OperationalError("connection refused")
        yield  # pragma: no cover


@pytest.fixture
def unreachable() -> AccountRepository:
    return AccountRepository(UnreachablePool())  # type: ignore[arg-type]


def test_email_lookup_wraps_driver_errors(unreachable):
    with pytest.raises(StoreError) as excinfo:
        unreachable.email_exists("a@x.com")
    assert isinstance(excinfo.value.__cause__, psycopg.OperationalError)


def test_login_data_lookup_wraps_driver_errors(unreachable):
    with pytest.raises(StoreError):
        unreachable.get_login_data_by_email("a@x.com")


def test_provisioning_wraps_driver_errors(unreachable):
    with pytest.raises(StoreError):
        with unreachable.provisioning():
            pass


def test_joined_row_maps_to_typed_records():
    now = datetime.now(timezone.utc)
    account_id, email_id, password_id, salt_id, public_id = (uuid.uuid4() for _ in range(5))
    row = (
        account_id, True, now, None,
        email_id, "a@x.com", now, None,
        password_id, "$2b$04$hash", "$2b$04$salt", now, None,
        salt_id, "$2b$12$extra", now, None,
        public_id, now, None,
    )

    data = AccountRepository(UnreachablePool())._map_login_data(row)  # type: ignore[arg-type]

    assert data.account.account_id == str(account_id)
    assert data.account.email_signup is True
    assert data.email.email == "a@x.com"
    assert data.password.password_hash == "$2b$04$hash"
    assert data.password.salt == "$2b$04$salt"
    assert data.salt.salt == "$2b$12$extra"
    assert data.public_id.public_id == str(public_id)
    assert {data.email.account_id, data.password.account_id, data.public_id.account_id} == {str(account_id)}
