from __future__ import annotations

import os

# Settings read the environment at import time.
os.environ.setdefault("TOKEN_SECRET_KEY", "test-secret-key-for-identity-service")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import uuid
from collections import Counter
from contextlib import contextmanager
from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from identity_service.api import routes
from identity_service.domain.account import (
    AccountRecord,
    EmailRecord,
    LoginData,
    PasswordRecord,
    PublicIdRecord,
    SaltRecord,
)
from identity_service.domain.service import AccountService
from identity_service.repository import EmailTakenError, StoreError


class FakeWriter:
    """Stages inserts until the provisioning block exits cleanly."""

    def __init__(self, repository: "FakeRepository") -> None:
        self._repo = repository
        self.accounts: dict[str, AccountRecord] = {}
        self.emails: dict[str, EmailRecord] = {}
        self.passwords: dict[str, PasswordRecord] = {}
        self.salts: dict[str, SaltRecord] = {}
        self.public_ids: dict[str, PublicIdRecord] = {}

    def _touch(self, name: str) -> None:
        self._repo.calls[name] += 1
        if self._repo.fail_on == name:
            raise StoreError(f"{name} rejected")

    def _require_account(self, account_id: str) -> None:
        if account_id not in self.accounts and account_id not in self._repo.accounts:
            raise StoreError("referenced account missing")

    def create_account(self, *, email_signup: bool, created_at: datetime) -> AccountRecord:
        self._touch("create_account")
        record = AccountRecord(str(uuid.uuid4()), email_signup, created_at)
        self.accounts[record.account_id] = record
        return record

    def create_email(self, account_id: str, email: str, created_at: datetime) -> EmailRecord:
        self._touch("create_email")
        self._require_account(account_id)
        record = EmailRecord(str(uuid.uuid4()), account_id, email, created_at)
        self.emails[account_id] = record
        return record

    def create_password(
        self, account_id: str, password_hash: str, salt: str, created_at: datetime
    ) -> PasswordRecord:
        self._touch("create_password")
        self._require_account(account_id)
        record = PasswordRecord(str(uuid.uuid4()), account_id, password_hash, salt, created_at)
        self.passwords[account_id] = record
        return record

    def create_salt(self, account_id: str, salt: str, created_at: datetime) -> SaltRecord:
        self._touch("create_salt")
        self._require_account(account_id)
        record = SaltRecord(str(uuid.uuid4()), account_id, salt, created_at)
        self.salts[account_id] = record
        return record

    def create_public_id(self, account_id: str, created_at: datetime) -> PublicIdRecord:
        self._touch("create_public_id")
        self._require_account(account_id)
        record = PublicIdRecord(str(uuid.uuid4()), account_id, created_at)
        self.public_ids[account_id] = record
        return record


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviors."""

    def __init__(self) -> None:
        self.accounts: dict[str, AccountRecord] = {}
        self.emails: dict[str, EmailRecord] = {}
        self.passwords: dict[str, PasswordRecord] = {}
        self.salts: dict[str, SaltRecord] = {}
        self.public_ids: dict[str, PublicIdRecord] = {}
        self.calls: Counter[str] = Counter()
        self.fail_on: str | None = None
        # simulate a concurrent registration winning the unique constraint
        self.hide_existing_emails = False

    @property
    def store_calls(self) -> int:
        return sum(self.calls.values())

    def email_exists(self, email: str) -> bool:
        self.calls["email_exists"] += 1
        if self.fail_on == "email_exists":
            raise StoreError("connection refused")
        if self.hide_existing_emails:
            return False
        return any(record.email == email for record in self.emails.values())

    @contextmanager
    def provisioning(self):
        self.calls["provisioning"] += 1
        writer = FakeWriter(self)
        yield writer
        staged = [record.email for record in writer.emails.values()]
        if any(record.email in staged for record in self.emails.values()):
            raise EmailTakenError("email already registered")
        self.accounts.update(writer.accounts)
        self.emails.update(writer.emails)
        self.passwords.update(writer.passwords)
        self.salts.update(writer.salts)
        self.public_ids.update(writer.public_ids)

    def get_login_data_by_email(self, email: str) -> LoginData | None:
        self.calls["get_login_data_by_email"] += 1
        if self.fail_on == "get_login_data_by_email":
            raise StoreError("connection refused")
        for account_id, email_record in self.emails.items():
            if email_record.email == email:
                return LoginData(
                    account=self.accounts[account_id],
                    email=email_record,
                    password=self.passwords[account_id],
                    salt=self.salts[account_id],
                    public_id=self.public_ids[account_id],
                )
        return None


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def service(repository: FakeRepository) -> AccountService:
    return AccountService(repository)


@pytest.fixture
def api_client(service: AccountService, repository: FakeRepository):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    routes.install_exception_handlers(app)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client, repository
