from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class AccountRecord:
    """Aggregate root for an identity. Its id never leaves the service."""

    account_id: str
    email_signup: bool
    created_at: datetime
    modified_at: datetime | None = None


@dataclass(slots=True)
class EmailRecord:
    email_id: str
    account_id: str
    email: str
    created_at: datetime
    modified_at: datetime | None = None


@dataclass(slots=True)
class PasswordRecord:
    """Stored bcrypt hash together with the salt it was produced with."""

    password_id: str
    account_id: str
    password_hash: str
    salt: str
    created_at: datetime
    modified_at: datetime | None = None


@dataclass(slots=True)
class SaltRecord:
    """Independently generated salt kept alongside the account; not used to verify."""

    salt_id: str
    account_id: str
    salt: str
    created_at: datetime
    modified_at: datetime | None = None


@dataclass(slots=True)
class PublicIdRecord:
    """Externally visible identifier, the only one placed in tokens and responses."""

    public_id: str
    account_id: str
    created_at: datetime
    modified_at: datetime | None = None


@dataclass(slots=True)
class LoginData:
    """Typed projection of the account join used by the login flow."""

    account: AccountRecord
    email: EmailRecord
    password: PasswordRecord
    salt: SaltRecord
    public_id: PublicIdRecord


@dataclass(slots=True)
class RegistrationResult:
    account: AccountRecord
    email: EmailRecord
    public_id: PublicIdRecord


@dataclass(slots=True)
class LoginResult:
    """Outward-facing login outcome; carries no internal id or hash material."""

    public_id: str
    email: str
