"""Account service orchestrating registration and login."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from email_validator import EmailNotValidError, validate_email

from .account import LoginResult, RegistrationResult
from .contracts import Credentials
from .errors import (
    AccountNotFoundError,
    DuplicateEmailError,
    IdentityError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidInputError,
    StoreFailureError,
)
from ..metrics import LOGINS, REGISTRATIONS
from ..repository import AccountRepository, EmailTakenError, StoreError
from ..security.passwords import (
    PasswordEncodingError,
    PasswordTooLongError,
    generate_salt,
    hash_password,
    salt_of,
    verify_password,
)

logger = logging.getLogger(__name__)


def _require_valid_email(email: str, message: str) -> None:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise InvalidEmailError(message) from exc


class AccountService:
    """Registration and login workflows backed by Postgres storage."""

    def __init__(self, repository: AccountRepository) -> None:
        """Store the repository used by both flows."""
        self._repository = repository

    def register(self, credentials: Credentials) -> RegistrationResult:
        """Provision an account and its satellite records for a new email address.

        Raises
        ------
        InvalidEmailError
            The email is not syntactically valid; the store is not touched.
        DuplicateEmailError
            Another account already owns the email.
        InvalidInputError
            The password is too long or cannot be encoded for hashing.
        StoreFailureError
            Postgres failed; no rows of the new account are left behind.
        """
        try:
            result = self._register(credentials)
        except IdentityError as exc:
            REGISTRATIONS.labels(outcome=exc.outcome).inc()
            raise
        REGISTRATIONS.labels(outcome="success").inc()
        return result

    def login(self, credentials: Credentials) -> LoginResult:
        """Check an email/password pair and return the account's public identity.

        Raises
        ------
        InvalidEmailError
            The email is not syntactically valid.
        AccountNotFoundError
            No account owns the email.
        InvalidCredentialsError
            The password does not match the stored hash.
        StoreFailureError
            Postgres failed.
        """
        try:
            result = self._login(credentials)
        except IdentityError as exc:
            LOGINS.labels(outcome=exc.outcome).inc()
            raise
        LOGINS.labels(outcome="success").inc()
        return result

    def _register(self, credentials: Credentials) -> RegistrationResult:
        email = credentials.email
        _require_valid_email(email, "Invalid email address")

        try:
            taken = self._repository.email_exists(email)
        except StoreError as exc:
            logger.error("email uniqueness check failed: %s", exc, exc_info=True)
            raise StoreFailureError() from exc
        if taken:
            logger.debug("registration rejected, email %s already in use", email)
            raise DuplicateEmailError()

        try:
            password_hash = hash_password(credentials.password)
        except PasswordTooLongError as exc:
            raise InvalidInputError("Password is too long") from exc
        except PasswordEncodingError as exc:
            raise InvalidInputError("Password contains invalid characters") from exc
        # stored alongside the account, never read by verify_password
        extra_salt = generate_salt()

        now = datetime.now(timezone.utc)
        try:
            with self._repository.provisioning() as writer:
                account = writer.create_account(email_signup=True, created_at=now)
                email_record = writer.create_email(account.account_id, email, now)
                writer.create_password(
                    account.account_id, password_hash, salt_of(password_hash), now
                )
                writer.create_salt(account.account_id, extra_salt, now)
                public_id = writer.create_public_id(account.account_id, now)
        except EmailTakenError as exc:
            logger.debug("registration lost race for email %s", email)
            raise DuplicateEmailError() from exc
        except StoreError as exc:
            logger.error("account provisioning failed: %s", exc, exc_info=True)
            raise StoreFailureError() from exc

        logger.info("registered account public_id=%s", public_id.public_id)
        return RegistrationResult(account=account, email=email_record, public_id=public_id)

    def _login(self, credentials: Credentials) -> LoginResult:
        email = credentials.email
        _require_valid_email(email, "Email address is not valid")

        try:
            login_data = self._repository.get_login_data_by_email(email)
        except StoreError as exc:
            logger.error("login data lookup failed: %s", exc, exc_info=True)
            raise StoreFailureError() from exc
        if login_data is None:
            logger.debug("login rejected, no account for email %s", email)
            raise AccountNotFoundError()

        if not verify_password(credentials.password, login_data.password.password_hash):
            logger.info("login rejected for public_id=%s: wrong password", login_data.public_id.public_id)
            raise InvalidCredentialsError()

        logger.info("login succeeded for public_id=%s", login_data.public_id.public_id)
        return LoginResult(
            public_id=login_data.public_id.public_id,
            email=login_data.email.email,
        )
