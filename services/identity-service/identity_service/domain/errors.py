"""Typed failures raised by the registration and login flows."""

from __future__ import annotations


class IdentityError(Exception):
    """Base class for flow failures that map onto an HTTP response."""

    status_code: int = 500
    outcome: str = "error"
    default_message: str = "identity request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(IdentityError):
    status_code = 400
    outcome = "invalid_input"
    default_message = "invalid request"


class MissingFieldError(InvalidInputError):
    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"{field_name.capitalize()} is required")


class InvalidEmailError(InvalidInputError):
    outcome = "invalid_email"
    default_message = "Invalid email address"


class DuplicateEmailError(IdentityError):
    status_code = 400
    outcome = "duplicate_email"
    default_message = "Email is taken"


class AccountNotFoundError(IdentityError):
    status_code = 404
    outcome = "not_found"
    default_message = "User not found"


class InvalidCredentialsError(IdentityError):
    status_code = 401
    outcome = "invalid_credentials"
    default_message = "Invalid password"


class StoreFailureError(IdentityError):
    """The account store could not complete a query or insert."""

    status_code = 500
    outcome = "store_failure"
    default_message = "account store unavailable"


class SigningFailureError(IdentityError):
    status_code = 500
    outcome = "signing_failure"
    default_message = "could not sign login token"
