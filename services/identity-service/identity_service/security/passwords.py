"""Password hashing and verification backed by bcrypt."""

from __future__ import annotations

import bcrypt

from ..config import get_settings

# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72

# "$2b$" + two-digit cost + "$" + 22 characters of encoded salt.
_SALT_LENGTH = 29


class UnhashablePasswordError(ValueError):
    """Raised when a password cannot be turned into bcrypt input."""


class PasswordTooLongError(UnhashablePasswordError):
    """Raised when a password exceeds what bcrypt can hash without truncation."""


class PasswordEncodingError(UnhashablePasswordError):
    """Raised when a password holds characters with no UTF-8 encoding, such as lone surrogates."""


def generate_salt(rounds: int | None = None) -> str:
    """Return a fresh bcrypt salt string for the given work factor."""
    if rounds is None:
        rounds = get_settings().password_hash_rounds
    return bcrypt.gensalt(rounds=rounds).decode("utf-8")


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash a password with bcrypt.

    Parameters
    ----------
    password:
        Plain-text password supplied by the user.
    salt:
        Optional bcrypt salt from :func:`generate_salt`. A new one is generated
        when omitted, so repeated calls on the same password yield different hashes.

    Raises
    ------
    PasswordTooLongError
        When the UTF-8 encoded password is longer than bcrypt accepts.
    PasswordEncodingError
        When the password cannot be encoded as UTF-8.
    """
    try:
        password_bytes = password.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise PasswordEncodingError("password is not valid UTF-8 text") from exc
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        raise PasswordTooLongError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt_bytes = (salt or generate_salt()).encode("utf-8")
    return bcrypt.hashpw(password_bytes, salt_bytes).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def salt_of(password_hash: str) -> str:
    """Return the salt embedded in a bcrypt hash."""
    return password_hash[:_SALT_LENGTH]
