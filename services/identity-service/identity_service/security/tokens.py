"""Utilities for issuing and validating login JWTs."""

from __future__ import annotations

import time
from typing import Any

import jwt

from ..config import get_settings
from ..domain.errors import SigningFailureError

ALGORITHM = "HS256"


def issue_login_token(public_id: str) -> str:
    """Create a signed JWT identifying an authenticated account.

    Parameters
    ----------
    public_id:
        Public identifier of the account, embedded in the ``value`` claim.

    Returns
    -------
    str
        The encoded JWT, valid for ``token_ttl_seconds``.

    Raises
    ------
    ConfigurationError
        When no signing secret is configured.
    SigningFailureError
        When PyJWT cannot produce a token.
    """

    settings = get_settings()
    secret = settings.require_token_secret()
    now = int(time.time())
    payload: dict[str, Any] = {
        "value": public_id,
        "iat": now,
        "exp": now + settings.token_ttl_seconds,
    }
    try:
        return jwt.encode(payload, secret, algorithm=ALGORITHM)
    except (jwt.PyJWTError, TypeError, ValueError) as exc:
        raise SigningFailureError() from exc


def decode_login_token(token: str) -> dict[str, Any]:
    """Decode and verify a login JWT returning its payload.

    Raises
    ------
    jwt.PyJWTError
        Propagated when the token is invalid, expired, or signed with another key.
    """

    settings = get_settings()
    return jwt.decode(
        token,
        settings.require_token_secret(),
        algorithms=[ALGORITHM],
        options={"require": ["exp", "value"]},
    )
