"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Credentials:
    """Email/password pair submitted to the registration and login flows."""

    email: str
    password: str
