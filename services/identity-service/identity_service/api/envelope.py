"""Uniform JSON envelope returned by every user endpoint."""

from __future__ import annotations

from email.utils import formatdate
from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..domain.errors import IdentityError


class Envelope(BaseModel):
    """``{type, message, data, timestamp}`` body shared by success and error responses."""

    type: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=lambda: formatdate(usegmt=True))


def success(message: str, data: dict[str, Any], headers: dict[str, str] | None = None) -> JSONResponse:
    body = Envelope(type="success", message=message, data=data)
    return JSONResponse(status_code=200, content=body.model_dump(), headers=headers)


def failure(status_code: int, message: str) -> JSONResponse:
    kind = "system error" if status_code >= 500 else "error"
    body = Envelope(type=kind, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def from_error(exc: IdentityError, server_message: str) -> JSONResponse:
    """Render a flow error; server-side failures get a generic client message."""
    if exc.status_code >= 500:
        return failure(exc.status_code, server_message)
    return failure(exc.status_code, exc.message)
