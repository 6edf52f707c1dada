"""HTTP route definitions for user signup and login."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import envelope
from ..config import ConfigurationError
from ..domain.contracts import Credentials
from ..domain.errors import IdentityError, MissingFieldError
from ..domain.service import AccountService
from ..security.tokens import issue_login_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])

LOGIN_FAILED_MESSAGE = "An unexpected error occurred, we could not login you right now"
REGISTER_FAILED_MESSAGE = "An error occurred on our side, we could not register you"
INVALID_BODY_MESSAGE = "Request body must be a JSON object with email and password"


class CredentialsRequest(BaseModel):
    """JSON body accepted by the login and register endpoints.

    Both fields are optional at the schema level so that a missing value is
    reported with its own message instead of a generic validation error.
    """

    email: str | None = None
    password: str | None = None


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def _credentials(payload: CredentialsRequest | None) -> Credentials:
    """Reject absent or empty fields before any flow runs."""
    payload = payload or CredentialsRequest()
    if not payload.email:
        raise MissingFieldError("email")
    if not payload.password:
        raise MissingFieldError("password")
    return Credentials(email=payload.email, password=payload.password)


@router.post("/signin/login", response_model=envelope.Envelope)
@router.post("/login", response_model=envelope.Envelope)
def login(
    payload: CredentialsRequest | None = None,
    service: AccountService = Depends(get_service),
) -> JSONResponse:
    """Verify credentials and return a bearer token in the body and header."""
    try:
        result = service.login(_credentials(payload))
        token = issue_login_token(result.public_id)
    except IdentityError as exc:
        if exc.status_code >= 500:
            logger.error("login failed: %s", exc.message)
        return envelope.from_error(exc, LOGIN_FAILED_MESSAGE)
    except ConfigurationError:
        logger.exception("login token could not be signed")
        return envelope.failure(500, LOGIN_FAILED_MESSAGE)

    return envelope.success(
        "User logged in",
        {"token": token},
        headers={"Authorization": f"Bearer {token}"},
    )


@router.post("/signup/register", response_model=envelope.Envelope)
def register(
    payload: CredentialsRequest | None = None,
    service: AccountService = Depends(get_service),
) -> JSONResponse:
    """Create an account and return its public identifier."""
    try:
        result = service.register(_credentials(payload))
    except IdentityError as exc:
        if exc.status_code >= 500:
            logger.error("registration failed: %s", exc.message)
        return envelope.from_error(exc, REGISTER_FAILED_MESSAGE)

    return envelope.success(
        "User registered successfully",
        {"user": {"userId": result.public_id.public_id}},
    )


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body validation failures in the envelope instead of FastAPI's 422."""
    fields = {str(error["loc"][-1]) for error in exc.errors() if error.get("loc")}
    if "email" in fields:
        message = MissingFieldError("email").message
    elif "password" in fields:
        message = MissingFieldError("password").message
    else:
        message = INVALID_BODY_MESSAGE
    logger.debug("rejected request body on %s: %s", request.url.path, message)
    return envelope.failure(400, message)


def install_exception_handlers(app: FastAPI) -> None:
    """Register the handlers user endpoints rely on."""
    app.add_exception_handler(RequestValidationError, _request_validation_error)
