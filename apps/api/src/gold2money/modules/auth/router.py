"""Authentication router."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from gold2money.core.errors import AuthError, ServiceError
from gold2money.core.rate_limit import rate_limit
from gold2money.core.schemas import ApiResponse
from gold2money.core.sessions import SessionManager, get_session_manager
from gold2money.modules.auth.credentials import CredentialVerifier, get_credential_verifier
from gold2money.modules.auth.schemas import LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_login_request(request: Request) -> LoginRequest:
    """
    Parse the login body without rejecting it.

    A body that is not a JSON object with a string password counts as an
    absent password, so malformed requests fail like a wrong password.
    """
    if "json" not in request.headers.get("content-type", ""):
        return LoginRequest()
    try:
        # Undecodable JSON and schema mismatches both raise ValueError subclasses
        return LoginRequest.model_validate(await request.json())
    except ValueError:
        return LoginRequest()


@router.post(
    "/login",
    response_model=ApiResponse,
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": LoginRequest.model_json_schema()}},
        }
    },
    responses={
        401: {"description": "Wrong or malformed admin password"},
        429: {"description": "Too many login attempts"},
    },
)
@rate_limit("login")
async def login(
    request: Request,
    credentials: LoginRequest = Depends(read_login_request),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    sessions: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """
    Authenticate with the admin password and start an admin session.

    Raises:
        AuthError (401): Invalid password
    """
    if not verifier.verify(credentials.password):
        logger.warning("Rejected admin login attempt")
        raise AuthError()

    response = JSONResponse(ApiResponse(success=True, message="Login successful.").model_dump())
    try:
        await sessions.login(request, response)
    except Exception as e:
        logger.exception(f"Failed to create admin session: {e}")
        raise ServiceError(
            message="Server error. Please try again.",
            error_code="SESSION_ERROR",
            status_code=500,
        ) from e

    logger.info("Admin logged in")
    return response


@router.post(
    "/logout",
    response_model=ApiResponse,
    responses={500: {"description": "The session could not be destroyed"}},
)
async def logout(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """
    End the admin session and clear its cookie.

    Succeeds when there is no session to end.

    Raises:
        SessionError (500): The session store failed
    """
    response = JSONResponse(ApiResponse(success=True, message="Logged out successfully.").model_dump())
    await sessions.logout(request, response)
    logger.info("Admin logged out")
    return response
