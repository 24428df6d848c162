"""
api/routes/auth.py
------------------
Authentication endpoints.

POST   /api/auth/register        — Create an account (profile + default workspace).
POST   /api/auth/login           — Exchange credentials for a JWT access token.
                                   Accepts BOTH OAuth2 form data (Swagger UI) and JSON body.
                                   Also sets the session cookie.
POST   /api/auth/session         — Exchange an access token for the HttpOnly session cookie.
DELETE /api/auth/session         — Clear the session cookie.
DELETE /api/auth/delete-account  — Permanently delete the caller and everything they own.
"""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jose import JWTError
from pydantic import ValidationError

from box_organizer.core.config import settings
from box_organizer.core.errors import ValidationFailed
from box_organizer.core.logging import get_logger, mask_jwt
from box_organizer.core.security import create_access_token, decode_access_token
from box_organizer.dependencies import CurrentUserId, DbSession
from box_organizer.schemas.auth import (
    DeleteAccountResponse,
    LoginRequest,
    RegisterRequest,
    SessionRequest,
    SessionResponse,
    TokenResponse,
)
from box_organizer.schemas.common import first_error_per_field
from box_organizer.schemas.profile import ProfileRead
from box_organizer.services.account_service import AccountDeletionService
from box_organizer.services.identity_service import IdentityProvider, get_identity_provider
from box_organizer.services.profile_service import ProfileService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

Identity = Annotated[IdentityProvider, Depends(get_identity_provider)]


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="strict",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="strict",
    )


async def _read_login(request: Request) -> LoginRequest:
    """Parse a JSON body, or OAuth2 form data where 'username' holds the email."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            return LoginRequest.model_validate(await request.json())
        form = await request.form()
        return LoginRequest.model_validate(
            {
                "email": form.get("username") or form.get("email"),
                "password": form.get("password"),
            }
        )
    except ValidationError as exc:
        raise ValidationFailed(details=first_error_per_field(exc.errors()))
    except ValueError:
        raise ValidationFailed("Malformed request body")


@router.post(
    "/register",
    response_model=ProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(
    body: RegisterRequest,
    db: DbSession,
    identity: Identity,
) -> ProfileRead:
    """
    Create the account, its profile and a default workspace owned by it.
    Duplicate email → 409.
    """
    profile = await identity.register(db, body.email, body.password, body.full_name)
    return ProfileRead.model_validate(profile)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login and receive a JWT access token",
)
async def login(
    request: Request,
    response: Response,
    db: DbSession,
    identity: Identity,
) -> TokenResponse:
    """
    Authenticate with email + password and receive a signed JWT.

    In Swagger UI: use the Authorize button and enter your email as username.
    Via curl: send JSON {"email": ..., "password": ...} or form data
        -d "username=you@email.com&password=yourpassword"
    """
    body = await _read_login(request)
    profile = await identity.authenticate(db, body.email, body.password)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = create_access_token(subject=profile.id, email=profile.email, expires_delta=expires)
    _set_session_cookie(response, token)
    logger.info("User logged in", user_id=profile.id)

    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=int(expires.total_seconds()),
        user=ProfileRead.model_validate(profile),
    )


@router.post(
    "/session",
    response_model=SessionResponse,
    summary="Store an access token in the HttpOnly session cookie",
)
async def create_session(
    body: SessionRequest,
    response: Response,
    db: DbSession,
) -> SessionResponse:
    try:
        payload = decode_access_token(body.token)
    except JWTError as exc:
        logger.warning("Session token rejected", token=mask_jwt(body.token), error=str(exc))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user_id = payload.get("sub")
    profile = await ProfileService.get_profile(db, user_id) if user_id else None
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    _set_session_cookie(response, body.token)
    return SessionResponse(user_id=profile.id, email=profile.email)


@router.delete("/session", summary="Clear the session cookie")
async def delete_session(response: Response) -> dict:
    _clear_session_cookie(response)
    return {"message": "Session cleared"}


@router.delete(
    "/delete-account",
    response_model=DeleteAccountResponse,
    summary="Permanently delete the current account",
)
async def delete_account(
    response: Response,
    user_id: CurrentUserId,
    db: DbSession,
    identity: Identity,
) -> DeleteAccountResponse:
    """
    Deletes every workspace the caller owns (with its boxes, locations and
    memberships), resets their assigned QR codes, removes the profile and
    revokes the identity. All-or-nothing. A caller whose profile is already
    gone gets 404.
    """
    user_id = await AccountDeletionService(db, identity).delete_account(user_id)
    _clear_session_cookie(response)
    return DeleteAccountResponse(user_id=user_id)
