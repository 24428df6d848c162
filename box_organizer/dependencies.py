"""
dependencies.py
---------------
FastAPI dependency injection functions for authentication.

Flow:
  1. The access token is taken from the Authorization: Bearer header or,
     failing that, from the HttpOnly session cookie.
  2. decode_access_token validates and parses the JWT (no DB round-trip).
  3. get_current_user_id confirms the identity record still exists, so
     revoked accounts are rejected even while their token has not expired.
  4. get_current_user additionally loads the Profile.

Account deletion depends on get_current_user_id only: a caller whose
identity is alive but whose profile is gone must reach the service and get
its 404, not a 401.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.config import settings
from box_organizer.core.logging import get_logger, mask_jwt
from box_organizer.core.security import decode_access_token
from box_organizer.db.session import get_db
from box_organizer.models.profile import Profile
from box_organizer.services.identity_service import IdentityProvider, get_identity_provider
from box_organizer.services.profile_service import ProfileService

logger = get_logger(__name__)

# tokenUrl must match the login endpoint path
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Unauthorized",
    headers={"WWW-Authenticate": "Bearer"},
)


def get_request_token(
    request: Request,
    bearer: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> str:
    token = bearer or request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise _CREDENTIALS_EXCEPTION
    return token


async def get_current_user_id(
    token: Annotated[str, Depends(get_request_token)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> str:
    """
    Decode the JWT and return the caller's id.
    Raises 401 if the token is invalid or the identity has been revoked.
    """
    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
        if not user_id:
            raise _CREDENTIALS_EXCEPTION
    except JWTError as exc:
        logger.warning("JWT decode failed", token=mask_jwt(token), error=str(exc))
        raise _CREDENTIALS_EXCEPTION

    # Always re-verify against DB so revoked users are rejected
    if not await identity.is_active(db, user_id):
        logger.warning("Identity from valid JWT not found in DB", user_id=user_id)
        raise _CREDENTIALS_EXCEPTION

    return user_id


async def get_current_user(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Profile:
    """Load the caller's Profile; 401 if it no longer exists."""
    profile = await ProfileService.get_profile(db, user_id)
    if profile is None:
        logger.warning("Profile for authenticated user not found", user_id=user_id)
        raise _CREDENTIALS_EXCEPTION
    return profile


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
CurrentUser = Annotated[Profile, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
