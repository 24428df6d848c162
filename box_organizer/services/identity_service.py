"""
services/identity_service.py
----------------------------
Identity provider boundary.

The application talks to its identity provider only through IdentityProvider.
LocalIdentityProvider keeps credentials in the auth_users table; a hosted
provider would implement the same three calls against its admin API.

Sign-up mirrors the provider's sign-up hook chain: auth user → profile →
default workspace → owner membership, all in the caller's transaction.
"""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.config import settings
from box_organizer.core.errors import AuthRevocationError, ConflictError
from box_organizer.core.logging import get_logger
from box_organizer.core.security import hash_password, verify_password
from box_organizer.models.profile import AuthUser, Profile
from box_organizer.services.workspace_service import WorkspaceService

logger = get_logger(__name__)


class IdentityProvider:
    """Interface the rest of the application depends on."""

    async def register(
        self, db: AsyncSession, email: str, password: str, full_name: str | None = None
    ) -> Profile:
        raise NotImplementedError

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> Profile | None:
        raise NotImplementedError

    async def is_active(self, db: AsyncSession, user_id: str) -> bool:
        raise NotImplementedError

    async def revoke(self, db: AsyncSession, user_id: str) -> None:
        raise NotImplementedError


class LocalIdentityProvider(IdentityProvider):

    async def register(
        self, db: AsyncSession, email: str, password: str, full_name: str | None = None
    ) -> Profile:
        """
        Create the auth user, profile and default workspace.
        Raises ConflictError on duplicate email.
        """
        email = email.lower()
        existing = await db.execute(select(AuthUser.id).where(AuthUser.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(f"Email '{email}' is already registered")

        auth_user = AuthUser(email=email, hashed_password=hash_password(password))
        db.add(auth_user)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(f"Email '{email}' is already registered")

        profile = Profile(id=auth_user.id, email=email, full_name=full_name)
        db.add(profile)
        await db.flush()
        await WorkspaceService.create_workspace(db, profile.id, settings.DEFAULT_WORKSPACE_NAME)
        await db.refresh(profile)
        logger.info("User registered", user_id=profile.id)
        return profile

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> Profile | None:
        """
        Verify credentials and return the Profile if valid, else None.
        Email lookup is case-insensitive; revoked accounts have no auth user left.
        """
        result = await db.execute(select(AuthUser).where(AuthUser.email == email.lower()))
        auth_user = result.scalar_one_or_none()
        if auth_user is None:
            return None
        if not verify_password(password, auth_user.hashed_password):
            return None
        return await db.get(Profile, auth_user.id)

    async def is_active(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(select(AuthUser.id).where(AuthUser.id == user_id))
        return result.scalar_one_or_none() is not None

    async def revoke(self, db: AsyncSession, user_id: str) -> None:
        """
        Remove the credentials so no new session can be issued and the email
        can be registered again.
        """
        try:
            result = await db.execute(delete(AuthUser).where(AuthUser.id == user_id))
        except SQLAlchemyError as exc:
            logger.error("Identity revocation failed", user_id=user_id, error=str(exc))
            raise AuthRevocationError(stage="revoking_auth") from exc
        if result.rowcount == 0:
            logger.error("Identity record missing during revocation", user_id=user_id)
            raise AuthRevocationError("Identity record not found", stage="revoking_auth")
        logger.info("Identity revoked", user_id=user_id)


identity_provider = LocalIdentityProvider()


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency; tests override it to inject failures."""
    return identity_provider
