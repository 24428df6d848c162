"""
services/profile_service.py
---------------------------
Profile lookups and preference updates.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.logging import get_logger
from box_organizer.models.profile import Profile, ThemePreference

logger = get_logger(__name__)


class ProfileService:

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: str) -> Profile | None:
        return await db.get(Profile, user_id)

    @staticmethod
    async def update_theme(
        db: AsyncSession, profile: Profile, theme: ThemePreference
    ) -> Profile:
        profile.theme_preference = theme.value
        await db.flush()
        await db.refresh(profile)
        logger.info("Theme preference updated", user_id=profile.id, theme=theme.value)
        return profile
