"""
api/routes/profiles.py
----------------------
GET   /api/profiles/me        — The authenticated user's profile.
PATCH /api/profiles/me/theme  — Change the UI theme preference.
"""

from fastapi import APIRouter

from box_organizer.dependencies import CurrentUser, DbSession
from box_organizer.schemas.profile import ProfileRead, ThemeUpdate
from box_organizer.services.profile_service import ProfileService

router = APIRouter(prefix="/api/profiles", tags=["Profiles"])


@router.get("/me", response_model=ProfileRead, summary="Get the current user's profile")
async def get_me(current_user: CurrentUser) -> ProfileRead:
    return ProfileRead.model_validate(current_user)


@router.patch("/me/theme", response_model=ProfileRead, summary="Update theme preference")
async def update_theme(
    body: ThemeUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> ProfileRead:
    profile = await ProfileService.update_theme(db, current_user, body.theme_preference)
    return ProfileRead.model_validate(profile)
