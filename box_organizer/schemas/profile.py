"""
schemas/profile.py
------------------
Profile responses and theme preference updates.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from box_organizer.models.profile import ThemePreference


class ProfileRead(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    theme_preference: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ThemeUpdate(BaseModel):
    theme_preference: ThemePreference
