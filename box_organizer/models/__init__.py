"""
models/__init__.py
------------------
Re-export all models so create_tables.py (and Alembic, later) can discover
every table via a single import:

    from box_organizer.models import Base
"""

from box_organizer.db.base import Base
from box_organizer.models.profile import AuthUser, Profile, ThemePreference
from box_organizer.models.workspace import MemberRole, Workspace, WorkspaceMember
from box_organizer.models.location import Location
from box_organizer.models.box import Box
from box_organizer.models.qr_code import QrCode, QrStatus

__all__ = [
    "Base",
    "AuthUser",
    "Profile",
    "ThemePreference",
    "MemberRole",
    "Workspace",
    "WorkspaceMember",
    "Location",
    "Box",
    "QrCode",
    "QrStatus",
]
