"""
models/profile.py
-----------------
Identity records.

AuthUser stands in for the hosted identity provider's user table: it owns
the credentials and is the record revoked at the end of account deletion;
while the row exists the identity is active.
Profile is the application-side row (one per authenticated user, same id).
The hashed_password column stores bcrypt hashes only and is never logged.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from box_organizer.db.base import Base, TimestampMixin, generate_uuid


class ThemePreference(str, PyEnum):
    light = "light"
    dark = "dark"
    system = "system"


class AuthUser(Base, TimestampMixin):
    __tablename__ = "auth_users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<AuthUser id={self.id} email={self.email}>"


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("auth_users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    theme_preference: Mapped[str] = mapped_column(
        String(10), nullable=False, default=ThemePreference.system.value
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} email={self.email}>"
