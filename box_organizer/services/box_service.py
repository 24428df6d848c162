"""
services/box_service.py
-----------------------
Business logic for boxes.

A box may be linked to one QR code of its workspace. The link is kept in
qr_codes.box_id and the code's status follows it:
  - create with qr_code_id  → code becomes 'assigned'
  - delete                  → code goes back to 'generated', box_id NULL
"""

import secrets
import string
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.errors import (
    BoxNotFoundError,
    LocationNotFoundError,
    QrCodeAlreadyAssignedError,
    QrCodeNotFoundError,
    WorkspaceMismatchError,
)
from box_organizer.core.logging import get_logger
from box_organizer.models.box import Box
from box_organizer.models.location import Location
from box_organizer.models.qr_code import QrCode, QrStatus
from box_organizer.models.workspace import WRITE_ROLES
from box_organizer.schemas.box import BoxCreate, BoxUpdate
from box_organizer.services.workspace_service import WorkspaceService

logger = get_logger(__name__)

BOX_SHORT_ID_ALPHABET = string.ascii_letters + string.digits
BOX_SHORT_ID_LENGTH = 10
MAX_SHORT_ID_ATTEMPTS = 10


def generate_box_short_id() -> str:
    return "".join(secrets.choice(BOX_SHORT_ID_ALPHABET) for _ in range(BOX_SHORT_ID_LENGTH))


class BoxService:

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    async def _unique_short_id(db: AsyncSession) -> str:
        for _ in range(MAX_SHORT_ID_ATTEMPTS):
            candidate = generate_box_short_id()
            taken = await db.execute(select(Box.id).where(Box.short_id == candidate))
            if taken.scalar_one_or_none() is None:
                return candidate
        raise RuntimeError("Could not generate a unique box short id")

    @staticmethod
    async def _location_in_workspace(
        db: AsyncSession, location_id: str, workspace_id: str
    ) -> Location:
        result = await db.execute(
            select(Location).where(Location.id == location_id, Location.live())
        )
        location = result.scalar_one_or_none()
        if location is None:
            raise LocationNotFoundError()
        if location.workspace_id != workspace_id:
            raise WorkspaceMismatchError("location")
        return location

    # ── Queries ──────────────────────────────────────────────────────────────

    @staticmethod
    async def get_box(db: AsyncSession, box_id: str, user_id: str) -> Box:
        box = await db.get(Box, box_id)
        if box is None:
            raise BoxNotFoundError()
        if await WorkspaceService.get_membership(db, box.workspace_id, user_id) is None:
            raise BoxNotFoundError()
        return box

    @staticmethod
    async def get_box_links(
        db: AsyncSession, box: Box
    ) -> tuple[Optional[Location], Optional[QrCode]]:
        """Location and QR code currently linked to ``box``."""
        location = None
        if box.location_id is not None:
            location = await db.get(Location, box.location_id)
            if location is not None and location.is_deleted:
                location = None
        result = await db.execute(select(QrCode).where(QrCode.box_id == box.id))
        return location, result.scalar_one_or_none()

    @staticmethod
    async def list_boxes(
        db: AsyncSession,
        workspace_id: str,
        user_id: str,
        q: Optional[str] = None,
        location_id: Optional[str] = None,
        is_assigned: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Box], int]:
        """
        Filtered, paginated box listing.
        ``q`` is a case-insensitive match against the search document.
        """
        await WorkspaceService.require_member(db, workspace_id, user_id)

        conditions = [Box.workspace_id == workspace_id]
        if q:
            conditions.append(Box.search_vector.contains(q.strip().lower(), autoescape=True))
        if location_id is not None:
            conditions.append(Box.location_id == location_id)
        if is_assigned is True:
            conditions.append(Box.location_id.is_not(None))
        elif is_assigned is False:
            conditions.append(Box.location_id.is_(None))

        total = await db.scalar(select(func.count()).select_from(Box).where(*conditions))
        result = await db.execute(
            select(Box)
            .where(*conditions)
            .order_by(Box.created_at.desc(), Box.name)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def check_duplicate_name(
        db: AsyncSession,
        workspace_id: str,
        user_id: str,
        name: str,
        exclude_box_id: Optional[str] = None,
    ) -> tuple[bool, int]:
        """Count boxes in the workspace with the same name, ignoring case."""
        await WorkspaceService.require_member(db, workspace_id, user_id)
        conditions = [
            Box.workspace_id == workspace_id,
            func.lower(Box.name) == name.strip().lower(),
        ]
        if exclude_box_id is not None:
            conditions.append(Box.id != exclude_box_id)
        count = await db.scalar(select(func.count()).select_from(Box).where(*conditions)) or 0
        return count > 0, count

    # ── Mutations ────────────────────────────────────────────────────────────

    @staticmethod
    async def create_box(db: AsyncSession, user_id: str, data: BoxCreate) -> Box:
        """
        Create a box, optionally placing it in a location and linking a
        QR code. Both must belong to the same workspace as the box.
        """
        await WorkspaceService.require_member(db, data.workspace_id, user_id, WRITE_ROLES)

        if data.location_id is not None:
            await BoxService._location_in_workspace(db, data.location_id, data.workspace_id)

        qr_code = None
        if data.qr_code_id is not None:
            qr_code = await db.get(QrCode, data.qr_code_id)
            if qr_code is None:
                raise QrCodeNotFoundError()
            if qr_code.workspace_id != data.workspace_id:
                raise WorkspaceMismatchError("qr_code")
            if qr_code.box_id is not None or qr_code.status == QrStatus.assigned.value:
                raise QrCodeAlreadyAssignedError()

        box = Box(
            workspace_id=data.workspace_id,
            location_id=data.location_id,
            short_id=await BoxService._unique_short_id(db),
            name=data.name,
            description=data.description,
            tags=data.tags,
        )
        box.refresh_search_vector()
        db.add(box)
        await db.flush()

        if qr_code is not None:
            qr_code.box_id = box.id
            qr_code.status = QrStatus.assigned.value
            await db.flush()

        await db.refresh(box)
        logger.info(
            "Box created",
            box_id=box.id,
            workspace_id=box.workspace_id,
            qr_code_id=data.qr_code_id,
        )
        return box

    @staticmethod
    async def update_box(db: AsyncSession, box_id: str, user_id: str, data: BoxUpdate) -> Box:
        box = await BoxService.get_box(db, box_id, user_id)
        await WorkspaceService.require_member(db, box.workspace_id, user_id, WRITE_ROLES)

        fields = data.model_fields_set
        if "location_id" in fields and data.location_id is not None:
            await BoxService._location_in_workspace(db, data.location_id, box.workspace_id)

        if "name" in fields:
            box.name = data.name
        if "description" in fields:
            box.description = data.description
        if "tags" in fields:
            box.tags = data.tags or []
        if "location_id" in fields:
            box.location_id = data.location_id
        box.refresh_search_vector()

        await db.flush()
        await db.refresh(box)
        logger.info("Box updated", box_id=box.id, fields=sorted(fields))
        return box

    @staticmethod
    async def delete_box(db: AsyncSession, box_id: str, user_id: str) -> None:
        """Delete the box and release its QR code for reuse."""
        box = await BoxService.get_box(db, box_id, user_id)
        await WorkspaceService.require_member(db, box.workspace_id, user_id, WRITE_ROLES)

        await db.execute(
            update(QrCode)
            .where(QrCode.box_id == box.id)
            .values(box_id=None, status=QrStatus.generated.value)
        )
        await db.delete(box)
        await db.flush()
        logger.info("Box deleted", box_id=box_id, workspace_id=box.workspace_id)
