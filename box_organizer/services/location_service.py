"""
services/location_service.py
----------------------------
Business logic for the location hierarchy.

Paths are materialized ('root.garage.shelf_a') and maintained here, in the
same transaction as the change that affects them:
  - create:  parent path + sanitized name segment
  - rename:  last segment recomputed, every live descendant rebased
  - delete:  soft delete of the whole subtree, boxes inside unassigned

Limits (checked before anything is written):
  - depth, counted in path segments including 'root'  ≤ LOCATION_MAX_DEPTH
  - live children per parent                           ≤ LOCATION_MAX_CHILDREN
  - no two live locations of a workspace share a path
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.config import settings
from box_organizer.core.errors import (
    LocationNotFoundError,
    MaxChildrenExceededError,
    MaxDepthExceededError,
    ParentNotFoundError,
    SiblingConflictError,
)
from box_organizer.core.logging import get_logger
from box_organizer.core.paths import (
    ROOT,
    SEPARATOR,
    build_location_path,
    parent_path,
    path_depth,
    rebase_path,
    regenerate_path,
)
from box_organizer.models.box import Box
from box_organizer.models.location import Location
from box_organizer.models.workspace import WRITE_ROLES
from box_organizer.schemas.location import LocationCreate, LocationUpdate
from box_organizer.services.workspace_service import WorkspaceService

logger = get_logger(__name__)


class LocationService:

    # ── Queries ──────────────────────────────────────────────────────────────

    @staticmethod
    async def _load_live(db: AsyncSession, location_id: str) -> Location | None:
        result = await db.execute(
            select(Location).where(Location.id == location_id, Location.live())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _live_descendants(db: AsyncSession, workspace_id: str, path: str) -> list[Location]:
        result = await db.execute(
            select(Location).where(
                Location.workspace_id == workspace_id,
                Location.live(),
                Location.path.startswith(path + SEPARATOR, autoescape=True),
            )
        )
        return list(result.scalars().all())

    @staticmethod
    async def _live_children(db: AsyncSession, workspace_id: str, path: str) -> list[Location]:
        depth = path_depth(path) + 1
        descendants = await LocationService._live_descendants(db, workspace_id, path)
        return [loc for loc in descendants if path_depth(loc.path) == depth]

    @staticmethod
    async def get_subtree(db: AsyncSession, location: Location) -> list[Location]:
        """The location itself followed by every live descendant."""
        descendants = await LocationService._live_descendants(db, location.workspace_id, location.path)
        return [location] + descendants

    @staticmethod
    async def get_location(db: AsyncSession, location_id: str, user_id: str) -> Location:
        """Live location visible to ``user_id``; anything else is a 404."""
        location = await LocationService._load_live(db, location_id)
        if location is None:
            raise LocationNotFoundError()
        if await WorkspaceService.get_membership(db, location.workspace_id, user_id) is None:
            raise LocationNotFoundError()
        return location

    @staticmethod
    async def resolve_parent_id(db: AsyncSession, location: Location) -> Optional[str]:
        """Id of the live location one level up, or None for top-level locations."""
        parent = parent_path(location.path)
        if not parent or parent == ROOT:
            return None
        result = await db.execute(
            select(Location.id).where(
                Location.workspace_id == location.workspace_id,
                Location.path == parent,
                Location.live(),
            )
        )
        return result.scalars().first()

    @staticmethod
    async def list_locations(
        db: AsyncSession,
        workspace_id: str,
        user_id: str,
        parent_id: Optional[str] = None,
    ) -> list[Location]:
        """Direct children of ``parent_id`` (top-level locations when omitted)."""
        await WorkspaceService.require_member(db, workspace_id, user_id)
        base = ROOT
        if parent_id is not None:
            parent = await LocationService._load_live(db, parent_id)
            if parent is None or parent.workspace_id != workspace_id:
                raise ParentNotFoundError()
            base = parent.path
        children = await LocationService._live_children(db, workspace_id, base)
        return sorted(children, key=lambda loc: loc.name.lower())

    # ── Validation ───────────────────────────────────────────────────────────

    @staticmethod
    async def _validate_placement(
        db: AsyncSession,
        workspace_id: str,
        path: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        """Depth, fan-out and sibling checks for a location placed at ``path``."""
        if path_depth(path) > settings.LOCATION_MAX_DEPTH:
            raise MaxDepthExceededError()

        siblings = [
            loc
            for loc in await LocationService._live_children(db, workspace_id, parent_path(path))
            if loc.id != exclude_id
        ]
        if len(siblings) >= settings.LOCATION_MAX_CHILDREN:
            raise MaxChildrenExceededError()
        if any(loc.path == path for loc in siblings):
            raise SiblingConflictError()

    # ── Mutations ────────────────────────────────────────────────────────────

    @staticmethod
    async def create_location(db: AsyncSession, user_id: str, data: LocationCreate) -> Location:
        """
        Create a location under ``data.parent_id`` (or at the top level).
        Raises ParentNotFoundError, MaxDepthExceededError,
        MaxChildrenExceededError or SiblingConflictError.
        """
        await WorkspaceService.require_member(db, data.workspace_id, user_id, WRITE_ROLES)

        parent_location_path = None
        if data.parent_id is not None:
            parent = await LocationService._load_live(db, data.parent_id)
            if parent is None or parent.workspace_id != data.workspace_id:
                raise ParentNotFoundError()
            parent_location_path = parent.path

        path = build_location_path(parent_location_path, data.name)
        await LocationService._validate_placement(db, data.workspace_id, path)

        location = Location(
            workspace_id=data.workspace_id,
            name=data.name,
            description=data.description,
            path=path,
        )
        db.add(location)
        await db.flush()
        await db.refresh(location)
        logger.info(
            "Location created",
            location_id=location.id,
            workspace_id=location.workspace_id,
            path=location.path,
        )
        return location

    @staticmethod
    async def update_location(
        db: AsyncSession, location_id: str, user_id: str, data: LocationUpdate
    ) -> Location:
        """
        Apply a PATCH. A rename moves the location's path and rebases every
        live descendant before anything is flushed.
        """
        location = await LocationService.get_location(db, location_id, user_id)
        await WorkspaceService.require_member(db, location.workspace_id, user_id, WRITE_ROLES)

        if "name" in data.model_fields_set and data.name != location.name:
            old_path = location.path
            new_path = regenerate_path(old_path, data.name)
            if new_path != old_path:
                await LocationService._validate_placement(
                    db, location.workspace_id, new_path, exclude_id=location.id
                )
                descendants = await LocationService._live_descendants(
                    db, location.workspace_id, old_path
                )
                for child in descendants:
                    child.path = rebase_path(child.path, old_path, new_path)
                location.path = new_path
                logger.info(
                    "Location path rebuilt",
                    location_id=location.id,
                    old_path=old_path,
                    new_path=new_path,
                    descendants=len(descendants),
                )
            location.name = data.name

        if "description" in data.model_fields_set:
            location.description = data.description

        await db.flush()
        await db.refresh(location)
        logger.info("Location updated", location_id=location.id)
        return location

    @staticmethod
    async def delete_location(
        db: AsyncSession, location_id: str, user_id: str
    ) -> tuple[int, int]:
        """
        Soft-delete the location and its subtree; boxes stored anywhere in
        it become unassigned.

        Returns (locations deleted, boxes unassigned).
        """
        location = await LocationService.get_location(db, location_id, user_id)
        await WorkspaceService.require_member(db, location.workspace_id, user_id, WRITE_ROLES)

        subtree = await LocationService.get_subtree(db, location)
        ids = [loc.id for loc in subtree]
        for loc in subtree:
            loc.is_deleted = True

        result = await db.execute(
            update(Box)
            .where(Box.workspace_id == location.workspace_id, Box.location_id.in_(ids))
            .values(location_id=None)
        )
        await db.flush()
        logger.info(
            "Location deleted",
            location_id=location.id,
            locations=len(ids),
            unassigned_boxes=result.rowcount,
        )
        return len(ids), result.rowcount
