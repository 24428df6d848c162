"""
api/routes/locations.py
-----------------------
Location hierarchy endpoints.

GET    /api/locations?workspace_id=&parent_id=  — Direct children (top level without parent_id).
POST   /api/locations                           — Create a location.
GET    /api/locations/{location_id}             — One location.
PATCH  /api/locations/{location_id}             — Rename / re-describe; a rename rebuilds descendant paths.
DELETE /api/locations/{location_id}             — Soft-delete the subtree, unassigning its boxes.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from box_organizer.dependencies import CurrentUser, DbSession
from box_organizer.schemas.location import (
    LocationCreate,
    LocationDeleted,
    LocationRead,
    LocationUpdate,
)
from box_organizer.services.location_service import LocationService

router = APIRouter(prefix="/api/locations", tags=["Locations"])


@router.get("", response_model=list[LocationRead], summary="List child locations")
async def list_locations(
    current_user: CurrentUser,
    db: DbSession,
    workspace_id: str = Query(...),
    parent_id: Optional[str] = Query(None),
) -> list[LocationRead]:
    locations = await LocationService.list_locations(db, workspace_id, current_user.id, parent_id)
    return [LocationRead.from_model(loc, parent_id) for loc in locations]


@router.post(
    "",
    response_model=LocationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a location",
)
async def create_location(
    body: LocationCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> LocationRead:
    location = await LocationService.create_location(db, current_user.id, body)
    return LocationRead.from_model(location, body.parent_id)


@router.get("/{location_id}", response_model=LocationRead, summary="Get a location")
async def get_location(
    location_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> LocationRead:
    location = await LocationService.get_location(db, location_id, current_user.id)
    parent_id = await LocationService.resolve_parent_id(db, location)
    return LocationRead.from_model(location, parent_id)


@router.patch("/{location_id}", response_model=LocationRead, summary="Update a location")
async def update_location(
    location_id: str,
    body: LocationUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> LocationRead:
    location = await LocationService.update_location(db, location_id, current_user.id, body)
    parent_id = await LocationService.resolve_parent_id(db, location)
    return LocationRead.from_model(location, parent_id)


@router.delete("/{location_id}", response_model=LocationDeleted, summary="Delete a location")
async def delete_location(
    location_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> LocationDeleted:
    deleted, unassigned = await LocationService.delete_location(db, location_id, current_user.id)
    return LocationDeleted(id=location_id, deleted_locations=deleted, unassigned_boxes=unassigned)
