"""
api/routes/boxes.py
-------------------
Box endpoints.

GET    /api/boxes?workspace_id=&q=&location_id=&is_assigned=&limit=&offset=
POST   /api/boxes                  — Create a box (optionally linking a QR code).
POST   /api/boxes/check-duplicate  — Does another box in the workspace use this name?
GET    /api/boxes/{box_id}         — Box with its location and QR code.
PATCH  /api/boxes/{box_id}         — Partial update.
DELETE /api/boxes/{box_id}         — Delete; the linked QR code becomes reusable.
"""

from typing import Optional

from fastapi import APIRouter, Query, Response, status

from box_organizer.core.config import settings
from box_organizer.core.errors import ValidationFailed
from box_organizer.dependencies import CurrentUser, DbSession
from box_organizer.schemas.box import (
    BoxCreate,
    BoxDetail,
    BoxList,
    BoxLocationSummary,
    BoxQrCodeSummary,
    BoxRead,
    BoxUpdate,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
)
from box_organizer.schemas.common import PageMeta
from box_organizer.services.box_service import BoxService

router = APIRouter(prefix="/api/boxes", tags=["Boxes"])


async def _detail(db, box) -> BoxDetail:
    location, qr_code = await BoxService.get_box_links(db, box)
    return BoxDetail(
        **BoxRead.model_validate(box).model_dump(),
        location=BoxLocationSummary.model_validate(location) if location else None,
        qr_code=BoxQrCodeSummary.model_validate(qr_code) if qr_code else None,
    )


@router.get("", response_model=BoxList, summary="List and search boxes")
async def list_boxes(
    current_user: CurrentUser,
    db: DbSession,
    workspace_id: str = Query(...),
    q: Optional[str] = Query(None, max_length=200),
    location_id: Optional[str] = Query(None),
    is_assigned: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> BoxList:
    search = q.strip() if q else None
    if search and len(search) < settings.SEARCH_MIN_LENGTH:
        raise ValidationFailed(
            details={"q": f"Search query must be at least {settings.SEARCH_MIN_LENGTH} characters"}
        )
    boxes, total = await BoxService.list_boxes(
        db,
        workspace_id=workspace_id,
        user_id=current_user.id,
        q=search,
        location_id=location_id,
        is_assigned=is_assigned,
        limit=limit,
        offset=offset,
    )
    return BoxList(
        data=[BoxRead.model_validate(b) for b in boxes],
        meta=PageMeta(total=total, limit=limit, offset=offset),
    )


@router.post(
    "",
    response_model=BoxRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a box",
)
async def create_box(body: BoxCreate, current_user: CurrentUser, db: DbSession) -> BoxRead:
    box = await BoxService.create_box(db, current_user.id, body)
    return BoxRead.model_validate(box)


@router.post(
    "/check-duplicate",
    response_model=DuplicateCheckResponse,
    summary="Check whether a box name is already used in the workspace",
)
async def check_duplicate(
    body: DuplicateCheckRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> DuplicateCheckResponse:
    is_duplicate, count = await BoxService.check_duplicate_name(
        db, body.workspace_id, current_user.id, body.name, body.exclude_box_id
    )
    return DuplicateCheckResponse(is_duplicate=is_duplicate, count=count)


@router.get("/{box_id}", response_model=BoxDetail, summary="Get a box")
async def get_box(box_id: str, current_user: CurrentUser, db: DbSession) -> BoxDetail:
    box = await BoxService.get_box(db, box_id, current_user.id)
    return await _detail(db, box)


@router.patch("/{box_id}", response_model=BoxDetail, summary="Update a box")
async def update_box(
    box_id: str,
    body: BoxUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> BoxDetail:
    box = await BoxService.update_box(db, box_id, current_user.id, body)
    return await _detail(db, box)


@router.delete(
    "/{box_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a box",
)
async def delete_box(box_id: str, current_user: CurrentUser, db: DbSession) -> Response:
    await BoxService.delete_box(db, box_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
