"""
api/routes/export.py
--------------------
GET /api/export/inventory?workspace_id=&location_id=&format=csv|json

Returns a downloadable file; never cached.
"""

from typing import Optional

from fastapi import APIRouter, Query, Response

from box_organizer.dependencies import CurrentUser, DbSession
from box_organizer.schemas.export import ExportFormat
from box_organizer.services.export_service import ExportService

router = APIRouter(prefix="/api/export", tags=["Export"])

_MEDIA_TYPES = {
    ExportFormat.csv: "text/csv; charset=utf-8",
    ExportFormat.json: "application/json",
}


@router.get(
    "/inventory",
    response_class=Response,
    summary="Export the inventory of a workspace",
    responses={200: {"content": {"text/csv": {}, "application/json": {}}}},
)
async def export_inventory(
    current_user: CurrentUser,
    db: DbSession,
    workspace_id: str = Query(...),
    location_id: Optional[str] = Query(None),
    export_format: ExportFormat = Query(ExportFormat.csv, alias="format"),
) -> Response:
    content, filename = await ExportService.export_inventory(
        db,
        workspace_id=workspace_id,
        user_id=current_user.id,
        export_format=export_format,
        location_id=location_id,
    )
    return Response(
        content=content,
        media_type=_MEDIA_TYPES[export_format],
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
    )
