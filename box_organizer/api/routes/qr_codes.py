"""
api/routes/qr_codes.py
----------------------
QR code endpoints.

POST /api/qr-codes/batch          — Generate a batch of codes for a workspace.
GET  /api/qr-codes?workspace_id=  — List a workspace's codes (optionally by status).
GET  /api/qr-codes/{short_id}     — Resolve a scanned code.
POST /api/qr-codes/labels         — Printable PDF labels; generated codes become 'printed'.
"""

from typing import Optional

from fastapi import APIRouter, Query, Response, status

from box_organizer.core.errors import ValidationFailed
from box_organizer.dependencies import CurrentUser, DbSession
from box_organizer.models.qr_code import QR_SHORT_ID_PATTERN, QrStatus
from box_organizer.schemas.qr_code import (
    INVALID_SHORT_ID_MESSAGE,
    LabelRequest,
    QrBatchRequest,
    QrCodeList,
    QrCodeRead,
)
from box_organizer.services.label_service import plan_labels, render_pdf
from box_organizer.services.qr_code_service import QrCodeService

router = APIRouter(prefix="/api/qr-codes", tags=["QR Codes"])


@router.post(
    "/batch",
    response_model=QrCodeList,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a batch of QR codes",
)
async def batch_generate(
    body: QrBatchRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> QrCodeList:
    codes = await QrCodeService.batch_generate(db, body.workspace_id, current_user.id, body.quantity)
    return QrCodeList(data=[QrCodeRead.model_validate(c) for c in codes])


@router.get("", response_model=QrCodeList, summary="List QR codes of a workspace")
async def list_qr_codes(
    current_user: CurrentUser,
    db: DbSession,
    workspace_id: str = Query(...),
    status_filter: Optional[QrStatus] = Query(None, alias="status"),
) -> QrCodeList:
    codes = await QrCodeService.list_for_workspace(db, workspace_id, current_user.id, status_filter)
    return QrCodeList(data=[QrCodeRead.model_validate(c) for c in codes])


@router.post(
    "/labels",
    response_class=Response,
    summary="Render printable labels as PDF",
    responses={200: {"content": {"application/pdf": {}}}},
)
async def render_labels(
    body: LabelRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> Response:
    codes = await QrCodeService.get_for_labels(db, body.workspace_id, current_user.id, body.short_ids)
    pages = plan_labels([c.short_id for c in codes], body.format, body.rows, body.cols)
    pdf = render_pdf(pages, body.format)
    await QrCodeService.mark_printed(db, codes)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="qr-labels.pdf"'},
    )


@router.get("/{short_id}", response_model=QrCodeRead, summary="Look up a QR code")
async def get_qr_code(short_id: str, current_user: CurrentUser, db: DbSession) -> QrCodeRead:
    if not QR_SHORT_ID_PATTERN.match(short_id):
        raise ValidationFailed(details={"short_id": INVALID_SHORT_ID_MESSAGE})
    code = await QrCodeService.get_by_short_id(db, short_id, current_user.id)
    return QrCodeRead.model_validate(code)
