"""
services/export_service.py
--------------------------
Inventory export to CSV or JSON.

One record per box, joined with its (live) location and linked QR code.
CSV columns are fixed:

    Name,Description,Tags,Location,QR Code,Status,Short ID

and quoting is left to the csv module (minimal quoting, quotes doubled).
"""

import csv
import io
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.errors import WorkspaceMismatchError
from box_organizer.core.logging import get_logger
from box_organizer.core.paths import format_breadcrumb
from box_organizer.models.box import Box
from box_organizer.models.location import Location
from box_organizer.models.qr_code import QrCode
from box_organizer.schemas.export import (
    ExportDocument,
    ExportFormat,
    ExportMeta,
    ExportRecord,
)
from box_organizer.services.location_service import LocationService
from box_organizer.services.workspace_service import WorkspaceService

logger = get_logger(__name__)

CSV_HEADER = ["Name", "Description", "Tags", "Location", "QR Code", "Status", "Short ID"]
TAG_SEPARATOR = ","


class ExportService:

    @staticmethod
    async def collect_records(
        db: AsyncSession,
        workspace_id: str,
        user_id: str,
        location_id: Optional[str] = None,
    ) -> list[ExportRecord]:
        """Export rows for the workspace, or for one location's subtree."""
        await WorkspaceService.require_member(db, workspace_id, user_id)

        conditions = [Box.workspace_id == workspace_id]
        if location_id is not None:
            location = await LocationService.get_location(db, location_id, user_id)
            if location.workspace_id != workspace_id:
                raise WorkspaceMismatchError("location")
            subtree = await LocationService.get_subtree(db, location)
            conditions.append(Box.location_id.in_([loc.id for loc in subtree]))

        result = await db.execute(
            select(Box, Location.path, QrCode.short_id, QrCode.status)
            .outerjoin(
                Location,
                and_(Location.id == Box.location_id, Location.live()),
            )
            .outerjoin(QrCode, QrCode.box_id == Box.id)
            .where(*conditions)
            .order_by(Box.name, Box.short_id)
        )
        return [
            ExportRecord(
                name=box.name,
                description=box.description or "",
                tags=list(box.tags or []),
                location=format_breadcrumb(path, humanize=True),
                qr_code=qr_short_id or "",
                status=qr_status or "",
                short_id=box.short_id,
            )
            for box, path, qr_short_id, qr_status in result.all()
        ]

    @staticmethod
    def to_csv(records: list[ExportRecord]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for record in records:
            writer.writerow(
                [
                    record.name,
                    record.description,
                    TAG_SEPARATOR.join(record.tags),
                    record.location,
                    record.qr_code,
                    record.status,
                    record.short_id,
                ]
            )
        return buffer.getvalue()

    @staticmethod
    def to_document(
        workspace_id: str, records: list[ExportRecord], exported_at: datetime
    ) -> ExportDocument:
        return ExportDocument(
            meta=ExportMeta(
                workspace_id=workspace_id,
                export_date=exported_at.isoformat(),
                total_records=len(records),
            ),
            data=records,
        )

    @staticmethod
    def filename(workspace_id: str, export_format: ExportFormat, exported_at: datetime) -> str:
        return f"inventory-{workspace_id}-{exported_at:%Y-%m-%d}.{export_format.value}"

    @staticmethod
    async def export_inventory(
        db: AsyncSession,
        workspace_id: str,
        user_id: str,
        export_format: ExportFormat = ExportFormat.csv,
        location_id: Optional[str] = None,
    ) -> tuple[str, str]:
        """
        Build the export body.

        Returns (content, filename).
        """
        exported_at = datetime.now(timezone.utc)
        records = await ExportService.collect_records(db, workspace_id, user_id, location_id)
        if export_format is ExportFormat.json:
            content = ExportService.to_document(workspace_id, records, exported_at).model_dump_json(indent=2)
        else:
            content = ExportService.to_csv(records)
        logger.info(
            "Inventory exported",
            workspace_id=workspace_id,
            format=export_format.value,
            records=len(records),
        )
        return content, ExportService.filename(workspace_id, export_format, exported_at)
