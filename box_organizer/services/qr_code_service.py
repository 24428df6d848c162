"""
services/qr_code_service.py
---------------------------
Business logic for QR codes: batch generation, lookup, listing and the
generated → printed transition after labels are rendered.

Short ids look like 'QR-7K2M9P': the 'QR-' prefix plus six characters from
[A-Z0-9]. Uniqueness is checked against the table before insert, retrying up
to MAX_SHORT_ID_ATTEMPTS times per code.
"""

import secrets
import string
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.errors import QrCodeNotFoundError
from box_organizer.core.logging import get_logger
from box_organizer.models.qr_code import QrCode, QrStatus
from box_organizer.models.workspace import WRITE_ROLES
from box_organizer.services.workspace_service import WorkspaceService

logger = get_logger(__name__)

QR_PREFIX = "QR-"
QR_ALPHABET = string.ascii_uppercase + string.digits
QR_RANDOM_LENGTH = 6
MAX_SHORT_ID_ATTEMPTS = 100


def generate_qr_short_id() -> str:
    return QR_PREFIX + "".join(secrets.choice(QR_ALPHABET) for _ in range(QR_RANDOM_LENGTH))


class QrCodeService:

    @staticmethod
    async def _unique_short_id(db: AsyncSession, reserved: set[str]) -> str:
        for _ in range(MAX_SHORT_ID_ATTEMPTS):
            candidate = generate_qr_short_id()
            if candidate in reserved:
                continue
            taken = await db.execute(select(QrCode.id).where(QrCode.short_id == candidate))
            if taken.scalar_one_or_none() is None:
                return candidate
        raise RuntimeError(
            f"Could not generate a unique QR short id after {MAX_SHORT_ID_ATTEMPTS} attempts"
        )

    @staticmethod
    async def batch_generate(
        db: AsyncSession, workspace_id: str, user_id: str, quantity: int
    ) -> list[QrCode]:
        """Create ``quantity`` codes in 'generated' state."""
        await WorkspaceService.require_member(db, workspace_id, user_id, WRITE_ROLES)

        reserved: set[str] = set()
        codes: list[QrCode] = []
        for _ in range(quantity):
            short_id = await QrCodeService._unique_short_id(db, reserved)
            reserved.add(short_id)
            codes.append(
                QrCode(
                    workspace_id=workspace_id,
                    short_id=short_id,
                    status=QrStatus.generated.value,
                )
            )
        db.add_all(codes)
        await db.flush()
        for code in codes:
            await db.refresh(code)
        logger.info("QR codes generated", workspace_id=workspace_id, quantity=quantity)
        return codes

    @staticmethod
    async def list_for_workspace(
        db: AsyncSession,
        workspace_id: str,
        user_id: str,
        status: Optional[QrStatus] = None,
    ) -> list[QrCode]:
        await WorkspaceService.require_member(db, workspace_id, user_id)
        query = select(QrCode).where(QrCode.workspace_id == workspace_id)
        if status is not None:
            query = query.where(QrCode.status == status.value)
        result = await db.execute(query.order_by(QrCode.created_at.desc(), QrCode.short_id))
        return list(result.scalars().all())

    @staticmethod
    async def get_by_short_id(db: AsyncSession, short_id: str, user_id: str) -> QrCode:
        """Code visible to ``user_id``; codes of other workspaces are reported as missing."""
        result = await db.execute(select(QrCode).where(QrCode.short_id == short_id))
        code = result.scalar_one_or_none()
        if code is None:
            raise QrCodeNotFoundError()
        if await WorkspaceService.get_membership(db, code.workspace_id, user_id) is None:
            raise QrCodeNotFoundError()
        return code

    @staticmethod
    async def get_for_labels(
        db: AsyncSession, workspace_id: str, user_id: str, short_ids: Sequence[str]
    ) -> list[QrCode]:
        """Codes of ``workspace_id`` in the order requested."""
        await WorkspaceService.require_member(db, workspace_id, user_id, WRITE_ROLES)
        result = await db.execute(
            select(QrCode).where(
                QrCode.workspace_id == workspace_id,
                QrCode.short_id.in_(list(short_ids)),
            )
        )
        by_short_id = {code.short_id: code for code in result.scalars().all()}
        missing = [s for s in short_ids if s not in by_short_id]
        if missing:
            raise QrCodeNotFoundError(f"QR code {missing[0]} not found in this workspace")
        return [by_short_id[s] for s in short_ids]

    @staticmethod
    async def mark_printed(db: AsyncSession, codes: Sequence[QrCode]) -> int:
        """Move 'generated' codes to 'printed'; assigned codes keep their state."""
        changed = 0
        for code in codes:
            if code.status == QrStatus.generated.value:
                code.status = QrStatus.printed.value
                changed += 1
        if changed:
            await db.flush()
            logger.info("QR codes marked printed", count=changed)
        return changed
