"""
schemas/qr_code.py
------------------
Pydantic models for QR code batches, lookups and printable labels.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from box_organizer.core.config import settings
from box_organizer.models.qr_code import QR_SHORT_ID_PATTERN

INVALID_SHORT_ID_MESSAGE = "Invalid QR code format (expected QR-XXXXXX)"


def validate_qr_short_id(value: str) -> str:
    if not QR_SHORT_ID_PATTERN.match(value):
        raise ValueError(INVALID_SHORT_ID_MESSAGE)
    return value


class LabelFormat(str, Enum):
    a4_grid = "a4-grid"
    brother_62x29 = "brother-62x29"
    brother_62x100 = "brother-62x100"


class QrBatchRequest(BaseModel):
    workspace_id: str
    quantity: int = Field(..., ge=settings.QR_BATCH_MIN, le=settings.QR_BATCH_MAX)


class QrCodeRead(BaseModel):
    id: str
    workspace_id: str
    short_id: str
    status: str
    box_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class QrCodeList(BaseModel):
    data: list[QrCodeRead]


class LabelRequest(BaseModel):
    workspace_id: str
    short_ids: list[str] = Field(..., min_length=1, max_length=settings.QR_BATCH_MAX)
    format: LabelFormat = LabelFormat.a4_grid
    rows: Optional[int] = Field(None, ge=1, le=10)
    cols: Optional[int] = Field(None, ge=1, le=6)

    @field_validator("short_ids")
    @classmethod
    def check_short_ids(cls, v: list[str]) -> list[str]:
        return [validate_qr_short_id(s) for s in v]
