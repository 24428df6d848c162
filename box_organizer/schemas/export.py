"""
schemas/export.py
-----------------
Inventory export records and the JSON export envelope.
"""

from enum import Enum

from pydantic import BaseModel

EXPORT_FORMAT_VERSION = "1.0"


class ExportFormat(str, Enum):
    csv = "csv"
    json = "json"


class ExportRecord(BaseModel):
    name: str
    description: str
    tags: list[str]
    location: str
    qr_code: str
    status: str
    short_id: str


class ExportMeta(BaseModel):
    workspace_id: str
    export_date: str
    total_records: int
    format_version: str = EXPORT_FORMAT_VERSION


class ExportDocument(BaseModel):
    meta: ExportMeta
    data: list[ExportRecord]
