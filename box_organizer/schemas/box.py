"""
schemas/box.py
--------------
Pydantic models for boxes.

Tags are normalised on the way in: surrounding whitespace stripped, empty
entries dropped, duplicates removed (first occurrence wins).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from box_organizer.core.config import settings
from box_organizer.schemas.common import PageMeta, clean_description, clean_name


def clean_tags(value: Optional[list[str]]) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise ValueError("Tags must be a list of strings")
    tags: list[str] = []
    for raw in value:
        tag = raw.strip()
        if not tag:
            continue
        if len(tag) > settings.MAX_TAG_LENGTH:
            raise ValueError(f"Each tag must be at most {settings.MAX_TAG_LENGTH} characters")
        if tag not in tags:
            tags.append(tag)
    if len(tags) > settings.MAX_TAGS:
        raise ValueError(f"A box can have at most {settings.MAX_TAGS} tags")
    return tags


class BoxCreate(BaseModel):
    workspace_id: str
    name: str
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    location_id: Optional[str] = None
    qr_code_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: Optional[str]) -> Optional[str]:
        return clean_description(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        return clean_tags(v)


class BoxUpdate(BaseModel):
    """
    PATCH body. Omitted fields are left alone; location_id=null unassigns
    the box.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    location_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Name cannot be null")
        return clean_name(v)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: Optional[str]) -> Optional[str]:
        return clean_description(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        return clean_tags(v)

    @model_validator(mode="after")
    def require_a_field(self) -> "BoxUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class BoxRead(BaseModel):
    id: str
    workspace_id: str
    location_id: Optional[str] = None
    short_id: str
    name: str
    description: Optional[str] = None
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BoxLocationSummary(BaseModel):
    id: str
    name: str
    path: str

    model_config = {"from_attributes": True}


class BoxQrCodeSummary(BaseModel):
    id: str
    short_id: str
    status: str

    model_config = {"from_attributes": True}


class BoxDetail(BoxRead):
    location: Optional[BoxLocationSummary] = None
    qr_code: Optional[BoxQrCodeSummary] = None


class BoxList(BaseModel):
    data: list[BoxRead]
    meta: PageMeta


class DuplicateCheckRequest(BaseModel):
    workspace_id: str
    name: str
    exclude_box_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)


class DuplicateCheckResponse(BaseModel):
    is_duplicate: bool
    count: int
