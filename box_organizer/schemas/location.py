"""
schemas/location.py
-------------------
Pydantic models for the location hierarchy.

parent_id is not stored; it is derived from the materialized path and passed
in by the route when the response is built.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from box_organizer.models.location import Location
from box_organizer.schemas.common import clean_description, clean_name


class LocationCreate(BaseModel):
    workspace_id: str
    name: str
    description: Optional[str] = None
    parent_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: Optional[str]) -> Optional[str]:
        return clean_description(v)


class LocationUpdate(BaseModel):
    """PATCH body: at least one of name / description."""
    name: Optional[str] = None
    description: Optional[str] = None

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

    @model_validator(mode="after")
    def require_a_field(self) -> "LocationUpdate":
        if not self.model_fields_set & {"name", "description"}:
            raise ValueError("At least one field (name or description) must be provided")
        return self


class LocationRead(BaseModel):
    id: str
    workspace_id: str
    parent_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    path: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, location: Location, parent_id: Optional[str] = None) -> "LocationRead":
        return cls(
            id=location.id,
            workspace_id=location.workspace_id,
            parent_id=parent_id,
            name=location.name,
            description=location.description,
            path=location.path,
            created_at=location.created_at,
            updated_at=location.updated_at,
        )


class LocationDeleted(BaseModel):
    id: str
    deleted_locations: int
    unassigned_boxes: int
