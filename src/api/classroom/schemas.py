"""Classroom API schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.api.core.messages import APIResponse
from src.database.models import InstitutionStatus


class ClassroomModel(BaseModel):
    id: UUID
    institution_id: UUID
    name: str
    type: str
    capacity: int | None = None
    status: InstitutionStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClassroomCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: str = Field(..., min_length=1, max_length=50)
    capacity: int | None = Field(None, ge=0)


class ClassroomUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    type: str | None = Field(None, min_length=1, max_length=50)
    capacity: int | None = Field(None, ge=0)

    @field_validator("name", "type")
    @classmethod
    def validate_required(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ClassroomStatusUpdateRequest(BaseModel):
    status: Literal["active", "inactive"]


ClassroomResponse = APIResponse[ClassroomModel]
ClassroomListResponse = APIResponse[list[ClassroomModel]]
