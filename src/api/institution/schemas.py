"""Institution API schemas (combined models/requests)."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.api.classroom.schemas import ClassroomModel
from src.api.core.messages import APIResponse
from src.database.models import InstitutionStatus
from src.modules.institution.models import UserSpec


class InstitutionModel(BaseModel):
    id: UUID
    name: str
    address: str | None = None
    description: str | None = None
    email: str | None = None
    phone: str | None = None
    status: InstitutionStatus
    user_ids: list[str]
    classrooms: list[ClassroomModel] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InstitutionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: str | None = Field(None, max_length=500)
    description: str | None = None
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    users: list[UserSpec] = Field(default_factory=list)

    def institution_attributes(self) -> dict:
        return self.model_dump(exclude={"users"})


class InstitutionUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    address: str | None = Field(None, max_length=500)
    description: str | None = None
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            raise ValueError("name cannot be null")
        return v


class InstitutionStatusUpdateRequest(BaseModel):
    status: Literal["active", "inactive"]


InstitutionResponse = APIResponse[InstitutionModel]
InstitutionListResponse = APIResponse[list[InstitutionModel]]
