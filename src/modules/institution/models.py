"""Domain models for institution creation."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserSpec(BaseModel):
    """User to provision in the User service; unknown fields pass through."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    role: str = Field(..., min_length=1, max_length=50)
    credentials_ref: str | None = None
