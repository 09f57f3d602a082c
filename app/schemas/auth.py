"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class Principal(BaseModel):
    """Identity attached to a request after token verification."""

    uid: str
    email: str
    name: str | None = None
    picture: str | None = None
    provider: str = "google"
    is_admin: bool = False


class AdminLogin(BaseModel):
    """Schema for the privileged fallback login."""

    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    provider_uid: str
    email: str
    name: str
    picture: str | None = None
    provider: str
    is_admin: bool = False
    created_at: datetime


class UserData(BaseModel):
    user: UserResponse


class AdminTokenData(BaseModel):
    """Schema for the admin login result."""

    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse
