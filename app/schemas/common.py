"""Response envelope shared by every endpoint."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Schema for the ``{success, message, data}`` success envelope."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class MessageResponse(BaseModel):
    """Schema for responses that carry no data."""

    success: bool = True
    message: str
