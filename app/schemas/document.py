"""Document schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DocumentCreate(BaseModel):
    """Schema for creating a document."""

    title: str | None = Field(None, max_length=255)
    content: str = ""
    status: str | None = Field(None, max_length=50)
    is_favorite: bool = False
    feature_id: UUID | None = None


class DocumentUpdate(BaseModel):
    """Schema for updating a document."""

    title: str | None = Field(None, max_length=255)
    content: str | None = None
    status: str | None = Field(None, max_length=50)
    is_favorite: bool | None = None
    feature_id: UUID | None = None


class DocumentResponse(BaseModel):
    """Schema for document metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: str
    is_favorite: bool
    feature_id: UUID | None = None
    content_ref: str | None = None
    created_at: datetime
    updated_at: datetime


class DocumentDetailResponse(DocumentResponse):
    """Schema for a document with its body."""

    content: str = ""


class DocumentData(BaseModel):
    document: DocumentDetailResponse


class DocumentListData(BaseModel):
    documents: list[DocumentResponse]


class BatchDelete(BaseModel):
    """Schema for deleting several documents."""

    ids: list[UUID] = Field(..., min_length=1, max_length=100)


class BatchDeleteFailure(BaseModel):
    id: UUID
    reason: str


class BatchDeleteResult(BaseModel):
    deleted: list[UUID] = Field(default_factory=list)
    failed: list[BatchDeleteFailure] = Field(default_factory=list)
