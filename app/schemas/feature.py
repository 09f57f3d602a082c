"""Feature schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.document import DocumentResponse


class FeatureCreate(BaseModel):
    """Schema for creating a feature."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)


class FeatureUpdate(BaseModel):
    """Schema for updating a feature."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    status: str | None = Field(None, max_length=50)


class FeatureResponse(BaseModel):
    """Schema for feature response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class FeatureSummary(FeatureResponse):
    document_count: int = 0


class FeatureDetailResponse(FeatureResponse):
    documents: list[DocumentResponse] = Field(default_factory=list)


class FeatureData(BaseModel):
    feature: FeatureResponse


class FeatureDetailData(BaseModel):
    feature: FeatureDetailResponse


class FeatureListData(BaseModel):
    features: list[FeatureSummary]
