"""Feature endpoints."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_owned_feature
from app.db.postgres import get_db
from app.models.sql.document import Document
from app.models.sql.feature import Feature
from app.models.sql.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.document import DocumentResponse
from app.schemas.feature import (
    FeatureCreate,
    FeatureData,
    FeatureDetailData,
    FeatureDetailResponse,
    FeatureListData,
    FeatureResponse,
    FeatureSummary,
    FeatureUpdate,
)
from app.services.content_store import ContentStore, get_content_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[FeatureData],
    status_code=status.HTTP_201_CREATED,
    summary="Create a feature",
)
async def create_feature(
    feature_data: FeatureCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FeatureData]:
    """Create a new feature."""
    feature = Feature(
        title=feature_data.title,
        description=feature_data.description,
        user_id=current_user.id,
    )
    db.add(feature)
    await db.flush()
    await db.refresh(feature)

    return ApiResponse(
        message="Feature created",
        data=FeatureData(feature=FeatureResponse.model_validate(feature)),
    )


@router.get(
    "",
    response_model=ApiResponse[FeatureListData],
    summary="List user's features",
)
async def list_features(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FeatureListData]:
    """List features with the number of documents in each."""
    document_count = (
        select(func.count(Document.id))
        .where(Document.feature_id == Feature.id)
        .correlate(Feature)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Feature, document_count)
        .where(Feature.user_id == current_user.id)
        .order_by(Feature.updated_at.desc())
    )

    features = []
    for feature, count in result.all():
        summary = FeatureSummary.model_validate(feature)
        summary.document_count = count or 0
        features.append(summary)

    return ApiResponse(data=FeatureListData(features=features))


@router.get(
    "/{feature_id}",
    response_model=ApiResponse[FeatureDetailData],
    summary="Get a feature with its documents",
)
async def get_feature(
    feature: Feature = Depends(get_owned_feature),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FeatureDetailData]:
    """Get a feature and the metadata of its documents."""
    result = await db.execute(
        select(Document)
        .where(Document.feature_id == feature.id)
        .order_by(Document.updated_at.desc())
    )
    documents = result.scalars().all()

    detail = FeatureDetailResponse(
        **FeatureResponse.model_validate(feature).model_dump(),
        documents=[DocumentResponse.model_validate(d) for d in documents],
    )
    return ApiResponse(data=FeatureDetailData(feature=detail))


@router.put(
    "/{feature_id}",
    response_model=ApiResponse[FeatureData],
    summary="Update a feature",
)
async def update_feature(
    update_data: FeatureUpdate,
    feature: Feature = Depends(get_owned_feature),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FeatureData]:
    """Update feature details."""
    if update_data.title is not None:
        feature.title = update_data.title
    if update_data.description is not None:
        feature.description = update_data.description
    if update_data.status is not None:
        feature.status = update_data.status

    await db.flush()
    await db.refresh(feature)

    return ApiResponse(
        message="Feature updated",
        data=FeatureData(feature=FeatureResponse.model_validate(feature)),
    )


@router.delete(
    "/{feature_id}",
    response_model=MessageResponse,
    summary="Delete a feature",
)
async def delete_feature(
    background_tasks: BackgroundTasks,
    feature: Feature = Depends(get_owned_feature),
    db: AsyncSession = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
) -> MessageResponse:
    """Delete a feature and its documents, then drop their stored bodies."""
    result = await db.execute(select(Document.id).where(Document.feature_id == feature.id))
    doc_ids = list(result.scalars().all())
    feature_id = feature.id

    await db.delete(feature)
    await db.flush()
    # Rows must be gone for good before their bodies are dropped
    await db.commit()

    if doc_ids:
        background_tasks.add_task(store.delete_many, doc_ids)
        logger.info("Feature %s deleted with %d documents", feature_id, len(doc_ids))

    return MessageResponse(message="Feature deleted")
