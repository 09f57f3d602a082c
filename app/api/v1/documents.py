"""Document endpoints."""

import logging
import re
from typing import Optional
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import find_owned_feature, get_current_user, get_owned_document
from app.core.errors import ContentStoreError
from app.db.postgres import get_db
from app.models.sql.document import Document
from app.models.sql.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.document import (
    BatchDelete,
    BatchDeleteFailure,
    BatchDeleteResult,
    DocumentCreate,
    DocumentData,
    DocumentDetailResponse,
    DocumentListData,
    DocumentResponse,
    DocumentUpdate,
)
from app.services.content_store import ContentStore, get_content_store
from app.services.markdown_docx import DOCX_MEDIA_TYPE, markdown_to_docx

logger = logging.getLogger(__name__)

router = APIRouter()

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\r\n]+')


def _detail(document: Document, content: str) -> DocumentDetailResponse:
    detail = DocumentDetailResponse.model_validate(document)
    detail.content = content
    return detail


def attachment_header(title: str) -> str:
    """Content-Disposition value for downloading ``<title>.docx``."""
    name = _UNSAFE_FILENAME_RE.sub("_", title).strip() or "document"
    filename = f"{name}.docx"
    if filename.isascii():
        return f'attachment; filename="{filename}"'
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.post(
    "",
    response_model=ApiResponse[DocumentData],
    status_code=status.HTTP_201_CREATED,
    summary="Create a document",
)
async def create_document(
    doc_data: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
) -> ApiResponse[DocumentData]:
    """Create a document and store its body."""
    if doc_data.feature_id is not None:
        await find_owned_feature(db, doc_data.feature_id, current_user)

    document = Document(
        title=doc_data.title or "Untitled",
        status=doc_data.status or "draft",
        is_favorite=doc_data.is_favorite,
        feature_id=doc_data.feature_id,
        user_id=current_user.id,
    )
    db.add(document)
    await db.flush()

    document.content_ref = await store.save(document.id, doc_data.content)
    await db.flush()
    await db.refresh(document)

    return ApiResponse(
        message="Document created",
        data=DocumentData(document=_detail(document, doc_data.content)),
    )


@router.get(
    "",
    response_model=ApiResponse[DocumentListData],
    summary="List user's documents",
)
async def list_documents(
    feature_id: Optional[UUID] = None,
    favorite: Optional[bool] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DocumentListData]:
    """List document metadata, most recently updated first."""
    query = select(Document).where(Document.user_id == current_user.id)
    if feature_id is not None:
        query = query.where(Document.feature_id == feature_id)
    if favorite is not None:
        query = query.where(Document.is_favorite == favorite)
    query = query.order_by(Document.updated_at.desc())

    result = await db.execute(query)
    documents = result.scalars().all()

    return ApiResponse(
        data=DocumentListData(
            documents=[DocumentResponse.model_validate(d) for d in documents]
        )
    )


@router.post(
    "/batch-delete",
    response_model=ApiResponse[BatchDeleteResult],
    summary="Delete several documents",
)
async def batch_delete_documents(
    batch: BatchDelete,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
) -> ApiResponse[BatchDeleteResult]:
    """Delete each owned document; unknown ids are reported, not fatal."""
    requested = list(dict.fromkeys(batch.ids))
    result = await db.execute(
        select(Document).where(
            Document.id.in_(requested),
            Document.user_id == current_user.id,
        )
    )
    owned = {document.id: document for document in result.scalars().all()}

    outcome = BatchDeleteResult()
    for doc_id in requested:
        document = owned.get(doc_id)
        if document is None:
            outcome.failed.append(BatchDeleteFailure(id=doc_id, reason="Document not found"))
            continue
        await db.delete(document)
        outcome.deleted.append(doc_id)

    await db.flush()
    # Rows must be gone for good before their bodies are dropped
    await db.commit()

    if outcome.deleted:
        background_tasks.add_task(store.delete_many, list(outcome.deleted))

    logger.info(
        "Batch delete for user %s: %d deleted, %d failed",
        current_user.id,
        len(outcome.deleted),
        len(outcome.failed),
    )
    return ApiResponse(message="Documents deleted", data=outcome)


@router.get(
    "/{doc_id}",
    response_model=ApiResponse[DocumentData],
    summary="Get a document",
)
async def get_document(
    document: Document = Depends(get_owned_document),
    store: ContentStore = Depends(get_content_store),
) -> ApiResponse[DocumentData]:
    """Get document metadata together with its body."""
    content = await store.get(document.id)
    return ApiResponse(data=DocumentData(document=_detail(document, content)))


@router.put(
    "/{doc_id}",
    response_model=ApiResponse[DocumentData],
    summary="Update a document",
)
async def update_document(
    update_data: DocumentUpdate,
    document: Document = Depends(get_owned_document),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
) -> ApiResponse[DocumentData]:
    """Update document metadata and, when given, its body."""
    if "feature_id" in update_data.model_fields_set:
        if update_data.feature_id is not None:
            await find_owned_feature(db, update_data.feature_id, current_user)
        document.feature_id = update_data.feature_id

    if update_data.title is not None:
        document.title = update_data.title
    if update_data.status is not None:
        document.status = update_data.status
    if update_data.is_favorite is not None:
        document.is_favorite = update_data.is_favorite

    if update_data.content is not None:
        document.content_ref = await store.save(document.id, update_data.content)
        content = update_data.content
    else:
        content = await store.get(document.id)

    await db.flush()
    await db.refresh(document)

    return ApiResponse(
        message="Document updated",
        data=DocumentData(document=_detail(document, content)),
    )


@router.delete(
    "/{doc_id}",
    response_model=MessageResponse,
    summary="Delete a document",
)
async def delete_document(
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
) -> MessageResponse:
    """Delete a document and its stored body."""
    doc_id = document.id
    await db.delete(document)
    await db.flush()
    await db.commit()

    try:
        await store.delete(doc_id)
    except ContentStoreError as e:
        logger.warning("Document %s deleted but its content was not: %s", doc_id, e)

    return MessageResponse(message="Document deleted")


@router.get(
    "/{doc_id}/export/docx",
    response_class=Response,
    summary="Export a document as DOCX",
)
async def export_docx(
    document: Document = Depends(get_owned_document),
    store: ContentStore = Depends(get_content_store),
) -> Response:
    """Convert the document's Markdown body to a Word file."""
    content = await store.get(document.id)
    payload = await run_in_threadpool(markdown_to_docx, content, document.title)

    return Response(
        content=payload,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": attachment_header(document.title)},
    )
