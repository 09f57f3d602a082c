"""API dependencies for dependency injection."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import verify_access_token, verify_google_token
from app.db.postgres import get_db
from app.models.sql.board import BoardColumn, Project, Task
from app.models.sql.document import Document
from app.models.sql.feature import Feature
from app.models.sql.user import User
from app.schemas.auth import Principal

logger = logging.getLogger(__name__)

# Security scheme; missing credentials are reported by get_current_principal
security = HTTPBearer(auto_error=False)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def authenticate_token(token: str) -> Principal:
    """Resolve a bearer token to a principal.

    The identity provider is tried first, then locally signed tokens.
    Raises ValueError when neither accepts the token.
    """
    try:
        claims = await run_in_threadpool(verify_google_token, token)
        return Principal(
            uid=claims["sub"],
            email=claims.get("email", ""),
            name=claims.get("name"),
            picture=claims.get("picture"),
            provider="google",
        )
    except ValueError as google_error:
        logger.debug("Identity provider rejected token: %s", google_error)

    payload = verify_access_token(token)
    return Principal(
        uid=payload["sub"],
        email=payload.get("email", ""),
        name=payload.get("name"),
        picture=payload.get("picture"),
        provider="local",
        is_admin=bool(payload.get("is_admin", False)),
    )


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Verify the bearer credential and return the principal."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid authorization header")

    try:
        return await authenticate_token(credentials.credentials)
    except ValueError as e:
        logger.info("Token verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid or expired token", "error": str(e)},
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get the stored user for the current principal."""
    result = await db.execute(select(User).where(User.provider_uid == principal.uid))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return user


async def get_owned_document(
    doc_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Document:
    """Return the document if it belongs to the current user, else 404."""
    result = await db.execute(
        select(Document).where(
            Document.id == doc_id,
            Document.user_id == current_user.id,
        )
    )
    document = result.scalar_one_or_none()

    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )

    return document


async def find_owned_feature(
    db: AsyncSession, feature_id: UUID, user: User
) -> Feature:
    result = await db.execute(
        select(Feature).where(Feature.id == feature_id, Feature.user_id == user.id)
    )
    feature = result.scalar_one_or_none()

    if feature is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Feature not found",
        )

    return feature


async def get_owned_feature(
    feature_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Feature:
    """Return the feature if it belongs to the current user, else 404."""
    return await find_owned_feature(db, feature_id, current_user)


async def get_owned_project(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Project:
    """Return the project if it belongs to the current user, else 404."""
    result = await db.execute(
        select(Project).where(
            Project.id == project_id,
            Project.user_id == current_user.id,
        )
    )
    project = result.scalar_one_or_none()

    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )

    return project


async def get_owned_column(
    column_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BoardColumn:
    """Return the column if its project belongs to the current user, else 404."""
    result = await db.execute(
        select(BoardColumn)
        .join(Project, BoardColumn.project_id == Project.id)
        .where(
            BoardColumn.id == column_id,
            Project.user_id == current_user.id,
        )
    )
    column = result.scalar_one_or_none()

    if column is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Column not found",
        )

    return column


async def get_owned_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Task:
    """Return the task if its column's project belongs to the current user."""
    result = await db.execute(
        select(Task)
        .join(BoardColumn, Task.column_id == BoardColumn.id)
        .join(Project, BoardColumn.project_id == Project.id)
        .where(
            Task.id == task_id,
            Project.user_id == current_user.id,
        )
    )
    task = result.scalar_one_or_none()

    if task is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found",
        )

    return task
