"""Project and board column endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_current_user, get_owned_column, get_owned_project
from app.db.postgres import get_db
from app.models.sql.board import DEFAULT_COLUMN_TITLES, BoardColumn, Project, Task
from app.models.sql.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.project import (
    ColumnCreate,
    ColumnData,
    ColumnResponse,
    ColumnSummary,
    ColumnUpdate,
    ProjectBoardResponse,
    ProjectCreate,
    ProjectData,
    ProjectListData,
    ProjectSummary,
    ProjectUpdate,
)

router = APIRouter()


async def load_board(db: AsyncSession, project_id: UUID) -> Project:
    """Load a project with its ordered columns and tasks."""
    result = await db.execute(
        select(Project)
        .where(Project.id == project_id)
        .options(selectinload(Project.columns).selectinload(BoardColumn.tasks))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def load_column(db: AsyncSession, column_id: UUID) -> BoardColumn:
    """Load a column with its ordered tasks."""
    result = await db.execute(
        select(BoardColumn)
        .where(BoardColumn.id == column_id)
        .options(selectinload(BoardColumn.tasks))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.post(
    "",
    response_model=ApiResponse[ProjectData],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new project",
)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ProjectData]:
    """Create a project with the default board columns."""
    project = Project(
        title=project_data.title or "Untitled Project",
        description=project_data.description,
        user_id=current_user.id,
    )
    project.columns = [
        BoardColumn(title=title, order=order)
        for order, title in enumerate(DEFAULT_COLUMN_TITLES)
    ]
    db.add(project)
    await db.flush()

    project = await load_board(db, project.id)
    return ApiResponse(
        message="Project created",
        data=ProjectData(project=ProjectBoardResponse.model_validate(project)),
    )


@router.get(
    "",
    response_model=ApiResponse[ProjectListData],
    summary="List user's projects",
)
async def list_projects(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ProjectListData]:
    """List projects with their columns and task counts."""
    result = await db.execute(
        select(Project)
        .where(Project.user_id == current_user.id)
        .options(selectinload(Project.columns))
        .order_by(Project.updated_at.desc())
    )
    projects = result.scalars().all()

    count_result = await db.execute(
        select(Task.column_id, func.count(Task.id))
        .join(BoardColumn, Task.column_id == BoardColumn.id)
        .join(Project, BoardColumn.project_id == Project.id)
        .where(Project.user_id == current_user.id)
        .group_by(Task.column_id)
    )
    task_counts = {column_id: count for column_id, count in count_result.all()}

    items = []
    for project in projects:
        columns = [
            ColumnSummary(
                id=column.id,
                title=column.title,
                order=column.order,
                task_count=task_counts.get(column.id, 0),
            )
            for column in project.columns
        ]
        items.append(
            ProjectSummary(
                id=project.id,
                title=project.title,
                description=project.description,
                status=project.status,
                created_at=project.created_at,
                updated_at=project.updated_at,
                columns=columns,
                task_count=sum(column.task_count for column in columns),
            )
        )

    return ApiResponse(data=ProjectListData(projects=items))


@router.get(
    "/{project_id}",
    response_model=ApiResponse[ProjectData],
    summary="Get a project board",
)
async def get_project(
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ProjectData]:
    """Get a project with all columns and tasks."""
    project = await load_board(db, project.id)
    return ApiResponse(
        data=ProjectData(project=ProjectBoardResponse.model_validate(project))
    )


@router.put(
    "/{project_id}",
    response_model=ApiResponse[ProjectData],
    summary="Update a project",
)
async def update_project(
    update_data: ProjectUpdate,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ProjectData]:
    """Update project details."""
    if update_data.title is not None:
        project.title = update_data.title
    if update_data.description is not None:
        project.description = update_data.description
    if update_data.status is not None:
        project.status = update_data.status

    await db.flush()
    await db.refresh(project)

    project = await load_board(db, project.id)
    return ApiResponse(
        message="Project updated",
        data=ProjectData(project=ProjectBoardResponse.model_validate(project)),
    )


@router.delete(
    "/{project_id}",
    response_model=MessageResponse,
    summary="Delete a project",
)
async def delete_project(
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a project together with its columns and tasks."""
    await db.delete(project)
    await db.flush()
    return MessageResponse(message="Project deleted")


@router.post(
    "/{project_id}/columns",
    response_model=ApiResponse[ColumnData],
    status_code=status.HTTP_201_CREATED,
    summary="Add a column to a project",
)
async def create_column(
    column_data: ColumnCreate,
    project: Project = Depends(get_owned_project),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ColumnData]:
    """Append a column after the project's last column."""
    max_order = (
        await db.execute(
            select(func.max(BoardColumn.order)).where(BoardColumn.project_id == project.id)
        )
    ).scalar()

    column = BoardColumn(
        title=column_data.title or "New Column",
        order=(max_order if max_order is not None else -1) + 1,
        project_id=project.id,
    )
    db.add(column)
    await db.flush()

    column = await load_column(db, column.id)
    return ApiResponse(
        message="Column created",
        data=ColumnData(column=ColumnResponse.model_validate(column)),
    )


@router.put(
    "/columns/{column_id}",
    response_model=ApiResponse[ColumnData],
    summary="Update a column",
)
async def update_column(
    update_data: ColumnUpdate,
    column: BoardColumn = Depends(get_owned_column),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ColumnData]:
    """Rename or reorder a column."""
    if update_data.title is not None:
        column.title = update_data.title
    if update_data.order is not None:
        column.order = update_data.order

    await db.flush()

    column = await load_column(db, column.id)
    return ApiResponse(
        message="Column updated",
        data=ColumnData(column=ColumnResponse.model_validate(column)),
    )


@router.delete(
    "/columns/{column_id}",
    response_model=MessageResponse,
    summary="Delete a column",
)
async def delete_column(
    column: BoardColumn = Depends(get_owned_column),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a column and its tasks."""
    await db.delete(column)
    await db.flush()
    return MessageResponse(message="Column deleted")
