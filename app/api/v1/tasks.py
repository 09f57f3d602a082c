"""Board task endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_owned_column, get_owned_task
from app.db.postgres import get_db
from app.models.sql.board import BoardColumn, Project, Task
from app.models.sql.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.project import (
    TaskBatchUpdate,
    TaskCreate,
    TaskData,
    TaskResponse,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Nullable fields that an explicit null clears
CLEARABLE_FIELDS = ("description", "due_date", "start_date", "estimated_time", "actual_time")


@router.post(
    "/columns/{column_id}/tasks",
    response_model=ApiResponse[TaskData],
    status_code=status.HTTP_201_CREATED,
    summary="Create a task in a column",
)
async def create_task(
    task_data: TaskCreate,
    column: BoardColumn = Depends(get_owned_column),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TaskData]:
    """Append a task at the bottom of a column."""
    max_order = (
        await db.execute(select(func.max(Task.order)).where(Task.column_id == column.id))
    ).scalar()

    task = Task(
        title=task_data.title or "New Task",
        description=task_data.description,
        priority=task_data.priority.value,
        order=(max_order if max_order is not None else -1) + 1,
        due_date=task_data.due_date,
        start_date=task_data.start_date,
        estimated_time=task_data.estimated_time,
        actual_time=task_data.actual_time,
        tags=list(task_data.tags),
        checklist=[item.model_dump() for item in task_data.checklist],
        column_id=column.id,
    )
    db.add(task)
    await db.flush()
    await db.refresh(task)

    return ApiResponse(
        message="Task created",
        data=TaskData(task=TaskResponse.model_validate(task)),
    )


@router.put(
    "/tasks/batch",
    response_model=MessageResponse,
    summary="Move and reorder several tasks",
)
async def batch_update_tasks(
    batch: TaskBatchUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Apply drag-and-drop moves; all tasks and columns must be owned."""
    if not batch.tasks:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tasks array is required",
        )

    task_ids = {move.id for move in batch.tasks}
    column_ids = {move.column_id for move in batch.tasks}

    result = await db.execute(
        select(Task)
        .join(BoardColumn, Task.column_id == BoardColumn.id)
        .join(Project, BoardColumn.project_id == Project.id)
        .where(Task.id.in_(task_ids), Project.user_id == current_user.id)
    )
    tasks = {task.id: task for task in result.scalars().all()}

    result = await db.execute(
        select(BoardColumn.id)
        .join(Project, BoardColumn.project_id == Project.id)
        .where(BoardColumn.id.in_(column_ids), Project.user_id == current_user.id)
    )
    owned_columns = set(result.scalars().all())

    if len(tasks) != len(task_ids) or owned_columns != column_ids:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="One or more tasks or columns not found",
        )

    for move in batch.tasks:
        task = tasks[move.id]
        task.column_id = move.column_id
        task.order = move.order

    await db.flush()
    logger.info("Moved %d tasks for user %s", len(batch.tasks), current_user.id)
    return MessageResponse(message="Tasks updated")


@router.put(
    "/tasks/{task_id}",
    response_model=ApiResponse[TaskData],
    summary="Update a task",
)
async def update_task(
    update_data: TaskUpdate,
    task: Task = Depends(get_owned_task),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[TaskData]:
    """Update a task, optionally moving it to another column."""
    if update_data.column_id is not None and update_data.column_id != task.column_id:
        project_id = (
            await db.execute(
                select(BoardColumn.project_id).where(BoardColumn.id == task.column_id)
            )
        ).scalar_one()
        target = (
            await db.execute(
                select(BoardColumn).where(
                    BoardColumn.id == update_data.column_id,
                    BoardColumn.project_id == project_id,
                )
            )
        ).scalar_one_or_none()

        if target is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Target column not found in this project",
            )
        task.column_id = target.id

    for field in CLEARABLE_FIELDS:
        if field in update_data.model_fields_set:
            setattr(task, field, getattr(update_data, field))

    if update_data.title is not None:
        task.title = update_data.title
    if update_data.priority is not None:
        task.priority = update_data.priority.value
    if update_data.tags is not None:
        task.tags = list(update_data.tags)
    if update_data.checklist is not None:
        task.checklist = [item.model_dump() for item in update_data.checklist]
    if update_data.order is not None:
        task.order = update_data.order

    await db.flush()
    await db.refresh(task)

    return ApiResponse(
        message="Task updated",
        data=TaskData(task=TaskResponse.model_validate(task)),
    )


@router.delete(
    "/tasks/{task_id}",
    response_model=MessageResponse,
    summary="Delete a task",
)
async def delete_task(
    task: Task = Depends(get_owned_task),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a task."""
    await db.delete(task)
    await db.flush()
    return MessageResponse(message="Task deleted")
