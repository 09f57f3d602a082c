"""Project board schemas: projects, columns and tasks."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ChecklistItem(BaseModel):
    text: str
    done: bool = False


class TaskCreate(BaseModel):
    """Schema for creating a task."""

    title: str | None = Field(None, max_length=255)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    start_date: datetime | None = None
    estimated_time: int | None = Field(None, ge=0)
    actual_time: int | None = Field(None, ge=0)
    tags: list[str] = Field(default_factory=list)
    checklist: list[ChecklistItem] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Schema for updating a task; unset fields are left untouched."""

    title: str | None = Field(None, max_length=255)
    description: str | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    start_date: datetime | None = None
    estimated_time: int | None = Field(None, ge=0)
    actual_time: int | None = Field(None, ge=0)
    tags: list[str] | None = None
    checklist: list[ChecklistItem] | None = None
    column_id: UUID | None = None
    order: int | None = Field(None, ge=0)


class TaskMove(BaseModel):
    id: UUID
    column_id: UUID
    order: int = Field(..., ge=0)


class TaskBatchUpdate(BaseModel):
    """Schema for drag-and-drop reordering."""

    tasks: list[TaskMove]


class TaskResponse(BaseModel):
    """Schema for task response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None = None
    priority: str
    order: int
    due_date: datetime | None = None
    start_date: datetime | None = None
    estimated_time: int | None = None
    actual_time: int | None = None
    tags: list[str] = Field(default_factory=list)
    checklist: list[ChecklistItem] = Field(default_factory=list)
    column_id: UUID
    created_at: datetime
    updated_at: datetime


class ColumnCreate(BaseModel):
    title: str | None = Field(None, max_length=255)


class ColumnUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    order: int | None = Field(None, ge=0)


class ColumnResponse(BaseModel):
    """Schema for a board column with its tasks."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    order: int
    project_id: UUID
    tasks: list[TaskResponse] = Field(default_factory=list)


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    title: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=2000)


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    status: str | None = Field(None, max_length=50)


class ProjectResponse(BaseModel):
    """Schema for project response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class ProjectBoardResponse(ProjectResponse):
    """Schema for a project with its full board."""

    columns: list[ColumnResponse] = Field(default_factory=list)


class ColumnSummary(BaseModel):
    id: UUID
    title: str
    order: int
    task_count: int = 0


class ProjectSummary(ProjectResponse):
    columns: list[ColumnSummary] = Field(default_factory=list)
    task_count: int = 0


class ProjectData(BaseModel):
    project: ProjectBoardResponse


class ProjectListData(BaseModel):
    projects: list[ProjectSummary]


class ColumnData(BaseModel):
    column: ColumnResponse


class TaskData(BaseModel):
    task: TaskResponse
